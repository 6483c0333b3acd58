#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Date and status codec
Converts the Things store's numeric encodings into calendar dates and enums

Two store generations disagree on how startDate/deadline are encoded; the
encoding in use is selected by configuration (see get_date_encoding).
"""

import re
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Optional, Union
from urllib.parse import unquote

from .errors import InvalidArgumentError
from ..utils.constants import (
    STATUS_CODES, STORED_BUCKET_CODES, DERIVED_BUCKET_CODES,
    TODAY_POLICY_DATE, PERIOD_UNIT_DAYS,
    DATE_ENCODING_DAY_COUNTER, DATE_ENCODING_JULIAN,
    DEFAULT_JULIAN_OFFSET, DEFAULT_DAY_COUNTER_EPOCH, DEFAULT_DAY_COUNTER_UNITS_PER_DAY,
)

Number = Union[int, float]

# date.toordinal() of a date plus this value is its chronological Julian day number
_ORDINAL_TO_JULIAN = 1721425

_PERIOD_PATTERN = re.compile(r'([0-9]+)([dwmy])')


class Status(Enum):
    """Todo/project status"""
    INCOMPLETE = "incomplete"
    COMPLETED = "completed"
    CANCELED = "canceled"
    UNKNOWN = "unknown"


class Bucket(Enum):
    """Coarse scheduling classification of a todo"""
    INBOX = "inbox"
    TODAY = "today"
    ANYTIME = "anytime"
    SOMEDAY = "someday"
    UNKNOWN = "unknown"


# ==================== Date Encodings ====================

class DayCounterEncoding:
    """Fixed-point day counter: units_per_day units per calendar day since epoch"""

    name = DATE_ENCODING_DAY_COUNTER

    def __init__(self, epoch: date = date.fromisoformat(DEFAULT_DAY_COUNTER_EPOCH),
                 units_per_day: int = DEFAULT_DAY_COUNTER_UNITS_PER_DAY):
        if units_per_day <= 0:
            raise ValueError(f"units_per_day must be positive: {units_per_day}")
        self.epoch = epoch
        self.units_per_day = units_per_day

    def decode(self, raw: Optional[Number]) -> Optional[date]:
        if raw is None:
            return None
        try:
            days = int(float(raw) // self.units_per_day)
            return self.epoch + timedelta(days=days)
        except (TypeError, ValueError, OverflowError):
            return None

    def encode(self, value: date) -> int:
        return (value - self.epoch).days * self.units_per_day

    def __repr__(self):
        return f"DayCounterEncoding(epoch={self.epoch.isoformat()}, units_per_day={self.units_per_day})"


class JulianDayEncoding:
    """Julian-day variant: raw value plus offset is a Julian day number"""

    name = DATE_ENCODING_JULIAN

    def __init__(self, offset: int = DEFAULT_JULIAN_OFFSET):
        self.offset = offset

    def decode(self, raw: Optional[Number]) -> Optional[date]:
        if raw is None:
            return None
        try:
            julian_day = int(float(raw)) + self.offset
            return date.fromordinal(julian_day - _ORDINAL_TO_JULIAN)
        except (TypeError, ValueError, OverflowError):
            return None

    def encode(self, value: date) -> int:
        return value.toordinal() + _ORDINAL_TO_JULIAN - self.offset

    def __repr__(self):
        return f"JulianDayEncoding(offset={self.offset})"


DateEncoding = Union[DayCounterEncoding, JulianDayEncoding]


def get_date_encoding(name: str, **options: Any) -> DateEncoding:
    """
    Build the scheduling date encoding selected by configuration

    Args:
        name: 'day_counter' or 'julian'
        **options: epoch/units_per_day for day_counter, offset for julian

    Returns:
        Encoding object with decode()/encode()
    """
    if name == DATE_ENCODING_DAY_COUNTER:
        epoch = options.get('epoch', DEFAULT_DAY_COUNTER_EPOCH)
        if isinstance(epoch, str):
            epoch = date.fromisoformat(epoch)
        return DayCounterEncoding(
            epoch=epoch,
            units_per_day=int(options.get('units_per_day', DEFAULT_DAY_COUNTER_UNITS_PER_DAY))
        )
    if name == DATE_ENCODING_JULIAN:
        return JulianDayEncoding(offset=int(options.get('offset', DEFAULT_JULIAN_OFFSET)))
    raise ValueError(f"Unknown date encoding: {name}")


def decode_scheduling_date(raw: Optional[Number], encoding: DateEncoding) -> Optional[date]:
    """Decode a startDate/deadline column value"""
    return encoding.decode(raw)


def decode_unix_timestamp(raw: Optional[Number]) -> Optional[date]:
    """Decode a seconds-since-epoch column value into a local calendar date"""
    if raw is None:
        return None
    try:
        return datetime.fromtimestamp(float(raw)).date()
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def encode_unix_timestamp(value: date) -> float:
    """Local midnight of a calendar date as seconds since epoch"""
    return datetime.combine(value, time.min).timestamp()


# ==================== Status / Bucket ====================

def decode_status(code: Any) -> Status:
    """0 incomplete, 2 canceled, 3 completed, anything else unknown"""
    for name, value in STATUS_CODES.items():
        if code == value and not isinstance(code, bool):
            return Status(name)
    return Status.UNKNOWN


def encode_status(status: str) -> Optional[int]:
    """Status name to store code, None when the name is not a status"""
    return STATUS_CODES.get(status)


def decode_bucket(code: Any, policy: Optional[str] = None) -> Bucket:
    """
    Decode TMTask.start into a scheduling bucket

    Args:
        code: Raw start column value
        policy: 'bucket' (default) uses 0-3 stored codes, 'date' uses the
            0-2 codes of stores where "today" is derived from startDate

    Returns:
        Bucket, UNKNOWN for unmapped codes
    """
    codes = DERIVED_BUCKET_CODES if policy == TODAY_POLICY_DATE else STORED_BUCKET_CODES
    if isinstance(code, bool) or not isinstance(code, int):
        return Bucket.UNKNOWN
    name = codes.get(code)
    return Bucket(name) if name else Bucket.UNKNOWN


# ==================== Text ====================

def decode_title(raw: Optional[str]) -> Optional[str]:
    """
    Reverse percent-encoding left in titles written through the URL scheme

    Malformed input is returned unchanged.
    """
    if raw is None:
        return None
    text = str(raw)
    if '%' not in text:
        return text
    try:
        return unquote(text, errors='strict')
    except (UnicodeDecodeError, ValueError):
        return text


def parse_period(text: Any) -> int:
    """
    Parse '<N><unit>' into a number of days

    Args:
        text: Period such as '3d', '2w', '1m', '1y'

    Returns:
        Number of days

    Raises:
        InvalidArgumentError: If text does not match <N>[dwmy]
    """
    match = _PERIOD_PATTERN.fullmatch(text) if isinstance(text, str) else None
    if not match:
        raise InvalidArgumentError(f"Invalid period format: {text}", {"period": text})

    number, unit = match.groups()
    return int(number) * PERIOD_UNIT_DAYS[unit]
