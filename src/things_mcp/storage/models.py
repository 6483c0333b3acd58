#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Data model definitions
Read-only snapshots of Things records, built fresh for every request
"""

from dataclasses import dataclass, field, asdict
from datetime import date
from enum import Enum
from typing import Optional, Dict, Any, List

from ..core.codec import Status, Bucket


def _plain(value: Any) -> Any:
    """asdict() value converted to JSON-friendly primitives"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


@dataclass
class ChecklistItem:
    """Checklist item of a todo"""
    uuid: str
    title: Optional[str] = None
    completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Todo:
    """
    Todo data model

    `when` is the scheduling bucket and `start_date` the decoded calendar start
    date. Which one is authoritative depends on the store's scheduling policy,
    so both are kept as read.
    """
    uuid: str
    title: Optional[str] = None
    notes: Optional[str] = None
    status: Status = Status.UNKNOWN
    project: Optional[str] = None
    area: Optional[str] = None
    when: Bucket = Bucket.UNKNOWN
    start_date: Optional[date] = None
    deadline: Optional[date] = None
    tags: List[str] = field(default_factory=list)
    checklist_items: List[ChecklistItem] = field(default_factory=list)
    created: Optional[date] = None
    modified: Optional[date] = None
    stopped: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return _plain(asdict(self))


@dataclass
class Project:
    """Project data model, todos is None unless explicitly requested"""
    uuid: str
    title: Optional[str] = None
    notes: Optional[str] = None
    status: Status = Status.UNKNOWN
    area: Optional[str] = None
    when: Bucket = Bucket.UNKNOWN
    start_date: Optional[date] = None
    deadline: Optional[date] = None
    tags: List[str] = field(default_factory=list)
    created: Optional[date] = None
    modified: Optional[date] = None
    todos: Optional[List[Todo]] = None

    def to_dict(self) -> Dict[str, Any]:
        return _plain(asdict(self))


@dataclass
class ProjectSummary:
    """Identifier and title of a project listed under an area"""
    uuid: str
    title: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Area:
    """Area data model"""
    uuid: str
    title: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    projects: Optional[List[ProjectSummary]] = None

    def to_dict(self) -> Dict[str, Any]:
        return _plain(asdict(self))


@dataclass
class Tag:
    """Tag data model, items is None unless explicitly requested"""
    uuid: str
    title: Optional[str] = None
    items: Optional[List[Todo]] = None

    def to_dict(self) -> Dict[str, Any]:
        return _plain(asdict(self))
