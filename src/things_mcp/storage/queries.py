#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Query builder
Builds parameterized read queries against the Things SQLite schema

Tables: TMTask (todos, projects, headings), TMArea, TMTag, TMTaskTag,
TMAreaTag and TMChecklistItem. Values supplied by callers are always bound
parameters; only column names and store codes appear in SQL text.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from ..core.codec import DateEncoding, encode_status
from ..core.errors import InvalidArgumentError
from ..utils.constants import (
    TYPE_TODO, TYPE_PROJECT, ITEM_TYPE_CODES,
    STATUS_INCOMPLETE, STATUS_CANCELED, STATUS_COMPLETED,
    TODAY_POLICY_BUCKET, TODAY_POLICY_DATE,
    DEFAULT_LOGBOOK_LIMIT, MIN_LOGBOOK_LIMIT, MAX_LOGBOOK_LIMIT,
)
from ..utils.helpers import parse_iso_date

TODO_COLUMNS = (
    'uuid, title, notes, status, type, project, area, start, startDate, deadline, '
    'creationDate, userModificationDate, stopDate'
)

PROJECT_COLUMNS = (
    'uuid, title, notes, status, area, start, startDate, deadline, '
    'creationDate, userModificationDate'
)

# Predicate that matches no rows
NO_ROWS = '0 = 1'


@dataclass(frozen=True)
class Query:
    """SQL text plus bound parameters"""
    sql: str
    params: Tuple[Any, ...] = ()


def clamp_limit(limit: Any) -> int:
    """Logbook limit clamped to [1, 100], default 50"""
    if limit is None:
        return DEFAULT_LOGBOOK_LIMIT
    try:
        value = int(limit)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"Invalid limit: {limit}", {"limit": limit})
    return max(MIN_LOGBOOK_LIMIT, min(MAX_LOGBOOK_LIMIT, value))


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so user text matches literally"""
    return text.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


class QueryBuilder:
    """Builds the read query for each list view and filter combination"""

    def __init__(self, encoding: DateEncoding, today_policy: str = TODAY_POLICY_BUCKET):
        self.encoding = encoding
        self.today_policy = today_policy

    # ==================== Helpers ====================

    def _select_todos(self, conditions: List[str], order_by: str,
                      params: Tuple[Any, ...] = (), limit: bool = False) -> Query:
        where = ' AND '.join(conditions)
        sql = f'SELECT {TODO_COLUMNS} FROM TMTask WHERE {where} ORDER BY {order_by}'
        if limit:
            sql += ' LIMIT ?'
        return Query(sql, params)

    def _active_todo(self, *extra: str) -> List[str]:
        """type = todo AND trashed = false, plus extra predicates"""
        return [f'type = {TYPE_TODO}', 'trashed = 0', *extra]

    def _open_todo(self, *extra: str) -> List[str]:
        return self._active_todo(f'status = {STATUS_INCOMPLETE}', *extra)

    def _encode_date(self, value: Any, field_name: str) -> int:
        parsed = value if isinstance(value, date) else parse_iso_date(value)
        if parsed is None:
            raise InvalidArgumentError(
                f"Invalid {field_name}: {value} (expected YYYY-MM-DD)", {field_name: value}
            )
        return self.encoding.encode(parsed)

    # ==================== Todos ====================

    def todos(self, project_uuid: Optional[str] = None) -> Query:
        conditions = self._active_todo()
        params: Tuple[Any, ...] = ()
        if project_uuid:
            conditions.append('project = ?')
            params = (project_uuid,)
        return self._select_todos(conditions, '"index"', params)

    def inbox(self, today: date) -> Query:
        return self._select_todos(self._open_todo('start = 0'), '"index"')

    def today(self, today: date) -> Query:
        if self.today_policy == TODAY_POLICY_DATE:
            return self._select_todos(
                self._open_todo('start IN (1, 2)', 'startDate IS NOT NULL', 'startDate <= ?'),
                'startDate, "index"',
                (self.encoding.encode(today),)
            )
        return self._select_todos(self._open_todo('start = 1'), '"index"')

    def anytime(self, today: date) -> Query:
        if self.today_policy == TODAY_POLICY_DATE:
            return self._select_todos(
                self._open_todo('start = 1', '(startDate IS NULL OR startDate > ?)'),
                '"index"',
                (self.encoding.encode(today),)
            )
        return self._select_todos(
            self._open_todo('start = 2', 'startDate IS NULL', 'deadline IS NULL'),
            '"index"'
        )

    def someday(self, today: date) -> Query:
        if self.today_policy == TODAY_POLICY_DATE:
            return self._select_todos(
                self._open_todo('start = 2', '(startDate IS NULL OR startDate > ?)'),
                '"index"',
                (self.encoding.encode(today),)
            )
        return self._select_todos(self._open_todo('start = 3'), '"index"')

    def upcoming(self, today: date) -> Query:
        dated = '(startDate IS NOT NULL OR deadline IS NOT NULL)'
        order_by = 'COALESCE(startDate, deadline), "index"'
        if self.today_policy == TODAY_POLICY_DATE:
            return self._select_todos(
                self._open_todo('start = 2', dated, '(startDate IS NULL OR startDate > ?)'),
                order_by,
                (self.encoding.encode(today),)
            )
        return self._select_todos(self._open_todo('start = 2', dated), order_by)

    def logbook(self, cutoff: float, limit: Any = None) -> Query:
        """Completed/canceled todos stopped at or after cutoff (unix seconds)"""
        return self._select_todos(
            self._active_todo(
                f'status IN ({STATUS_COMPLETED}, {STATUS_CANCELED})',
                'stopDate >= ?'
            ),
            'stopDate DESC',
            (cutoff, clamp_limit(limit)),
            limit=True
        )

    def trash(self) -> Query:
        return self._select_todos(
            [f'type = {TYPE_TODO}', 'trashed = 1'],
            'userModificationDate DESC'
        )

    def recent(self, cutoff: float) -> Query:
        """Todos created at or after cutoff (unix seconds)"""
        return self._select_todos(
            self._active_todo('creationDate >= ?'),
            'creationDate DESC',
            (cutoff,)
        )

    def search(self, text: str) -> Query:
        pattern = f'%{escape_like(text)}%'
        return self._select_todos(
            self._active_todo("(title LIKE ? ESCAPE '\\' OR notes LIKE ? ESCAPE '\\')"),
            'userModificationDate DESC',
            (pattern, pattern)
        )

    def tagged_items(self, tag_uuid: str) -> Query:
        return self._select_todos(
            self._open_todo(
                'EXISTS (SELECT 1 FROM TMTaskTag WHERE TMTaskTag.tasks = TMTask.uuid '
                'AND TMTaskTag.tags = ?)'
            ),
            'userModificationDate DESC',
            (tag_uuid,)
        )

    def advanced_search(self, filters: Dict[str, Any], tag_uuid: Optional[str] = None) -> Query:
        """
        Conjunction of the optional filters present in the request

        Args:
            filters: Any of status, start_date, deadline, tag, area, type
            tag_uuid: Resolved uuid of filters['tag'], None when no such tag

        Returns:
            Query, matching zero rows when a requested tag does not exist
        """
        item_type = filters.get('type')
        if item_type is not None:
            if item_type not in ITEM_TYPE_CODES:
                raise InvalidArgumentError(f"Invalid type: {item_type}", {"type": item_type})
            conditions = [f'type = {ITEM_TYPE_CODES[item_type]}', 'trashed = 0']
        else:
            conditions = self._active_todo()
        params: List[Any] = []

        status = filters.get('status')
        if status is not None:
            code = encode_status(status)
            if code is None:
                raise InvalidArgumentError(f"Invalid status: {status}", {"status": status})
            conditions.append(f'status = {code}')

        if filters.get('start_date') is not None:
            conditions.append('startDate >= ?')
            params.append(self._encode_date(filters['start_date'], 'start_date'))

        if filters.get('deadline') is not None:
            conditions.append('deadline <= ?')
            params.append(self._encode_date(filters['deadline'], 'deadline'))

        if filters.get('tag') is not None:
            if tag_uuid:
                conditions.append(
                    'EXISTS (SELECT 1 FROM TMTaskTag WHERE TMTaskTag.tasks = TMTask.uuid '
                    'AND TMTaskTag.tags = ?)'
                )
                params.append(tag_uuid)
            else:
                conditions.append(NO_ROWS)

        if filters.get('area') is not None:
            conditions.append('area = ?')
            params.append(filters['area'])

        return self._select_todos(conditions, 'userModificationDate DESC', tuple(params))

    # ==================== Secondary lookups ====================

    def checklist_items(self, task_uuid: str) -> Query:
        return Query(
            'SELECT uuid, title, status FROM TMChecklistItem WHERE task = ? ORDER BY "index"',
            (task_uuid,)
        )

    def tags_for_task(self, task_uuid: str) -> Query:
        return Query(
            'SELECT TAG.title FROM TMTaskTag AS TASK_TAG '
            'LEFT OUTER JOIN TMTag TAG ON TAG.uuid = TASK_TAG.tags '
            'WHERE TASK_TAG.tasks = ? ORDER BY TAG."index"',
            (task_uuid,)
        )

    def tags_for_area(self, area_uuid: str) -> Query:
        return Query(
            'SELECT TAG.title FROM TMAreaTag AS AREA_TAG '
            'LEFT OUTER JOIN TMTag TAG ON TAG.uuid = AREA_TAG.tags '
            'WHERE AREA_TAG.areas = ? ORDER BY TAG."index"',
            (area_uuid,)
        )

    def tag_uuid(self, title: str) -> Query:
        return Query('SELECT uuid FROM TMTag WHERE title = ?', (title,))

    # ==================== Projects / Areas / Tags ====================

    def projects(self) -> Query:
        return Query(
            f'SELECT {PROJECT_COLUMNS} FROM TMTask '
            f'WHERE type = {TYPE_PROJECT} AND trashed = 0 '
            'ORDER BY userModificationDate DESC'
        )

    def area_projects(self, area_uuid: str) -> Query:
        return Query(
            f'SELECT uuid, title FROM TMTask '
            f'WHERE type = {TYPE_PROJECT} AND trashed = 0 AND area = ? '
            'ORDER BY "index"',
            (area_uuid,)
        )

    def areas(self) -> Query:
        return Query('SELECT uuid, title FROM TMArea ORDER BY "index"')

    def tags(self) -> Query:
        return Query('SELECT uuid, title FROM TMTag ORDER BY title')
