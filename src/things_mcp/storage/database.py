#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Database access module
Read-only access to the Things 3 SQLite store: discovery, connections and views
"""

import os
import sqlite3
import logging
from pathlib import Path
from datetime import date, timedelta
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

import psutil

from .models import Todo, ChecklistItem, Project, ProjectSummary, Area, Tag
from .queries import Query, QueryBuilder
from ..core.codec import (
    Bucket, get_date_encoding, decode_scheduling_date, decode_unix_timestamp,
    encode_unix_timestamp, decode_status, decode_bucket, decode_title, parse_period,
)
from ..core.errors import StoreUnavailableError
from ..utils.config import Config
from ..utils.constants import (
    TODAY_POLICY_DATE, CHECKLIST_DONE, DEFAULT_LOGBOOK_PERIOD,
    GROUP_CONTAINERS_DIR, THINGS_CONTAINER_MARKER, THINGS_DATABASE_GLOB,
    THINGS_DATABASE_FALLBACK_GLOB, BACKUPS_SEGMENT, THINGS_APP_NAME,
)

logger = logging.getLogger('things_mcp.database')


# ==================== Discovery ====================

def _user_home(environ: Dict[str, str]) -> Path:
    """Home of the real user, also when running as root"""
    home = Path(environ.get('HOME') or Path.home())
    if str(home) != '/var/root':
        return home

    if environ.get('SUDO_USER'):
        return Path('/Users') / environ['SUDO_USER']

    # Fallback: most recently modified user directory
    users = Path('/Users')
    candidates = [
        d for d in users.glob('*') if d.is_dir() and not d.name.startswith('.')
    ] if users.is_dir() else []
    if candidates:
        return max(candidates, key=lambda d: d.stat().st_mtime)
    return home


def _is_backup(path: Path) -> bool:
    return BACKUPS_SEGMENT in path.parts


def find_database_path(home: Optional[Path] = None,
                       environ: Optional[Dict[str, str]] = None) -> Optional[Path]:
    """
    Locate the live Things database under the user's Group Containers

    Args:
        home: Home directory to search, defaults to the real user's home
        environ: Environment mapping, defaults to os.environ

    Returns:
        Path to main.sqlite, None when nothing is found
    """
    environ = os.environ if environ is None else environ
    home = home or _user_home(environ)
    containers = home / GROUP_CONTAINERS_DIR

    if not containers.is_dir():
        return None

    things_dirs = sorted(d for d in containers.iterdir() if THINGS_CONTAINER_MARKER in d.name)

    for things_dir in things_dirs:
        for pattern in (THINGS_DATABASE_GLOB, THINGS_DATABASE_FALLBACK_GLOB):
            matches = sorted(p for p in things_dir.glob(pattern) if not _is_backup(p))
            if matches:
                return matches[0]

    return None


def is_app_running(app_name: str = THINGS_APP_NAME) -> bool:
    """Whether a process with exactly this name is running"""
    for proc in psutil.process_iter(['name']):
        if proc.info.get('name') == app_name:
            return True
    return False


# ==================== Database ====================

class ThingsDatabase:
    """Read-only view of the Things store"""

    def __init__(self, config: Config, today: Optional[Callable[[], date]] = None):
        """
        Initialize database reader

        Args:
            config: Configuration object
            today: Clock returning the current date, defaults to date.today
        """
        self.config = config
        self.logger = logger
        self.today = today or date.today
        self.today_policy = config.store.today_policy
        self.encoding = get_date_encoding(
            config.store.date_encoding, **config.get_date_encoding_options()
        )
        self.queries = QueryBuilder(self.encoding, self.today_policy)
        self._db_path: Optional[Path] = None

    # ==================== Connection ====================

    def resolve_database_path(self) -> Optional[Path]:
        """Configured override or discovered path, resolved once"""
        if self._db_path is None:
            self._db_path = self.config.get_database_override() or find_database_path()
            if self._db_path:
                self.logger.info(f"Using Things database: {self._db_path}")
        return self._db_path

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        """
        Get a read-only database connection (context manager)

        Yields:
            sqlite3.Connection: Database connection object

        Raises:
            StoreUnavailableError: If the store cannot be located or read
        """
        db_path = self.resolve_database_path()
        if not db_path:
            raise StoreUnavailableError(
                "Things database not found. Please ensure Things 3 is installed "
                "and has been launched at least once."
            )

        conn = None
        try:
            conn = sqlite3.connect(f"{db_path.resolve().as_uri()}?mode=ro", uri=True)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            self.logger.error(f"Database operation failed: {e}")
            raise StoreUnavailableError(f"Things database unavailable: {e}", {"path": str(db_path)}) from e
        finally:
            if conn:
                conn.close()

    def is_things_running(self) -> bool:
        return is_app_running(self.config.url_scheme.app_name)

    # ==================== Row mapping ====================

    def _when(self, start: Any, start_date: Optional[date]) -> Bucket:
        bucket = decode_bucket(start, self.today_policy)
        if (self.today_policy == TODAY_POLICY_DATE and bucket in (Bucket.ANYTIME, Bucket.SOMEDAY)
                and start_date is not None and start_date <= self.today()):
            return Bucket.TODAY
        return bucket

    def _row_to_todo(self, row: sqlite3.Row) -> Todo:
        start_date = decode_scheduling_date(row['startDate'], self.encoding)
        return Todo(
            uuid=row['uuid'],
            title=decode_title(row['title']),
            notes=decode_title(row['notes']),
            status=decode_status(row['status']),
            project=row['project'],
            area=row['area'],
            when=self._when(row['start'], start_date),
            start_date=start_date,
            deadline=decode_scheduling_date(row['deadline'], self.encoding),
            created=decode_unix_timestamp(row['creationDate']),
            modified=decode_unix_timestamp(row['userModificationDate']),
            stopped=decode_unix_timestamp(row['stopDate']),
        )

    def _row_to_project(self, row: sqlite3.Row) -> Project:
        start_date = decode_scheduling_date(row['startDate'], self.encoding)
        return Project(
            uuid=row['uuid'],
            title=decode_title(row['title']),
            notes=decode_title(row['notes']),
            status=decode_status(row['status']),
            area=row['area'],
            when=self._when(row['start'], start_date),
            start_date=start_date,
            deadline=decode_scheduling_date(row['deadline'], self.encoding),
            created=decode_unix_timestamp(row['creationDate']),
            modified=decode_unix_timestamp(row['userModificationDate']),
        )

    # ==================== Secondary lookups ====================

    def _execute(self, conn: sqlite3.Connection, query: Query) -> List[sqlite3.Row]:
        return conn.execute(query.sql, query.params).fetchall()

    def _checklist_items(self, conn: sqlite3.Connection, task_uuid: str) -> List[ChecklistItem]:
        return [
            ChecklistItem(
                uuid=row['uuid'],
                title=decode_title(row['title']),
                completed=row['status'] == CHECKLIST_DONE
            )
            for row in self._execute(conn, self.queries.checklist_items(task_uuid))
        ]

    def _task_tags(self, conn: sqlite3.Connection, task_uuid: str) -> List[str]:
        rows = self._execute(conn, self.queries.tags_for_task(task_uuid))
        return [row['title'] for row in rows if row['title'] is not None]

    def _area_tags(self, conn: sqlite3.Connection, area_uuid: str) -> List[str]:
        try:
            rows = self._execute(conn, self.queries.tags_for_area(area_uuid))
        except sqlite3.OperationalError as e:
            # Older stores have no TMAreaTag table
            self.logger.debug(f"Area tags unavailable: {e}")
            return []
        return [row['title'] for row in rows if row['title'] is not None]

    def _tag_uuid(self, conn: sqlite3.Connection, title: str) -> Optional[str]:
        rows = self._execute(conn, self.queries.tag_uuid(title))
        return rows[0]['uuid'] if rows else None

    def _fetch_todos(self, conn: sqlite3.Connection, query: Query,
                     include_items: bool = False) -> List[Todo]:
        """Run a todo query and enrich each row with tags and optionally checklist items"""
        todos = [self._row_to_todo(row) for row in self._execute(conn, query)]
        for todo in todos:
            todo.tags = self._task_tags(conn, todo.uuid)
            if include_items:
                todo.checklist_items = self._checklist_items(conn, todo.uuid)
        return todos

    def _cutoff(self, period: str) -> float:
        days = parse_period(period)
        return encode_unix_timestamp(self.today() - timedelta(days=days))

    # ==================== Todos ====================

    def get_todos(self, project_uuid: Optional[str] = None, include_items: bool = True) -> List[Todo]:
        """All active todos, optionally limited to one project"""
        with self.get_connection() as conn:
            return self._fetch_todos(conn, self.queries.todos(project_uuid), include_items)

    def get_list_view(self, view: str) -> List[Todo]:
        """
        Todos of a named list view

        Args:
            view: inbox, today, upcoming, anytime, someday or trash

        Returns:
            Todos in the view's fixed order
        """
        if view == 'trash':
            query = self.queries.trash()
        elif view in ('inbox', 'today', 'upcoming', 'anytime', 'someday'):
            query = getattr(self.queries, view)(self.today())
        else:
            raise ValueError(f"Unknown list view: {view}")

        with self.get_connection() as conn:
            return self._fetch_todos(conn, query)

    def get_inbox(self) -> List[Todo]:
        return self.get_list_view('inbox')

    def get_today(self) -> List[Todo]:
        return self.get_list_view('today')

    def get_upcoming(self) -> List[Todo]:
        return self.get_list_view('upcoming')

    def get_anytime(self) -> List[Todo]:
        return self.get_list_view('anytime')

    def get_someday(self) -> List[Todo]:
        return self.get_list_view('someday')

    def get_trash(self) -> List[Todo]:
        return self.get_list_view('trash')

    def get_logbook(self, period: str = DEFAULT_LOGBOOK_PERIOD, limit: Any = None) -> List[Todo]:
        """Completed and canceled todos stopped within period, newest first"""
        query = self.queries.logbook(self._cutoff(period), limit)
        with self.get_connection() as conn:
            return self._fetch_todos(conn, query)

    def get_recent(self, period: str) -> List[Todo]:
        """Todos created within period, newest first"""
        query = self.queries.recent(self._cutoff(period))
        with self.get_connection() as conn:
            return self._fetch_todos(conn, query)

    def search_todos(self, text: str) -> List[Todo]:
        """Todos whose title or notes contain text"""
        with self.get_connection() as conn:
            return self._fetch_todos(conn, self.queries.search(text))

    def search_advanced(self, filters: Dict[str, Any]) -> List[Todo]:
        """Todos matching every filter present in filters"""
        with self.get_connection() as conn:
            tag_uuid = None
            if filters.get('tag') is not None:
                tag_uuid = self._tag_uuid(conn, filters['tag'])
                if tag_uuid is None:
                    self.logger.debug(f"Tag not found: {filters['tag']}")
            return self._fetch_todos(conn, self.queries.advanced_search(filters, tag_uuid))

    def get_tagged_items(self, tag_title: str) -> List[Todo]:
        """Open todos carrying the tag, empty when the tag does not exist"""
        with self.get_connection() as conn:
            return self._tagged_items(conn, tag_title)

    def _tagged_items(self, conn: sqlite3.Connection, tag_title: str) -> List[Todo]:
        tag_uuid = self._tag_uuid(conn, tag_title)
        if tag_uuid is None:
            return []
        return self._fetch_todos(conn, self.queries.tagged_items(tag_uuid))

    # ==================== Projects / Areas / Tags ====================

    def get_projects(self, include_items: bool = False) -> List[Project]:
        """Active projects, with their todos when include_items is set"""
        with self.get_connection() as conn:
            projects = [self._row_to_project(row) for row in self._execute(conn, self.queries.projects())]
            for project in projects:
                project.tags = self._task_tags(conn, project.uuid)
                if include_items:
                    project.todos = self._fetch_todos(
                        conn, self.queries.todos(project.uuid), include_items=True
                    )
            return projects

    def get_areas(self, include_items: bool = False) -> List[Area]:
        """Areas, with project summaries when include_items is set"""
        with self.get_connection() as conn:
            areas = [
                Area(uuid=row['uuid'], title=decode_title(row['title']))
                for row in self._execute(conn, self.queries.areas())
            ]
            for area in areas:
                area.tags = self._area_tags(conn, area.uuid)
                if include_items:
                    area.projects = [
                        ProjectSummary(uuid=row['uuid'], title=decode_title(row['title']))
                        for row in self._execute(conn, self.queries.area_projects(area.uuid))
                    ]
            return areas

    def get_tags(self, include_items: bool = False) -> List[Tag]:
        """All tags by title, with tagged todos when include_items is set"""
        with self.get_connection() as conn:
            tags = [
                Tag(uuid=row['uuid'], title=row['title'])
                for row in self._execute(conn, self.queries.tags())
            ]
            if include_items:
                for tag in tags:
                    tag.items = self._tagged_items(conn, tag.title)
            return tags
