#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shared test fixtures
Builds a Things-shaped SQLite store in a temporary directory
"""

import sqlite3
import subprocess
import sys
from datetime import date, timedelta
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from things_mcp.core.codec import JulianDayEncoding, encode_unix_timestamp
from things_mcp.storage.database import ThingsDatabase
from things_mcp.url_scheme.dispatcher import DispatchResult
from things_mcp.utils.config import Config

TODAY = date(2026, 10, 18)

SCHEMA = """
CREATE TABLE TMTask (
    uuid TEXT PRIMARY KEY,
    title TEXT,
    notes TEXT,
    type INTEGER DEFAULT 0,
    status INTEGER DEFAULT 0,
    trashed INTEGER DEFAULT 0,
    start INTEGER DEFAULT 0,
    startDate INTEGER,
    deadline INTEGER,
    project TEXT,
    area TEXT,
    creationDate REAL,
    userModificationDate REAL,
    stopDate REAL,
    "index" INTEGER DEFAULT 0
);
CREATE TABLE TMArea (uuid TEXT PRIMARY KEY, title TEXT, "index" INTEGER DEFAULT 0);
CREATE TABLE TMTag (uuid TEXT PRIMARY KEY, title TEXT, "index" INTEGER DEFAULT 0);
CREATE TABLE TMTaskTag (tasks TEXT, tags TEXT);
CREATE TABLE TMAreaTag (areas TEXT, tags TEXT);
CREATE TABLE TMChecklistItem (
    uuid TEXT PRIMARY KEY,
    title TEXT,
    status INTEGER DEFAULT 0,
    task TEXT,
    "index" INTEGER DEFAULT 0
);
"""


def days_ago(days: int, hour: int = 12) -> float:
    """Unix timestamp of a given hour, days before TODAY"""
    return encode_unix_timestamp(TODAY - timedelta(days=days)) + hour * 3600


class ThingsStore:
    """Writes fixture rows into a Things-shaped database"""

    def __init__(self, path: Path, encoding=None):
        self.path = path
        self.encoding = encoding or JulianDayEncoding()
        self._index = 0
        conn = sqlite3.connect(str(path))
        try:
            conn.executescript(SCHEMA)
        finally:
            conn.close()

    def _insert(self, table: str, values: dict):
        columns = ", ".join(f'"{c}"' for c in values)
        marks = ", ".join("?" for _ in values)
        conn = sqlite3.connect(str(self.path))
        try:
            conn.execute(f"INSERT INTO {table} ({columns}) VALUES ({marks})", tuple(values.values()))
            conn.commit()
        finally:
            conn.close()

    def _next_index(self) -> int:
        self._index += 1
        return self._index

    def add_task(self, uuid: str, title: str, start_date: date = None, deadline: date = None, **columns):
        values = {
            "uuid": uuid,
            "title": title,
            "creationDate": days_ago(30),
            "userModificationDate": days_ago(1),
            "index": self._next_index(),
        }
        if start_date is not None:
            values["startDate"] = self.encoding.encode(start_date)
        if deadline is not None:
            values["deadline"] = self.encoding.encode(deadline)
        values.update(columns)
        self._insert("TMTask", values)

    def add_todo(self, uuid: str, title: str, **columns):
        self.add_task(uuid, title, type=0, **columns)

    def add_project(self, uuid: str, title: str, **columns):
        self.add_task(uuid, title, type=1, **columns)

    def add_area(self, uuid: str, title: str):
        self._insert("TMArea", {"uuid": uuid, "title": title, "index": self._next_index()})

    def add_tag(self, uuid: str, title: str):
        self._insert("TMTag", {"uuid": uuid, "title": title, "index": self._next_index()})

    def tag_task(self, task_uuid: str, tag_uuid: str):
        self._insert("TMTaskTag", {"tasks": task_uuid, "tags": tag_uuid})

    def tag_area(self, area_uuid: str, tag_uuid: str):
        self._insert("TMAreaTag", {"areas": area_uuid, "tags": tag_uuid})

    def add_checklist_item(self, uuid: str, task_uuid: str, title: str, status: int = 0):
        self._insert("TMChecklistItem", {
            "uuid": uuid, "title": title, "status": status, "task": task_uuid,
            "index": self._next_index()
        })


class RecordingDispatcher:
    """Dispatcher double that records commands instead of opening URLs"""

    def __init__(self, result: DispatchResult = None):
        self.commands = []
        self.result = result or DispatchResult(success=True)

    def execute(self, command):
        self.commands.append(command)
        return self.result


class UntouchableDatabase:
    """Store double that fails the test on any access"""

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        self.calls.append(name)
        raise AssertionError(f"database accessed: {name}")


def make_config(tmp_path: Path, **environ) -> Config:
    return Config(config_path=str(tmp_path / "config.yaml"), environ=environ)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "main.sqlite"


@pytest.fixture
def store(db_path):
    return ThingsStore(db_path)


@pytest.fixture
def config(tmp_path, db_path):
    return make_config(tmp_path, THINGS_DB_PATH=str(db_path))


@pytest.fixture
def auth_config(tmp_path, db_path):
    return make_config(tmp_path, THINGS_DB_PATH=str(db_path), THINGS_AUTH_TOKEN="secret-token")


@pytest.fixture
def database(config, store):
    return ThingsDatabase(config, today=lambda: TODAY)


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


def completed_process(returncode: int = 0, stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=["open"], returncode=returncode, stdout="", stderr=stderr)
