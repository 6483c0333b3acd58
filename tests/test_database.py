#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test Things database reader
Runs every read view against a fixture store in a temporary directory
"""

from datetime import timedelta

import pytest

from things_mcp.core.codec import Status, Bucket, DayCounterEncoding
from things_mcp.core.errors import StoreUnavailableError, InvalidArgumentError
from things_mcp.storage.database import ThingsDatabase, find_database_path

from conftest import TODAY, ThingsStore, days_ago, make_config


class TestListViews:
    """Named list views"""

    def test_inbox_row_mapping(self, store, database):
        store.add_tag("tag-home", "home")
        store.add_todo(
            "todo-1", "Buy%20milk", notes="2%25 fat", start=0,
            start_date=TODAY, deadline=TODAY + timedelta(days=2),
            creationDate=days_ago(3), userModificationDate=days_ago(1),
        )
        store.tag_task("todo-1", "tag-home")

        todos = database.get_inbox()

        assert len(todos) == 1
        todo = todos[0]
        assert todo.uuid == "todo-1"
        assert todo.title == "Buy milk"
        assert todo.notes == "2% fat"
        assert todo.status is Status.INCOMPLETE
        assert todo.when is Bucket.INBOX
        assert todo.start_date == TODAY
        assert todo.deadline == TODAY + timedelta(days=2)
        assert todo.created == TODAY - timedelta(days=3)
        assert todo.modified == TODAY - timedelta(days=1)
        assert todo.tags == ["home"]
        # List views never load checklist items
        assert todo.checklist_items == []

        data = todo.to_dict()
        assert data["status"] == "incomplete"
        assert data["when"] == "inbox"
        assert data["start_date"] == TODAY.isoformat()
        assert data["stopped"] is None

    def test_views_follow_buckets(self, store, database):
        store.add_todo("a", "Inbox", start=0)
        store.add_todo("b", "Today", start=1)
        store.add_todo("c", "Anytime", start=2)
        store.add_todo("d", "Upcoming", start=2, start_date=TODAY + timedelta(days=4))
        store.add_todo("e", "Someday", start=3)
        store.add_todo("f", "Trashed", start=0, trashed=1)

        assert [t.uuid for t in database.get_inbox()] == ["a"]
        assert [t.uuid for t in database.get_today()] == ["b"]
        assert [t.uuid for t in database.get_anytime()] == ["c"]
        assert [t.uuid for t in database.get_upcoming()] == ["d"]
        assert [t.uuid for t in database.get_someday()] == ["e"]
        assert [t.uuid for t in database.get_trash()] == ["f"]

    def test_unknown_view(self, database):
        with pytest.raises(ValueError):
            database.get_list_view("later")

    def test_date_policy_derives_today(self, tmp_path, store, db_path):
        config = make_config(tmp_path, THINGS_DB_PATH=str(db_path), THINGS_TODAY_POLICY="date")
        database = ThingsDatabase(config, today=lambda: TODAY)
        store.add_todo("due", "Due", start=1, start_date=TODAY - timedelta(days=1))
        store.add_todo("plain", "Plain", start=1)

        today = database.get_today()
        assert [t.uuid for t in today] == ["due"]
        assert today[0].when is Bucket.TODAY
        assert [t.when for t in database.get_anytime()] == [Bucket.ANYTIME]

    def test_day_counter_encoding(self, tmp_path):
        db_path = tmp_path / "legacy.sqlite"
        store = ThingsStore(db_path, encoding=DayCounterEncoding())
        store.add_todo("x", "Legacy", start=0, deadline=TODAY)
        config = make_config(tmp_path, THINGS_DB_PATH=str(db_path), THINGS_DATE_ENCODING="day_counter")

        todos = ThingsDatabase(config, today=lambda: TODAY).get_inbox()
        assert todos[0].deadline == TODAY


class TestTodos:
    """get_todos with checklist enrichment"""

    def test_checklist_items_in_order(self, store, database):
        store.add_todo("todo-1", "Pack")
        store.add_checklist_item("ci-1", "todo-1", "Socks", status=3)
        store.add_checklist_item("ci-2", "todo-1", "Shoes")

        todo = database.get_todos()[0]
        assert [(c.title, c.completed) for c in todo.checklist_items] == [("Socks", True), ("Shoes", False)]

    def test_without_items(self, store, database):
        store.add_todo("todo-1", "Pack")
        store.add_checklist_item("ci-1", "todo-1", "Socks")

        assert database.get_todos(include_items=False)[0].checklist_items == []

    def test_project_filter(self, store, database):
        store.add_project("proj-1", "Trip")
        store.add_todo("in", "Book flights", project="proj-1")
        store.add_todo("out", "Elsewhere")

        assert [t.uuid for t in database.get_todos(project_uuid="proj-1")] == ["in"]
        assert {t.uuid for t in database.get_todos()} == {"in", "out"}

    def test_unknown_codes_do_not_fail(self, store, database):
        store.add_todo("odd", "Odd", status=7, start=9, startDate="garbage")

        todo = database.get_todos()[0]
        assert todo.status is Status.UNKNOWN
        assert todo.when is Bucket.UNKNOWN
        assert todo.start_date is None


class TestLogbookAndRecent:
    """Period based views"""

    def test_logbook_newest_first(self, store, database):
        store.add_todo("old", "Two days ago", status=3, stopDate=days_ago(2))
        store.add_todo("new", "Yesterday", status=3, stopDate=days_ago(1))
        store.add_todo("ancient", "Last month", status=3, stopDate=days_ago(30))

        assert [t.uuid for t in database.get_logbook("3d")] == ["new", "old"]
        assert [t.uuid for t in database.get_logbook("3d", limit=1)] == ["new"]
        assert [t.uuid for t in database.get_logbook("1y")] == ["new", "old", "ancient"]

    def test_logbook_stopped_date(self, store, database):
        store.add_todo("done", "Done", status=3, stopDate=days_ago(1))

        assert database.get_logbook()[0].stopped == TODAY - timedelta(days=1)

    def test_invalid_period(self, database):
        with pytest.raises(InvalidArgumentError):
            database.get_logbook("last week")
        with pytest.raises(InvalidArgumentError):
            database.get_recent("3x")

    def test_recent(self, store, database):
        store.add_todo("new", "New", creationDate=days_ago(1))
        store.add_todo("old", "Old", creationDate=days_ago(20))

        assert [t.uuid for t in database.get_recent("1w")] == ["new"]
        assert [t.uuid for t in database.get_recent("1m")] == ["new", "old"]


class TestSearch:
    """Substring, tag and advanced search"""

    def test_search_title_and_notes(self, store, database):
        store.add_todo("a", "Call plumber")
        store.add_todo("b", "Errands", notes="call the bank")
        store.add_todo("c", "Unrelated")

        assert {t.uuid for t in database.search_todos("call")} == {"a", "b"}

    def test_search_injection_is_literal(self, store, database):
        store.add_todo("a", "Alpha")

        assert database.search_todos("' OR '1'='1") == []
        assert [t.uuid for t in database.search_todos("Alpha")] == ["a"]

    def test_tagged_items(self, store, database):
        store.add_tag("tag-work", "work")
        store.add_todo("open", "Open", userModificationDate=days_ago(2))
        store.add_todo("done", "Done", status=3)
        store.tag_task("open", "tag-work")
        store.tag_task("done", "tag-work")

        assert [t.uuid for t in database.get_tagged_items("work")] == ["open"]
        assert database.get_tagged_items("nonexistent") == []

    def test_advanced_search(self, store, database):
        store.add_area("area-1", "Work")
        store.add_tag("tag-urgent", "urgent")
        store.add_todo("hit", "Report", area="area-1", deadline=TODAY + timedelta(days=3))
        store.add_todo("late", "Later", area="area-1", deadline=TODAY + timedelta(days=30))
        store.add_todo("other", "Other", deadline=TODAY + timedelta(days=1))
        store.tag_task("hit", "tag-urgent")
        store.tag_task("late", "tag-urgent")

        filters = {
            "status": "incomplete",
            "area": "area-1",
            "tag": "urgent",
            "deadline": (TODAY + timedelta(days=7)).isoformat(),
        }
        assert [t.uuid for t in database.search_advanced(filters)] == ["hit"]

    def test_advanced_search_unknown_tag(self, store, database):
        store.add_todo("a", "Anything")

        assert database.search_advanced({"tag": "nonexistent"}) == []

    def test_advanced_search_type(self, store, database):
        store.add_project("proj", "Project")
        store.add_todo("todo", "Todo")

        assert [t.uuid for t in database.search_advanced({"type": "project"})] == ["proj"]
        assert [t.uuid for t in database.search_advanced({})] == ["todo"]


class TestProjectsAreasTags:
    """Containers and tags"""

    def test_projects(self, store, database):
        store.add_project("proj-1", "Trip", area="area-1", deadline=TODAY)
        store.add_todo("t1", "Book flights", project="proj-1", status=3)
        store.add_todo("t2", "Pack", project="proj-1")

        project = database.get_projects()[0]
        assert project.title == "Trip"
        assert project.deadline == TODAY
        assert project.todos is None

        project = database.get_projects(include_items=True)[0]
        assert [t.uuid for t in project.todos] == ["t1", "t2"]

    def test_trashed_projects_hidden(self, store, database):
        store.add_project("proj-1", "Gone", trashed=1)

        assert database.get_projects() == []

    def test_areas(self, store, database):
        store.add_area("area-1", "Work")
        store.add_tag("tag-1", "office")
        store.tag_area("area-1", "tag-1")
        store.add_project("proj-1", "Launch", area="area-1")

        area = database.get_areas()[0]
        assert area.title == "Work"
        assert area.tags == ["office"]
        assert area.projects is None

        area = database.get_areas(include_items=True)[0]
        assert [(p.uuid, p.title) for p in area.projects] == [("proj-1", "Launch")]

    def test_tags(self, store, database):
        store.add_tag("tag-b", "work")
        store.add_tag("tag-a", "home")
        store.add_todo("t1", "Fix sink")
        store.tag_task("t1", "tag-a")

        tags = database.get_tags()
        assert [t.title for t in tags] == ["home", "work"]
        assert tags[0].items is None

        tags = database.get_tags(include_items=True)
        assert [t.uuid for t in tags[0].items] == ["t1"]
        assert tags[1].items == []


class TestStoreAvailability:
    """Discovery and unavailable stores"""

    def test_missing_database(self, tmp_path):
        config = make_config(tmp_path, THINGS_DB_PATH=str(tmp_path / "missing.sqlite"))
        database = ThingsDatabase(config, today=lambda: TODAY)

        with pytest.raises(StoreUnavailableError):
            database.get_inbox()

    def test_no_database_found(self, tmp_path, monkeypatch):
        monkeypatch.setattr("things_mcp.storage.database.find_database_path", lambda: None)
        database = ThingsDatabase(make_config(tmp_path), today=lambda: TODAY)

        with pytest.raises(StoreUnavailableError) as exc:
            database.get_today()
        assert "Things database not found" in exc.value.message

    def test_connection_is_read_only(self, store, database):
        store.add_todo("a", "Alpha")

        with database.get_connection() as conn:
            with pytest.raises(Exception):
                conn.execute("DELETE FROM TMTask")

        assert len(database.get_todos()) == 1


class TestFindDatabasePath:
    """Group Containers discovery"""

    def _make(self, home, relative):
        path = home / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"")
        return path

    def test_primary_location(self, tmp_path):
        expected = self._make(
            tmp_path,
            "Library/Group Containers/JLMPQHK86H.com.culturedcode.ThingsMac/"
            "ThingsData-ABC12/Things Database.thingsdatabase/main.sqlite"
        )

        assert find_database_path(home=tmp_path, environ={}) == expected

    def test_skips_backups(self, tmp_path):
        self._make(
            tmp_path,
            "Library/Group Containers/JLMPQHK86H.com.culturedcode.ThingsMac/"
            "Backups/Things Database.thingsdatabase/main.sqlite"
        )
        expected = self._make(
            tmp_path,
            "Library/Group Containers/JLMPQHK86H.com.culturedcode.ThingsMac/"
            "ThingsData-XYZ/Things Database.thingsdatabase/main.sqlite"
        )

        assert find_database_path(home=tmp_path, environ={}) == expected

    def test_fallback_layout(self, tmp_path):
        expected = self._make(
            tmp_path,
            "Library/Group Containers/JLMPQHK86H.com.culturedcode.ThingsMac/"
            "ThingsData-ABC12/Database/main.sqlite"
        )

        assert find_database_path(home=tmp_path, environ={}) == expected

    def test_nothing_found(self, tmp_path):
        assert find_database_path(home=tmp_path, environ={}) is None
        (tmp_path / "Library/Group Containers/other.app").mkdir(parents=True)
        assert find_database_path(home=tmp_path, environ={}) is None
