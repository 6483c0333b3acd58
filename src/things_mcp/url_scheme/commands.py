#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Things URL scheme commands
Pure builders for things:/// command URLs, one per action

Only supplied fields are sent, so update commands leave every other field of
the record unchanged.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional
from urllib.parse import urlencode, quote

from ..utils.constants import (
    THINGS_URL_BASE, AUTH_REQUIRED_ACTIONS, TAG_DELIMITER, LINE_DELIMITER,
    ACTION_ADD, ACTION_ADD_PROJECT, ACTION_UPDATE, ACTION_UPDATE_PROJECT,
    ACTION_SEARCH, ACTION_SHOW,
)


@dataclass
class Command:
    """A URL scheme action and its ordered parameters"""
    action: str
    params: Dict[str, str] = field(default_factory=dict)

    @property
    def requires_auth(self) -> bool:
        return self.action in AUTH_REQUIRED_ACTIONS

    def query_string(self, extra: Optional[Mapping[str, str]] = None) -> str:
        """Percent-encoded parameters, spaces as %20"""
        params = dict(self.params)
        if extra:
            params.update(extra)
        return urlencode(params, quote_via=quote, safe='')

    def to_url(self, extra: Optional[Mapping[str, str]] = None) -> str:
        """
        Assemble the full command URL

        Args:
            extra: Parameters appended after the command's own (e.g. auth-token)

        Returns:
            things:///<action>[?<query>]
        """
        query = self.query_string(extra)
        base = f"{THINGS_URL_BASE}{self.action}"
        return f"{base}?{query}" if query else base


def _put(params: Dict[str, str], key: str, value: Optional[str]):
    if value is not None:
        params[key] = str(value)


def _put_list(params: Dict[str, str], key: str, values: Optional[Iterable[str]], delimiter: str):
    if values is not None:
        params[key] = delimiter.join(str(v) for v in values)


def _put_flag(params: Dict[str, str], key: str, value: Optional[bool]):
    if value:
        params[key] = "true"


def build_add_todo(title: str, notes: Optional[str] = None, when: Optional[str] = None,
                   deadline: Optional[str] = None, tags: Optional[Iterable[str]] = None,
                   checklist_items: Optional[Iterable[str]] = None, list_id: Optional[str] = None,
                   list_title: Optional[str] = None, heading: Optional[str] = None) -> Command:
    """things:///add"""
    params: Dict[str, str] = {}
    _put(params, "title", title)
    _put(params, "notes", notes)
    _put(params, "when", when)
    _put(params, "deadline", deadline)
    _put_list(params, "tags", tags, TAG_DELIMITER)
    _put_list(params, "checklist-items", checklist_items, LINE_DELIMITER)
    _put(params, "list-id", list_id)
    _put(params, "list", list_title)
    _put(params, "heading", heading)
    return Command(ACTION_ADD, params)


def build_add_project(title: str, notes: Optional[str] = None, when: Optional[str] = None,
                      deadline: Optional[str] = None, tags: Optional[Iterable[str]] = None,
                      area_id: Optional[str] = None, area_title: Optional[str] = None,
                      todos: Optional[Iterable[str]] = None) -> Command:
    """things:///add-project"""
    params: Dict[str, str] = {}
    _put(params, "title", title)
    _put(params, "type", "project")
    _put(params, "notes", notes)
    _put(params, "when", when)
    _put(params, "deadline", deadline)
    _put_list(params, "tags", tags, TAG_DELIMITER)
    _put(params, "area-id", area_id)
    _put(params, "area", area_title)
    _put_list(params, "to-dos", todos, LINE_DELIMITER)
    return Command(ACTION_ADD_PROJECT, params)


def build_update_todo(id: str, title: Optional[str] = None, notes: Optional[str] = None,
                      when: Optional[str] = None, deadline: Optional[str] = None,
                      tags: Optional[Iterable[str]] = None, completed: Optional[bool] = None,
                      canceled: Optional[bool] = None) -> Command:
    """
    things:///update

    Tags are sent as add-tags, which appends to the todo's tags. Things only
    attaches tags that already exist; unknown tag names are ignored by the app.
    """
    params: Dict[str, str] = {}
    _put(params, "id", id)
    _put(params, "title", title)
    _put(params, "notes", notes)
    _put(params, "when", when)
    _put(params, "deadline", deadline)
    _put_list(params, "add-tags", tags, TAG_DELIMITER)
    _put_flag(params, "completed", completed)
    _put_flag(params, "canceled", canceled)
    return Command(ACTION_UPDATE, params)


def build_update_project(id: str, title: Optional[str] = None, notes: Optional[str] = None,
                         when: Optional[str] = None, deadline: Optional[str] = None,
                         tags: Optional[Iterable[str]] = None, completed: Optional[bool] = None,
                         canceled: Optional[bool] = None) -> Command:
    """things:///update-project (tags replace the project's tags)"""
    params: Dict[str, str] = {}
    _put(params, "id", id)
    _put(params, "type", "project")
    _put(params, "title", title)
    _put(params, "notes", notes)
    _put(params, "when", when)
    _put(params, "deadline", deadline)
    _put_list(params, "tags", tags, TAG_DELIMITER)
    _put_flag(params, "completed", completed)
    _put_flag(params, "canceled", canceled)
    return Command(ACTION_UPDATE_PROJECT, params)


def build_search(query: Optional[str] = None) -> Command:
    """things:///search"""
    params: Dict[str, str] = {}
    _put(params, "query", query)
    return Command(ACTION_SEARCH, params)


def build_show(id: str, query: Optional[str] = None,
               filter_tags: Optional[Iterable[str]] = None) -> Command:
    """things:///show"""
    params: Dict[str, str] = {}
    _put(params, "id", id)
    _put(params, "query", query)
    _put_list(params, "filter", filter_tags, TAG_DELIMITER)
    return Command(ACTION_SHOW, params)
