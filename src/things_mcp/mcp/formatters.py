#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Output formatters
Render Things records as readable text for MCP responses
"""

from typing import Callable, Iterable, List, Optional, TypeVar

from ..core.codec import Status, Bucket
from ..storage.models import Todo, Project, Area, Tag
from ..utils.constants import (
    ICON_COMPLETED, ICON_CANCELED, ICON_OPEN, ICON_PROJECT, ICON_AREA, ICON_TAG,
    CHECK_DONE, CHECK_OPEN,
)

T = TypeVar('T')


def _status_icon(status: Status, default: str) -> str:
    if status == Status.COMPLETED:
        return ICON_COMPLETED
    if status == Status.CANCELED:
        return ICON_CANCELED
    return default


def _text(value: Optional[str]) -> str:
    return "" if value is None else str(value)


def _flatten(text: Optional[str]) -> str:
    return str(text).replace("\n", " ") if text else ""


def _scheduling_lines(item) -> List[str]:
    """When/Start/Deadline/Tags lines shared by todos and projects"""
    lines = []
    if item.when is not None and item.when != Bucket.UNKNOWN:
        lines.append(f"   When: {item.when.value}")
    if item.start_date:
        lines.append(f"   Start: {item.start_date.isoformat()}")
    if item.deadline:
        lines.append(f"   Deadline: {item.deadline.isoformat()}")
    if item.tags:
        lines.append(f"   Tags: {', '.join(item.tags)}")
    return lines


def format_todo(todo: Todo) -> str:
    """Multi-line block for one todo"""
    lines = [f"{_status_icon(todo.status, ICON_OPEN)} **{_text(todo.title)}**"]
    if todo.uuid:
        lines.append(f"   UUID: {todo.uuid}")

    if todo.notes:
        lines.append(f"   Notes: {_flatten(todo.notes)}")

    lines.extend(_scheduling_lines(todo))

    if todo.checklist_items:
        lines.append("   Checklist:")
        for item in todo.checklist_items:
            check = CHECK_DONE if item.completed else CHECK_OPEN
            lines.append(f"     {check} {_text(item.title)}")

    if todo.created:
        lines.append(f"   Created: {todo.created.isoformat()}")
    if todo.modified:
        lines.append(f"   Modified: {todo.modified.isoformat()}")

    return "\n".join(lines)


def format_project(project: Project) -> str:
    """Multi-line block for one project, listing its todos when loaded"""
    lines = [f"{_status_icon(project.status, ICON_PROJECT)} **{_text(project.title)}** (Project)"]
    if project.uuid:
        lines.append(f"   UUID: {project.uuid}")

    if project.notes:
        lines.append(f"   Notes: {_flatten(project.notes)}")

    lines.extend(_scheduling_lines(project))

    if project.todos:
        lines.append("   Todos:")
        for todo in project.todos:
            check = CHECK_DONE if todo.status == Status.COMPLETED else CHECK_OPEN
            lines.append(f"     {check} {_text(todo.title)}")

    return "\n".join(lines)


def format_area(area: Area) -> str:
    lines = [f"{ICON_AREA} **{_text(area.title)}** (Area)"]
    if area.uuid:
        lines.append(f"   UUID: {area.uuid}")

    if area.tags:
        lines.append(f"   Tags: {', '.join(area.tags)}")

    if area.projects:
        lines.append("   Projects:")
        for project in area.projects:
            lines.append(f"     {ICON_PROJECT} {_text(project.title)}")

    return "\n".join(lines)


def format_tag(tag: Tag) -> str:
    lines = [f"{ICON_TAG} {_text(tag.title)}"]
    if tag.items:
        lines.append(f"   Items: {len(tag.items)}")
    return "\n".join(lines)


def format_list(items: Iterable[T], formatter: Callable[[T], str], separator: str = "\n\n") -> str:
    """Format each item and join the blocks"""
    return separator.join(formatter(item) for item in items)
