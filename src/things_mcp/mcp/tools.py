#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
MCP tool definitions
Static table of every Things tool with its description and input schema
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from mcp.types import Tool

_PERIOD_PATTERN = r'^\d+[dwmy]$'

_STRING_LIST = {"type": "array", "items": {"type": "string"}}


def _schema(properties: Optional[Dict[str, Any]] = None, required: Optional[List[str]] = None) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": properties or {},
        "required": required or [],
    }


def _include_items(description: str, default: bool = False) -> Dict[str, Any]:
    return {
        "include_items": {
            "type": "boolean",
            "description": description,
            "default": default,
        }
    }


def _update_properties(kind: str) -> Dict[str, Any]:
    return {
        "id": {"type": "string", "description": f"ID of the {kind} to update"},
        "title": {"type": "string", "description": "New title"},
        "notes": {"type": "string", "description": "New notes"},
        "when": {"type": "string", "description": "New schedule"},
        "deadline": {"type": "string", "description": "New deadline"},
        "tags": {**_STRING_LIST, "description": "New tags"},
        "completed": {"type": "boolean", "description": "Mark as completed"},
        "canceled": {"type": "boolean", "description": "Mark as canceled"},
    }


@dataclass(frozen=True)
class ToolDefinition:
    """One entry of the tool table"""
    name: str
    description: str
    input_schema: Dict[str, Any]
    requires_auth: bool = False

    @property
    def required(self) -> List[str]:
        return list(self.input_schema.get("required", []))

    @property
    def properties(self) -> Dict[str, Any]:
        return self.input_schema.get("properties", {})

    def to_tool(self) -> Tool:
        return Tool(name=self.name, description=self.description, inputSchema=self.input_schema)


TOOL_DEFINITIONS: List[ToolDefinition] = [
    # ===== Basic operations =====
    ToolDefinition(
        name="get-todos",
        description="Get todos from Things, optionally filtered by project",
        input_schema=_schema({
            "project_uuid": {
                "type": "string",
                "description": "Optional UUID of a specific project to get todos from",
            },
            **_include_items("Include checklist items", default=True),
        }),
    ),
    ToolDefinition(
        name="get-projects",
        description="Get all projects from Things",
        input_schema=_schema(_include_items("Include tasks within projects")),
    ),
    ToolDefinition(
        name="get-areas",
        description="Get all areas from Things",
        input_schema=_schema(_include_items("Include projects and tasks within areas")),
    ),

    # ===== List views =====
    ToolDefinition(name="get-inbox", description="Get todos from Inbox", input_schema=_schema()),
    ToolDefinition(name="get-today", description="Get todos due today", input_schema=_schema()),
    ToolDefinition(name="get-upcoming", description="Get upcoming todos", input_schema=_schema()),
    ToolDefinition(name="get-anytime", description="Get todos from Anytime list", input_schema=_schema()),
    ToolDefinition(name="get-someday", description="Get todos from Someday list", input_schema=_schema()),
    ToolDefinition(
        name="get-logbook",
        description="Get completed todos from Logbook, defaults to last 7 days",
        input_schema=_schema({
            "period": {
                "type": "string",
                "description": "Time period to look back (e.g., '3d', '1w', '2m', '1y'). Defaults to '7d'",
                "pattern": _PERIOD_PATTERN,
            },
            "limit": {
                "type": "integer",
                "description": "Maximum number of entries to return. Defaults to 50",
                "minimum": 1,
                "maximum": 100,
            },
        }),
    ),
    ToolDefinition(name="get-trash", description="Get trashed todos", input_schema=_schema()),

    # ===== Tags =====
    ToolDefinition(
        name="get-tags",
        description="Get all tags",
        input_schema=_schema(_include_items("Include items tagged with each tag")),
    ),
    ToolDefinition(
        name="get-tagged-items",
        description="Get items with a specific tag",
        input_schema=_schema(
            {"tag": {"type": "string", "description": "Tag title to filter by"}},
            ["tag"],
        ),
    ),

    # ===== Search =====
    ToolDefinition(
        name="search-todos",
        description="Search todos by title or notes",
        input_schema=_schema(
            {"query": {"type": "string", "description": "Search term to look for in todo titles and notes"}},
            ["query"],
        ),
    ),
    ToolDefinition(
        name="search-advanced",
        description="Advanced todo search with multiple filters",
        input_schema=_schema({
            "status": {
                "type": "string",
                "enum": ["incomplete", "completed", "canceled"],
                "description": "Filter by todo status",
            },
            "start_date": {"type": "string", "description": "Filter by start date (YYYY-MM-DD)"},
            "deadline": {"type": "string", "description": "Filter by deadline (YYYY-MM-DD)"},
            "tag": {"type": "string", "description": "Filter by tag"},
            "area": {"type": "string", "description": "Filter by area UUID"},
            "type": {
                "type": "string",
                "enum": ["to-do", "project", "heading"],
                "description": "Filter by item type",
            },
        }),
    ),

    # ===== Recent items =====
    ToolDefinition(
        name="get-recent",
        description="Get recently created items",
        input_schema=_schema(
            {
                "period": {
                    "type": "string",
                    "description": "Time period (e.g., '3d', '1w', '2m', '1y')",
                    "pattern": _PERIOD_PATTERN,
                }
            },
            ["period"],
        ),
    ),

    # ===== URL scheme =====
    ToolDefinition(
        name="add-todo",
        description="Create a new todo in Things",
        input_schema=_schema(
            {
                "title": {"type": "string", "description": "Title of the todo"},
                "notes": {"type": "string", "description": "Notes for the todo"},
                "when": {
                    "type": "string",
                    "description": "When to schedule the todo (today, tomorrow, evening, anytime, someday, or YYYY-MM-DD)",
                },
                "deadline": {"type": "string", "description": "Deadline for the todo (YYYY-MM-DD)"},
                "tags": {**_STRING_LIST, "description": "Tags to apply to the todo"},
                "checklist_items": {**_STRING_LIST, "description": "Checklist items to add"},
                "list_id": {"type": "string", "description": "ID of project/area to add to"},
                "list_title": {"type": "string", "description": "Title of project/area to add to"},
                "heading": {"type": "string", "description": "Heading to add under"},
            },
            ["title"],
        ),
    ),
    ToolDefinition(
        name="add-project",
        description="Create a new project in Things",
        input_schema=_schema(
            {
                "title": {"type": "string", "description": "Title of the project"},
                "notes": {"type": "string", "description": "Notes for the project"},
                "when": {"type": "string", "description": "When to schedule the project"},
                "deadline": {"type": "string", "description": "Deadline for the project"},
                "tags": {**_STRING_LIST, "description": "Tags to apply to the project"},
                "area_id": {"type": "string", "description": "ID of area to add to"},
                "area_title": {"type": "string", "description": "Title of area to add to"},
                "todos": {**_STRING_LIST, "description": "Initial todos to create in the project"},
            },
            ["title"],
        ),
    ),
    ToolDefinition(
        name="update-todo",
        description="Update an existing todo in Things",
        input_schema=_schema(_update_properties("todo"), ["id"]),
        requires_auth=True,
    ),
    ToolDefinition(
        name="update-project",
        description="Update an existing project in Things",
        input_schema=_schema(_update_properties("project"), ["id"]),
        requires_auth=True,
    ),
    ToolDefinition(
        name="search-items",
        description="Search for items in Things",
        input_schema=_schema(
            {"query": {"type": "string", "description": "Search query"}},
            ["query"],
        ),
    ),
    ToolDefinition(
        name="show-item",
        description="Show a specific item or list in Things",
        input_schema=_schema(
            {
                "id": {
                    "type": "string",
                    "description": "ID of item to show, or one of: inbox, today, upcoming, anytime, someday, logbook",
                },
                "query": {"type": "string", "description": "Optional query to filter by"},
                "filter_tags": {**_STRING_LIST, "description": "Optional tags to filter by"},
            },
            ["id"],
        ),
    ),
]

TOOLS_BY_NAME: Dict[str, ToolDefinition] = {tool.name: tool for tool in TOOL_DEFINITIONS}


def get_tool_definition(name: str) -> Optional[ToolDefinition]:
    return TOOLS_BY_NAME.get(name)


def get_tools() -> List[Tool]:
    """Tool list advertised to MCP clients"""
    return [definition.to_tool() for definition in TOOL_DEFINITIONS]
