#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tool router
Validates a tool call against the tool table, runs it against the store or the
URL scheme, and renders the result as text
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from .formatters import format_todo, format_project, format_area, format_tag, format_list
from .tools import ToolDefinition, get_tool_definition
from ..core.errors import (
    ThingsMCPError, InvalidArgumentError, AuthenticationRequiredError,
)
from ..storage.database import ThingsDatabase
from ..storage.models import Todo
from ..url_scheme.commands import (
    Command, build_add_todo, build_add_project, build_update_todo,
    build_update_project, build_search, build_show,
)
from ..url_scheme.dispatcher import URLSchemeDispatcher
from ..utils.config import Config
from ..utils.constants import (
    AUTH_REQUIRED_MESSAGE, DEFAULT_LOGBOOK_PERIOD, ICON_COMPLETED, ICON_CANCELED,
)
from ..utils.helpers import redact

logger = logging.getLogger('things_mcp.router')

_JSON_TYPES = {
    "string": (str,),
    "boolean": (bool,),
    "integer": (int,),
    "number": (int, float),
    "array": (list, tuple),
    "object": (dict,),
}


def _matches_type(value: Any, schema: Dict[str, Any]) -> bool:
    expected = schema.get("type")
    if expected is None:
        return True
    if expected in ("integer", "number") and isinstance(value, bool):
        return False
    if not isinstance(value, _JSON_TYPES.get(expected, (object,))):
        return False
    if expected == "array" and "items" in schema:
        return all(_matches_type(item, schema["items"]) for item in value)
    return True


class ToolRouter:
    """Entry point for every tool call"""

    def __init__(self, database: ThingsDatabase, dispatcher: URLSchemeDispatcher, config: Config):
        self.database = database
        self.dispatcher = dispatcher
        self.config = config
        self.logger = logger

        self.handlers: Dict[str, Callable[[Dict[str, Any]], str]] = {
            # Basic operations
            "get-todos": self._tool_get_todos,
            "get-projects": self._tool_get_projects,
            "get-areas": self._tool_get_areas,
            # List views
            "get-inbox": lambda args: self._list_view("inbox"),
            "get-today": lambda args: self._list_view("today"),
            "get-upcoming": lambda args: self._list_view("upcoming"),
            "get-anytime": lambda args: self._list_view("anytime"),
            "get-someday": lambda args: self._list_view("someday"),
            "get-logbook": self._tool_get_logbook,
            "get-trash": lambda args: self._list_view("trash"),
            # Tags
            "get-tags": self._tool_get_tags,
            "get-tagged-items": self._tool_get_tagged_items,
            # Search
            "search-todos": self._tool_search_todos,
            "search-advanced": self._tool_search_advanced,
            "get-recent": self._tool_get_recent,
            # URL scheme
            "add-todo": self._tool_add_todo,
            "add-project": self._tool_add_project,
            "update-todo": self._tool_update_todo,
            "update-project": self._tool_update_project,
            "search-items": self._tool_search_items,
            "show-item": self._tool_show_item,
        }

    # ==================== Entry points ====================

    def handle_tool_call(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> str:
        """
        Run a tool call and always return text

        Args:
            name: Tool name
            arguments: Loosely-typed argument bag from the client

        Returns:
            Formatted result, or a failure message
        """
        try:
            return self.dispatch(name, arguments)
        except ThingsMCPError as e:
            self.logger.warning(f"Tool call {name} rejected: [{e.code}] {e.message}")
            return f"{ICON_CANCELED} {e.message}"
        except Exception as e:
            self.logger.exception(f"Tool call failed: {name}")
            return f"Error: {e}"

    def dispatch(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> str:
        """
        Validate and run a tool call

        Raises:
            InvalidArgumentError: Unknown tool or invalid arguments
            AuthenticationRequiredError: Update tool without a configured token
            StoreUnavailableError: Things database missing or unreadable
        """
        definition = self.validate(name, arguments)
        args = self._known_arguments(definition, arguments or {})

        if definition.requires_auth and not self.config.has_auth_token:
            raise AuthenticationRequiredError(AUTH_REQUIRED_MESSAGE)

        self.logger.debug(f"Tool call: {name}, args: {redact(args)}")
        return self.handlers[name](args)

    def validate(self, name: str, arguments: Optional[Dict[str, Any]]) -> ToolDefinition:
        """Check tool name, required arguments and argument types"""
        definition = get_tool_definition(name)
        if definition is None or name not in self.handlers:
            raise InvalidArgumentError(f"Unknown tool: {name}", {"tool": name})

        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidArgumentError(f"Arguments for {name} must be an object")

        for key in definition.required:
            if arguments.get(key) is None:
                raise InvalidArgumentError(f"Missing required argument '{key}' for {name}", {"argument": key})

        for key, schema in definition.properties.items():
            value = arguments.get(key)
            if value is None:
                continue
            if not _matches_type(value, schema):
                raise InvalidArgumentError(
                    f"Invalid argument '{key}' for {name}: expected {schema.get('type')}", {"argument": key}
                )
            if "enum" in schema and value not in schema["enum"]:
                raise InvalidArgumentError(
                    f"Invalid argument '{key}' for {name}: {value} (expected one of {', '.join(schema['enum'])})",
                    {"argument": key}
                )

        return definition

    def _known_arguments(self, definition: ToolDefinition, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Arguments declared by the schema with a non-null value"""
        return {
            key: arguments[key]
            for key in definition.properties
            if arguments.get(key) is not None
        }

    # ==================== Read tools ====================

    @staticmethod
    def _todo_list(todos: List[Todo], header: str, empty: str) -> str:
        if not todos:
            return empty
        return f"# {header}\n\n" + format_list(todos, format_todo)

    def _tool_get_todos(self, args: Dict[str, Any]) -> str:
        todos = self.database.get_todos(
            project_uuid=args.get("project_uuid"),
            include_items=args.get("include_items", True)
        )
        if not todos:
            return "No todos found"
        return format_list(todos, format_todo)

    def _tool_get_projects(self, args: Dict[str, Any]) -> str:
        projects = self.database.get_projects(include_items=args.get("include_items", False))
        if not projects:
            return "No projects found"
        return format_list(projects, format_project)

    def _tool_get_areas(self, args: Dict[str, Any]) -> str:
        areas = self.database.get_areas(include_items=args.get("include_items", False))
        if not areas:
            return "No areas found"
        return format_list(areas, format_area)

    def _list_view(self, view: str) -> str:
        title = view.capitalize()
        return self._todo_list(self.database.get_list_view(view), title, f"No todos in {title}")

    def _tool_get_logbook(self, args: Dict[str, Any]) -> str:
        todos = self.database.get_logbook(
            period=args.get("period", DEFAULT_LOGBOOK_PERIOD),
            limit=args.get("limit")
        )
        return self._todo_list(todos, "Logbook", "No completed todos found")

    def _tool_get_tags(self, args: Dict[str, Any]) -> str:
        tags = self.database.get_tags(include_items=args.get("include_items", False))
        if not tags:
            return "No tags found"
        return format_list(tags, format_tag, separator="\n")

    def _tool_get_tagged_items(self, args: Dict[str, Any]) -> str:
        tag = args["tag"]
        return self._todo_list(
            self.database.get_tagged_items(tag),
            f"Items tagged with '{tag}'",
            f"No items found with tag '{tag}'"
        )

    def _tool_search_todos(self, args: Dict[str, Any]) -> str:
        query = args["query"]
        return self._todo_list(
            self.database.search_todos(query),
            f"Search results for '{query}'",
            f"No todos found matching '{query}'"
        )

    def _tool_search_advanced(self, args: Dict[str, Any]) -> str:
        return self._todo_list(
            self.database.search_advanced(args),
            "Advanced search results",
            "No todos found matching criteria"
        )

    def _tool_get_recent(self, args: Dict[str, Any]) -> str:
        period = args["period"]
        return self._todo_list(
            self.database.get_recent(period),
            f"Recent items (last {period})",
            "No recent items found"
        )

    # ==================== URL scheme tools ====================

    def _run_command(self, command: Command, success: str, failure: str) -> str:
        result = self.dispatcher.execute(command)
        if result.success:
            return f"{ICON_COMPLETED} {success}"
        return f"{ICON_CANCELED} Failed to {failure}: {result.error}"

    def _tool_add_todo(self, args: Dict[str, Any]) -> str:
        return self._run_command(build_add_todo(**args), f"Todo created: {args['title']}", "create todo")

    def _tool_add_project(self, args: Dict[str, Any]) -> str:
        return self._run_command(build_add_project(**args), f"Project created: {args['title']}", "create project")

    def _tool_update_todo(self, args: Dict[str, Any]) -> str:
        return self._run_command(build_update_todo(**args), "Todo updated", "update todo")

    def _tool_update_project(self, args: Dict[str, Any]) -> str:
        return self._run_command(build_update_project(**args), "Project updated", "update project")

    def _tool_search_items(self, args: Dict[str, Any]) -> str:
        return self._run_command(
            build_search(args["query"]), f"Opened search in Things for: {args['query']}", "open search"
        )

    def _tool_show_item(self, args: Dict[str, Any]) -> str:
        return self._run_command(build_show(**args), "Opened item in Things", "show item")
