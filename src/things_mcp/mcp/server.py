#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
things-mcp MCP Server Main Module
Implemented using official MCP SDK, exposing Things 3 tools over stdio
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

# Official MCP SDK
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from .router import ToolRouter
from .tools import get_tools
from .. import __version__
from ..storage.database import ThingsDatabase
from ..url_scheme.dispatcher import URLSchemeDispatcher
from ..utils.config import Config
from ..utils.helpers import setup_logging


class MCPServer:
    """
    things-mcp MCP Server

    Reads the Things database for list and search tools and drives the Things
    URL scheme for create/update tools.
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize MCP Server

        Args:
            config: Configuration object, uses default configuration when None
        """
        self.config = config or Config()
        self.logger = logging.getLogger('things_mcp.mcp_server')

        self.database = ThingsDatabase(self.config)
        self.dispatcher = URLSchemeDispatcher(self.config)
        self.router = ToolRouter(self.database, self.dispatcher, self.config)

        self.server = Server("things", version=__version__)
        self._register_handlers()

        self.logger.info(
            f"things-mcp initialized (date encoding: {self.config.store.date_encoding}, "
            f"today policy: {self.config.store.today_policy})"
        )

    def _register_handlers(self):
        """Register MCP handlers"""

        @self.server.list_tools()
        async def list_tools() -> List[Tool]:
            """Return available tools list"""
            return get_tools()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
            """Handle tool calls"""
            return await self._handle_tool_call(name, arguments)

    async def _handle_tool_call(self, name: str, arguments: Dict[str, Any]) -> List[TextContent]:
        """Handle tool calls"""
        try:
            # Calls run to completion one at a time
            text = self.router.handle_tool_call(name, arguments or {})
        except Exception as e:
            self.logger.error(f"Tool call failed: {name}, error: {e}")
            text = f"Error: {e}"
        return [TextContent(type="text", text=text)]

    def check_things_running(self):
        """Warn when Things is not running; commands will launch it"""
        try:
            if not self.database.is_things_running():
                self.logger.warning("Things app is not running. Will attempt to launch when needed.")
        except Exception as e:
            self.logger.warning(f"Could not check whether Things is running: {e}")

    async def run(self):
        """Run MCP Server"""
        self.logger.info("Starting Things MCP server...")
        self.check_things_running()

        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options()
            )


async def run_server():
    """Start MCP Server"""
    config = Config()
    setup_logging(config.logging.level, config.logging.verbose)

    server = MCPServer(config)
    await server.run()


def main():
    """MCP server entry point"""
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
