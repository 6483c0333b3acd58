#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
things-mcp - Things 3 MCP Server
Exposes the Things 3 database and URL scheme to AI assistants as MCP tools

Version: 0.1.0
"""

__version__ = "0.1.0"
__description__ = "Model Context Protocol server for Things 3"

# Export main classes
from .storage.database import ThingsDatabase
from .mcp.router import ToolRouter

__all__ = [
    "ThingsDatabase",
    "ToolRouter",
]
