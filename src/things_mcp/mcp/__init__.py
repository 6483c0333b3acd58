#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
things-mcp MCP Server Module
Tool table, router and stdio server
"""

from .server import MCPServer, run_server, main

__all__ = ['MCPServer', 'run_server', 'main']
