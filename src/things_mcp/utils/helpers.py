#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Common utility functions
Provides logging setup and small value helpers
"""

import logging
import sys
from datetime import date
from typing import Any, Dict, Optional

_SECRET_KEYS = {'auth-token', 'auth_token', 'token', 'password', 'secret'}


def setup_logging(level: str = "INFO", verbose: bool = False) -> logging.Logger:
    """
    Setup logging system

    stdout carries the MCP protocol, so all output goes to stderr.

    Args:
        level: Log level name
        verbose: Force DEBUG level

    Returns:
        Configured logger object
    """
    log_level = logging.DEBUG if verbose else getattr(logging, str(level).upper(), logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logger = logging.getLogger('things_mcp')
    logger.setLevel(log_level)

    # Avoid duplicate handlers
    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def redact(params: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of params safe to log"""
    return {k: ('***' if k in _SECRET_KEYS else v) for k, v in params.items()}


def parse_iso_date(value: Any) -> Optional[date]:
    """Parse YYYY-MM-DD, None when the value is not a valid date"""
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None
