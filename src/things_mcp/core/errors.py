#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Error taxonomy
Every failure that reaches the tool router is one of these kinds
"""

from typing import Any, Dict, Optional


class ThingsMCPError(Exception):
    """Base exception for things-mcp errors"""

    code = "ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class StoreUnavailableError(ThingsMCPError):
    """Things database could not be located or opened"""

    code = "STORE_UNAVAILABLE"


class InvalidArgumentError(ThingsMCPError):
    """Tool name or argument value rejected"""

    code = "INVALID_ARGUMENT"


class DispatchError(ThingsMCPError):
    """URL scheme command could not be delivered to Things"""

    code = "DISPATCH_FAILED"


class AuthenticationRequiredError(ThingsMCPError):
    """Credential-gated operation attempted without THINGS_AUTH_TOKEN"""

    code = "AUTHENTICATION_REQUIRED"
