#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
URL scheme dispatcher
Delivers things:/// commands to the Things app through the OS open handler
"""

import logging
import subprocess
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .commands import Command
from ..core.errors import DispatchError
from ..storage.database import is_app_running
from ..utils.config import Config

logger = logging.getLogger('things_mcp.url_scheme')


@dataclass
class DispatchResult:
    """Outcome of a dispatched command"""
    success: bool
    error: Optional[str] = None
    url: Optional[str] = None


def open_url(url: str) -> subprocess.CompletedProcess:
    return subprocess.run(["open", url], capture_output=True, text=True)


def launch_app(app_name: str):
    """Start the app without waiting for it"""
    subprocess.Popen(
        ["open", "-a", app_name],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL
    )


class URLSchemeDispatcher:
    """Sends commands to Things, launching it first when it is not running"""

    def __init__(self, config: Config,
                 opener: Optional[Callable[[str], subprocess.CompletedProcess]] = None,
                 launcher: Optional[Callable[[str], None]] = None,
                 is_running: Optional[Callable[[str], bool]] = None,
                 sleep: Optional[Callable[[float], None]] = None):
        """
        Initialize dispatcher

        Args:
            config: Configuration object (auth token, app name, launch delay)
            opener: Opens a URL and returns the completed process
            launcher: Launches the app by name
            is_running: Process-presence check by app name
            sleep: Used for the settling delay after a launch
        """
        self.config = config
        self.logger = logger
        self.opener = opener or open_url
        self.launcher = launcher or launch_app
        self.is_running = is_running or is_app_running
        self.sleep = sleep or time.sleep

    def build_url(self, command: Command) -> str:
        """Command URL with the auth token attached where the action takes one"""
        extra = {}
        token = self.config.auth_token
        if command.requires_auth and token:
            extra["auth-token"] = token
        return command.to_url(extra)

    def ensure_running(self):
        app_name = self.config.url_scheme.app_name
        if not self.is_running(app_name):
            self.logger.info(f"{app_name} is not running, launching it")
            self.launcher(app_name)
            self.sleep(self.config.url_scheme.launch_delay_seconds)

    def execute(self, command: Command) -> DispatchResult:
        """
        Deliver a command; never raises

        Args:
            command: Command to send

        Returns:
            DispatchResult, success reflecting the open handler's exit status
        """
        url = None
        try:
            url = self.build_url(command)
            self.logger.info(f"Dispatching things:///{command.action} ({len(command.params)} params)")

            self.ensure_running()

            completed = self.opener(url)
            if completed.returncode != 0:
                raise DispatchError(
                    (completed.stderr or "").strip() or f"open exited with status {completed.returncode}",
                    {"returncode": completed.returncode}
                )
            return DispatchResult(success=True, url=url)

        except DispatchError as e:
            self.logger.error(f"Dispatch of {command.action} failed: {e.message}")
            return DispatchResult(success=False, error=e.message, url=url)
        except Exception as e:
            self.logger.error(f"Dispatch of {command.action} failed: {e}")
            return DispatchResult(success=False, error=str(e))
