#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration management module
Loads things-mcp settings from an optional YAML file and the process environment
"""

import logging
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Mapping, Optional
from dataclasses import dataclass

from .constants import (
    ENV_DATABASE_PATH, ENV_AUTH_TOKEN, ENV_DATE_ENCODING, ENV_TODAY_POLICY,
    DATE_ENCODINGS, TODAY_POLICIES, DATE_ENCODING_JULIAN, TODAY_POLICY_BUCKET,
    DEFAULT_JULIAN_OFFSET, DEFAULT_DAY_COUNTER_EPOCH, DEFAULT_DAY_COUNTER_UNITS_PER_DAY,
    THINGS_APP_NAME, DEFAULT_LAUNCH_DELAY_SECONDS,
)

logger = logging.getLogger('things_mcp.config')


@dataclass
class StoreConfig:
    """Things database configuration"""
    database_path: Optional[str] = None       # Explicit path, skips discovery
    date_encoding: str = DATE_ENCODING_JULIAN  # day_counter, julian
    julian_offset: int = DEFAULT_JULIAN_OFFSET
    day_counter_epoch: str = DEFAULT_DAY_COUNTER_EPOCH
    day_counter_units_per_day: int = DEFAULT_DAY_COUNTER_UNITS_PER_DAY
    today_policy: str = TODAY_POLICY_BUCKET    # bucket, date


@dataclass
class URLSchemeConfig:
    """Things URL scheme configuration"""
    auth_token: Optional[str] = None
    app_name: str = THINGS_APP_NAME
    launch_delay_seconds: float = DEFAULT_LAUNCH_DELAY_SECONDS


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    verbose: bool = False


class Config:
    """Main configuration class"""

    def __init__(self, config_path: Optional[str] = None,
                 environ: Optional[Mapping[str, str]] = None):
        """
        Initialize configuration

        Args:
            config_path: Configuration file path, if None use default path
            environ: Environment mapping, defaults to os.environ
        """
        self.config_path = self._resolve_config_path(config_path)
        self.environ = os.environ if environ is None else environ

        self._load_config()
        self._apply_environment()
        self._validate()

    def _resolve_config_path(self, config_path: Optional[str]) -> Path:
        """Resolve configuration file path"""
        if config_path:
            return Path(config_path).expanduser()
        return Path.home() / '.things-mcp' / 'config.yaml'

    def _load_config(self):
        """Load configuration file"""
        default_config = {
            'store': {
                'database_path': None,
                'date_encoding': DATE_ENCODING_JULIAN,
                'julian_offset': DEFAULT_JULIAN_OFFSET,
                'day_counter_epoch': DEFAULT_DAY_COUNTER_EPOCH,
                'day_counter_units_per_day': DEFAULT_DAY_COUNTER_UNITS_PER_DAY,
                'today_policy': TODAY_POLICY_BUCKET
            },
            'url_scheme': {
                'auth_token': None,
                'app_name': THINGS_APP_NAME,
                'launch_delay_seconds': DEFAULT_LAUNCH_DELAY_SECONDS
            },
            'logging': {
                'level': 'INFO',
                'verbose': False
            }
        }

        # If config file exists, load and merge
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    user_config = yaml.safe_load(f) or {}
                user_config = self._known_settings(default_config, user_config)
                self._config_data = self._deep_merge(default_config, user_config)
            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load configuration file {self.config_path}: {e}")
                self._config_data = default_config
        else:
            self._config_data = default_config

        self.store = StoreConfig(**self._config_data['store'])
        self.url_scheme = URLSchemeConfig(**self._config_data['url_scheme'])
        self.logging = LoggingConfig(**self._config_data['logging'])

    def _known_settings(self, defaults: Dict[str, Any], user_config: Any) -> Dict[str, Any]:
        """
        Keep only the sections and keys that have a default

        Raises:
            ValueError: If the file or one of its sections is not a mapping
        """
        if not isinstance(user_config, dict):
            raise ValueError(f"expected a mapping, got {type(user_config).__name__}")

        known = {}
        for section, values in user_config.items():
            if section not in defaults:
                logger.warning(f"Ignoring unknown configuration section '{section}'")
                continue
            if not isinstance(values, dict):
                raise ValueError(f"section '{section}' must be a mapping")
            unknown = sorted(str(key) for key in values if key not in defaults[section])
            if unknown:
                logger.warning(f"Ignoring unknown {section} settings: {', '.join(unknown)}")
            known[section] = {k: v for k, v in values.items() if k in defaults[section]}
        return known

    def _apply_environment(self):
        """Environment variables take precedence over the file"""
        if self.environ.get(ENV_DATABASE_PATH):
            self.store.database_path = self.environ[ENV_DATABASE_PATH]
        if self.environ.get(ENV_AUTH_TOKEN):
            self.url_scheme.auth_token = self.environ[ENV_AUTH_TOKEN]
        if self.environ.get(ENV_DATE_ENCODING):
            self.store.date_encoding = self.environ[ENV_DATE_ENCODING]
        if self.environ.get(ENV_TODAY_POLICY):
            self.store.today_policy = self.environ[ENV_TODAY_POLICY]

    def _validate(self):
        if self.store.date_encoding not in DATE_ENCODINGS:
            raise ValueError(
                f"Unsupported date encoding '{self.store.date_encoding}', "
                f"expected one of {sorted(DATE_ENCODINGS)}"
            )
        if self.store.today_policy not in TODAY_POLICIES:
            raise ValueError(
                f"Unsupported today policy '{self.store.today_policy}', "
                f"expected one of {sorted(TODAY_POLICIES)}"
            )

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries"""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    @property
    def auth_token(self) -> Optional[str]:
        """Credential for update commands, None when not configured"""
        return self.url_scheme.auth_token or None

    @property
    def has_auth_token(self) -> bool:
        return bool(self.auth_token)

    def get_database_override(self) -> Optional[Path]:
        """Explicitly configured database path, if any"""
        if not self.store.database_path:
            return None
        return Path(self.store.database_path).expanduser()

    def get_date_encoding_options(self) -> Dict[str, Any]:
        """Keyword options for codec.get_date_encoding"""
        if self.store.date_encoding == DATE_ENCODING_JULIAN:
            return {'offset': self.store.julian_offset}
        return {
            'epoch': self.store.day_counter_epoch,
            'units_per_day': self.store.day_counter_units_per_day
        }
