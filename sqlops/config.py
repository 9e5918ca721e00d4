"""
Configuration loading and validation for SQL Ops.
"""

import os
import re
from typing import Any

import yaml

from .models import ConnectionSpec


class ConfigLoader:
    """Loads and validates configuration from YAML file."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')
    DEFAULT_CONNECTION = 'default'

    def __init__(self, config_path: str):
        self.config_path = config_path
        self.config = self._load_config()

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(self.config_path, 'r') as f:
            config = yaml.safe_load(f) or {}

        return self._resolve_env_vars(config)

    def _resolve_env_vars(self, obj: Any) -> Any:
        """Recursively resolve environment variables in config."""
        if isinstance(obj, str):
            matches = self.ENV_VAR_PATTERN.findall(obj)
            for match in matches:
                env_value = os.environ.get(match, '')
                obj = obj.replace(f'${{{match}}}', env_value)
            return obj
        elif isinstance(obj, dict):
            return {k: self._resolve_env_vars(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [self._resolve_env_vars(item) for item in obj]
        return obj

    def get_connection(self, name: str = DEFAULT_CONNECTION) -> ConnectionSpec:
        """Get a named connection as a ConnectionSpec."""
        connections = self.config.get('connections') or {}
        if name not in connections:
            raise ValueError(f"Connection '{name}' not found in configuration")
        return ConnectionSpec.from_dict(connections[name])

    def get_table_options(self) -> dict[str, Any]:
        """Get skip/structure/tables options."""
        return self.config.get('table_selection', {}) or {}

    def get_dump_settings(self) -> dict[str, Any]:
        """Get dump settings."""
        return self.config.get('dump', {})

    def get_query_settings(self) -> dict[str, Any]:
        """Get query settings."""
        return self.config.get('query', {})

    def get_superuser(self) -> dict[str, Any]:
        """Get superuser credentials used for database creation."""
        return self.config.get('superuser', {})

    def get_logging_settings(self) -> dict[str, Any]:
        """Get logging settings."""
        return self.config.get('logging', {})
