"""
Config system - Layered typed configuration with validation.

Sources are merged with increasing precedence:
config files (JSON/YAML) < .env file < environment variables < overrides.
The ``api`` section is then frozen into an ``ApiConfig`` dataclass, read
once at startup and never mutated afterwards.
"""

from __future__ import annotations

import json
import logging
import os
import types
from dataclasses import dataclass, fields, is_dataclass, MISSING
from glob import glob
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar, get_args, get_origin, get_type_hints

import yaml
from dotenv import dotenv_values

from .faults import ConfigFault

logger = logging.getLogger("adminkit.config")

C = TypeVar("C")


@dataclass(frozen=True)
class ApiConfig:
    """Process-wide API settings."""

    api_base_url: str = "http://localhost:8000"
    uploads_folder: str = "uploads"
    allow_cors_origins: str = ""
    date_time_string_format: str = "%Y-%m-%d %H:%M:%S"
    base_cdn_url: Optional[str] = None

    def cors_origins(self) -> list[str]:
        """Comma separated ``allow_cors_origins`` as a list."""
        return [
            origin.strip()
            for origin in self.allow_cors_origins.split(",")
            if origin.strip()
        ]


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources with precedence:
    overrides > environment variables > .env file > config files > defaults
    """

    def __init__(self, env_prefix: str = "ADMINKIT_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}
        # Unparsed env strings by dotted path, for fields typed str
        self._env_raw: Dict[str, str] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = "ADMINKIT_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources.

        Args:
            paths: Config file paths (glob patterns supported)
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        for pattern in paths or []:
            loader._load_from_files(pattern)

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_from_files(self, pattern: str):
        """Load config from JSON or YAML files."""
        matches = sorted(glob(pattern))
        if not matches:
            logger.debug("No config file matches %s", pattern)

        for path_str in matches:
            path = Path(path_str)
            if path.suffix == ".json":
                self._load_json_file(path)
            elif path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)
            else:
                raise ConfigFault(f"Unsupported config file type: {path}")

    def _load_json_file(self, path: Path):
        try:
            with open(path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigFault(f"Invalid JSON in {path}: {e}") from e
        self._merge_file_data(path, data)

    def _load_yaml_file(self, path: Path):
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigFault(f"Invalid YAML in {path}: {e}") from e
        self._merge_file_data(path, data)

    def _merge_file_data(self, path: Path, data: Any):
        if not data:
            return
        if not isinstance(data, dict):
            raise ConfigFault(f"Config file {path} must contain a mapping")
        logger.debug("Loaded config file %s", path)
        self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load prefixed keys from a .env file."""
        if not Path(path).exists():
            return

        for key, value in dotenv_values(path).items():
            if value is not None and key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _load_from_env(self):
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert ADMINKIT_API__UPLOADS_FOLDER to {"api": {"uploads_folder": ...}}."""
        key = key[len(self.env_prefix):]
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)
        self._env_raw[".".join(parts)] = value

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        current = self.config_data

        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def get_api_config(self, config_class: Type[C] = ApiConfig, section: str = "api") -> C:
        """
        Build the typed API configuration.

        Args:
            config_class: Dataclass to instantiate (``ApiConfig`` or a subclass)
            section: Config section holding its values

        Returns:
            Validated config instance
        """
        data = self.get(section, {})
        if not isinstance(data, dict):
            raise ConfigFault(f"Config section '{section}' must be a mapping")
        return self._instantiate_dataclass(config_class, data, section)

    def _instantiate_dataclass(self, config_class: Type[C], data: dict, path: str) -> C:
        """Instantiate dataclass config with validation; nested dataclasses recurse."""
        if not is_dataclass(config_class):
            raise ConfigFault(f"{config_class.__name__} is not a dataclass")

        hints = get_type_hints(config_class)
        kwargs = {}

        for field_info in fields(config_class):
            field_name = field_info.name
            field_type = hints.get(field_name, Any)
            field_path = f"{path}.{field_name}"

            if field_name in data:
                value = data[field_name]
                raw = self._env_raw.get(field_path)
                if (
                    raw is not None
                    and not self._check_type(value, field_type)
                    and self._check_type(raw, field_type)
                    and value == self._parse_value(raw)
                ):
                    value = raw

                if is_dataclass(field_type) and isinstance(value, dict):
                    value = self._instantiate_dataclass(field_type, value, field_path)
                elif not self._check_type(value, field_type):
                    raise ConfigFault(
                        f"Config field '{field_path}' expected {getattr(field_type, '__name__', field_type)}, "
                        f"got {type(value).__name__}",
                        code="CONFIG_TYPE_MISMATCH",
                        metadata={"field": field_path},
                    )

                kwargs[field_name] = value
            elif field_info.default is not MISSING:
                kwargs[field_name] = field_info.default
            elif field_info.default_factory is not MISSING:
                kwargs[field_name] = field_info.default_factory()
            else:
                raise ConfigFault(
                    f"Required config field '{field_path}' not provided",
                    code="CONFIG_MISSING",
                    metadata={"field": field_path},
                )

        return config_class(**kwargs)

    def _check_type(self, value: Any, expected_type: Any) -> bool:
        """Basic type checking."""
        if expected_type is Any:
            return True

        origin = get_origin(expected_type)
        if origin is types.UnionType or str(origin) == "typing.Union":
            if value is None:
                return type(None) in get_args(expected_type)
            return any(
                self._check_type(value, arg)
                for arg in get_args(expected_type)
                if arg is not type(None)
            )

        if origin:
            return isinstance(value, origin)

        # bool is an int subclass; do not let True pass for an int field
        if expected_type is int and isinstance(value, bool):
            return False
        if expected_type is float and isinstance(value, int) and not isinstance(value, bool):
            return True

        try:
            return isinstance(value, expected_type)
        except TypeError:
            return True

    def to_dict(self) -> dict:
        """Export all config as dictionary."""
        return self.config_data.copy()
