"""Configuration management.

Configuration is read from YAML files and environment variables. The
``elasticsearch`` section must name the engine host and port:

    elasticsearch:
      host: localhost
      port: 9200
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .core.exceptions import ConfigurationError

APP_NAME = "spacetime-index"

ENV_HOST = "SPACETIME_ELASTICSEARCH_HOST"
ENV_PORT = "SPACETIME_ELASTICSEARCH_PORT"
ENV_CONFIG = "SPACETIME_INDEX_CONFIG"


class Config:
    """Configuration file loading."""

    @staticmethod
    def from_file(path: Path) -> dict[str, Any]:
        """Load configuration from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file {path}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error reading config file {path}: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        return data

    @staticmethod
    def get_config_paths() -> list[Path]:
        """Get the default configuration file paths to check."""
        paths = []

        xdg_config_home = Path(
            os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        )
        paths.append(xdg_config_home / APP_NAME / "config.yaml")

        paths.append(Path(f".{APP_NAME}.yaml"))
        paths.append(Path(f"{APP_NAME}.yaml"))

        if env_path := os.environ.get(ENV_CONFIG):
            paths.append(Path(env_path))

        return paths

    @staticmethod
    def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
        """Merge multiple configuration dictionaries."""
        result: dict[str, Any] = {}
        for config in configs:
            result = _deep_merge(result, config)
        return result


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from files and environment variables.

    Args:
        path: Explicit config file; read last so it wins over default paths

    Returns:
        Merged configuration dictionary
    """
    config: dict[str, Any] = {}

    for default_path in Config.get_config_paths():
        if default_path.exists():
            config = Config.merge_configs(config, Config.from_file(default_path))

    if path is not None:
        config = Config.merge_configs(config, Config.from_file(path))

    env_overrides: dict[str, Any] = {}
    if host := os.environ.get(ENV_HOST):
        env_overrides["host"] = host
    if port := os.environ.get(ENV_PORT):
        env_overrides["port"] = port

    if env_overrides:
        config = Config.merge_configs(config, {"elasticsearch": env_overrides})

    return config


@dataclass(frozen=True)
class EngineSettings:
    """Connection settings for the search engine."""

    host: str
    port: int
    scheme: str = "http"
    request_timeout: float = 30.0
    include_type_in_bulk: bool = False

    @property
    def url(self) -> str:
        """Base URL of the engine."""
        return f"{self.scheme}://{self.host}:{self.port}"

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "EngineSettings":
        """Read engine settings from the ``elasticsearch`` section.

        Raises:
            ConfigurationError: If host or port is missing or invalid
        """
        section = config.get("elasticsearch") or {}
        host = section.get("host")
        port = section.get("port")

        if not host or port in (None, ""):
            raise ConfigurationError(
                "Please specify elasticsearch.host and elasticsearch.port "
                "in the configuration file"
            )

        try:
            port = int(port)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid elasticsearch.port: {port!r}")

        try:
            request_timeout = float(section.get("request_timeout", 30.0))
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"Invalid elasticsearch.request_timeout: "
                f"{section.get('request_timeout')!r}"
            )

        return cls(
            host=str(host),
            port=port,
            scheme=str(section.get("scheme", "http")),
            request_timeout=request_timeout,
            include_type_in_bulk=bool(section.get("include_type_in_bulk", False)),
        )


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
