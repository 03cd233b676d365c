"""
Configuration loader for the event ingester.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..core.errors import ConfigError


logger = logging.getLogger(__name__)


# Environment variable -> dotted config key
ENV_OVERRIDES = {
    "MONGO_URI": "store.mongo.uri",
    "MONGO_DATABASE": "store.mongo.database",
    "MONGO_COLLECTION": "store.mongo.collection",
    "INGEST_STORE_BACKEND": "store.backend",
    "INGEST_SQLITE_PATH": "store.sqlite.db_path",
    "INGEST_STATE_PATH": "state.db_path",
    "INGEST_BEFORE_TIMESTAMP": "runner.before_timestamp",
    "INGEST_MAX_PAGE_INDEX": "runner.max_page_index",
    "OPENSEA_API_KEY": "source.api_key",
    "OPENSEA_BASE_URL": "source.base_url",
}

INT_KEYS = {"runner.before_timestamp", "runner.max_page_index"}


class IngestConfig:
    """
    Configuration for the event ingester.

    Loads a YAML file over built-in defaults, then applies environment
    variable overrides.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to YAML config file (optional)
        """
        self.config_path = Path(config_path) if config_path else None
        self.config = self._default_config()
        if self.config_path:
            _deep_merge(self.config, self._load_config())
        self._apply_env_overrides()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        logger.info(f"Loading config from: {self.config_path}")

        with open(self.config_path, "r", encoding="utf-8") as f:
            try:
                config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigError(f"Config root must be a mapping: {self.config_path}")
        return config

    def _default_config(self) -> Dict[str, Any]:
        """Return default configuration."""
        return {
            "source": {
                "base_url": "https://api.opensea.io/api/v1/events",
                "api_key": None,
                "page_size": 50,
                "timeout": 30,
                "rate_limit_delay": 0.0,
                "user_agent": None,
            },
            "store": {
                "backend": "mongo",
                "timestamp_field": "created_date",
                "mongo": {
                    "uri": "mongodb://localhost:27017",
                    "database": None,
                    "collection": None,
                },
                "sqlite": {
                    "db_path": "local/store/events.db",
                },
            },
            "state": {
                "enabled": True,
                "name": "opensea_events",
                "db_path": "local/state/run_state.db",
            },
            "runner": {
                "before_timestamp": None,
                "max_page_index": 200,
            },
        }

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides to loaded config."""
        for env_name, key in ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is None or value == "":
                continue
            if key in INT_KEYS:
                try:
                    value = int(value)
                except ValueError as e:
                    raise ConfigError(f"{env_name} must be an integer, got {value!r}") from e
            logger.debug(f"Config override from {env_name}: {key}")
            self.set(key, value)

    def get_source_config(self) -> Dict[str, Any]:
        """Get upstream source configuration."""
        return self.config.get("source", {})

    def get_store_config(self) -> Dict[str, Any]:
        """Get document store configuration."""
        return self.config.get("store", {})

    def get_state_config(self) -> Dict[str, Any]:
        """Get run state configuration."""
        return self.config.get("state", {})

    def get_runner_config(self) -> Dict[str, Any]:
        """Get runner configuration."""
        return self.config.get("runner", {})

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dotted key."""
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by dotted key."""
        keys = key.split(".")
        node = self.config
        for k in keys[:-1]:
            node = node.setdefault(k, {})
        node[keys[-1]] = value


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Merge `override` into `base` in place, recursing into mappings."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = copy.deepcopy(value)
