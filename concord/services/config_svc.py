#!/usr/bin/env python3
# ======================================================================
#  Config Service - Configuration loading and caching
#  - Loads config from defaults, YAML files and env vars
#  - Caches composed config for performance
#  - Provides reload() for runtime changes
# ======================================================================

from __future__ import annotations

import logging
import os
from typing import Any

import yaml

from concord.__version__ import __version__

# Environment variables mapped onto config keys. Applied in order, so the
# CONCORD_* names win over the legacy deployment names listed first.
ENV_OVERRIDES: tuple[tuple[str, str], ...] = (
    ("DJANGO_API_URL", "backend_url"),
    ("PORT", "port"),
    ("CONCORD_BACKEND_URL", "backend_url"),
    ("CONCORD_HOST", "host"),
    ("CONCORD_PORT", "port"),
    ("CONCORD_SECRET_KEY", "secret_key"),
    ("CONCORD_REQUEST_TIMEOUT_S", "request_timeout_s"),
    ("CONCORD_DELAY_MIN_S", "delay_min_s"),
    ("CONCORD_DELAY_MAX_S", "delay_max_s"),
    ("CONCORD_SYNC_TIMEOUT_S", "sync_timeout_s"),
    ("CONCORD_SHUTDOWN_TIMEOUT_S", "shutdown_timeout_s"),
    ("CONCORD_LOG_LEVEL", "log_level"),
)

# Keys kept verbatim (a numeric-looking secret must stay a string)
_STRING_KEYS = frozenset({"backend_url", "host", "secret_key", "log_level"})


class ConfigService:
    """
    Service for loading and caching application configuration.

    Loads config from multiple sources (defaults → YAML → overrides → env),
    caches the result, and provides reload capability.
    """

    def __init__(self, overrides: dict[str, Any] | None = None) -> None:
        """Initialize ConfigService with empty cache.

        Args:
            overrides: Values applied after YAML and before environment variables
        """
        self._overrides = overrides or {}
        self._config: dict[str, Any] | None = None
        self._logger = logging.getLogger(__name__)

    def get_config(self, force_reload: bool = False) -> dict[str, Any]:
        """
        Get the composed configuration.

        Args:
            force_reload: If True, bypass cache and reload from sources

        Returns:
            Complete configuration dict
        """
        if self._config is None or force_reload:
            self._config = self._compose(self._overrides)
        return self._config

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a config value by dotted path.

        Example:
            >>> service.get("backend_paths.callback")
            '/api/analysis-callback/'
        """
        node: Any = self.get_config()
        for part in key_path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def reload(self) -> dict[str, Any]:
        """Force reload configuration from all sources."""
        self._logger.info("Reloading configuration from all sources")
        return self.get_config(force_reload=True)

    # ----------------------------------------------------------------------
    # Typed accessors
    # ----------------------------------------------------------------------

    def get_backend_url(self) -> str:
        return str(self.get("backend_url")).rstrip("/")

    def get_port(self) -> int:
        return int(self.get("port"))

    def get_host(self) -> str:
        return str(self.get("host"))

    def get_secret_key(self) -> str:
        return str(self.get("secret_key"))

    def get_request_timeout(self) -> float:
        return float(self.get("request_timeout_s"))

    def get_delay_range(self) -> tuple[float, float]:
        """Return (min, max) seconds for the simulated computation delay."""
        low = float(self.get("delay_min_s"))
        high = float(self.get("delay_max_s"))
        if low < 0 or high < low:
            raise ValueError(f"Invalid delay range: delay_min_s={low}, delay_max_s={high}")
        return low, high

    def get_sync_timeout(self) -> float | None:
        value = self.get("sync_timeout_s")
        if value is None:
            return None
        timeout = float(value)
        return timeout if timeout > 0 else None

    def get_shutdown_timeout(self) -> float:
        return float(self.get("shutdown_timeout_s"))

    def get_log_level(self) -> str:
        return str(self.get("log_level")).upper()

    # ----------------------------------------------------------------------
    # Private composition logic
    # ----------------------------------------------------------------------

    def _compose(self, overrides: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Load final configuration from:
          1) Built-in defaults
          2) /etc/concord/config.yaml  (if present)
          3) ./config/config.yaml
          4) $CONFIG_PATH (if set)
          5) overrides dict passed in
          6) Environment variables (see ENV_OVERRIDES)

        Returns merged config as dict.
        """
        cfg = self._default_config()

        self._deep_merge(cfg, self._load_yaml("/etc/concord/config.yaml"))
        self._deep_merge(cfg, self._load_yaml(os.path.join(os.getcwd(), "config", "config.yaml")))

        env_path = os.getenv("CONFIG_PATH")
        if env_path:
            self._deep_merge(cfg, self._load_yaml(env_path))

        if overrides:
            self._deep_merge(cfg, overrides)

        self._apply_env_overrides(cfg)

        self._logger.debug("compose() loaded config; keys: %s", list(cfg.keys()))
        return cfg

    def _default_config(self) -> dict[str, Any]:
        """
        Base defaults; all fields present so no KeyErrors downstream.
        """
        return {
            # Backend (system of record)
            "backend_url": "http://django:8000",
            "backend_paths": {
                "join_record": "/api/composer-analyses/{composer_analysis_id}/",
                "composer": "/api/composers/{composer_id}/",
                "callback": "/api/analysis-callback/",
            },
            "request_timeout_s": 30,
            # API settings
            "host": "0.0.0.0",
            "port": 8888,
            "secret_key": "music_analysis_secret_2024",
            # Simulated computation latency
            "delay_min_s": 5.0,
            "delay_max_s": 10.0,
            "sync_timeout_s": None,  # No deadline unless configured
            # Lifecycle
            "shutdown_timeout_s": 15.0,
            "log_level": "INFO",
            "version": __version__,
        }

    def _deep_merge(self, a: dict[str, Any], b: dict[str, Any]) -> dict[str, Any]:
        """
        Recursively merge dict b into dict a (mutates a, returns it).
        """
        for k, v in b.items():
            if isinstance(v, dict) and isinstance(a.get(k), dict):
                self._deep_merge(a[k], v)
            else:
                a[k] = v
        return a

    def _load_yaml(self, path: str) -> dict[str, Any]:
        """
        Load a YAML file; returns {} if not found or invalid.
        """
        if not path or not os.path.exists(path):
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            self._logger.warning(f"Ignoring unreadable config file {path}: {e}")
            return {}
        if not isinstance(data, dict):
            self._logger.warning(f"Ignoring config file {path}: top level is not a mapping")
            return {}
        return data

    def _apply_env_overrides(self, cfg: dict[str, Any]) -> None:
        """
        Support environment overrides such as:
          DJANGO_API_URL=http://backend:8000
          PORT=9000
          CONCORD_SYNC_TIMEOUT_S=20
        """
        for env_key, cfg_key in ENV_OVERRIDES:
            raw = os.environ.get(env_key)
            if raw is None or raw == "":
                continue
            cfg[cfg_key] = raw if cfg_key in _STRING_KEYS else self._parse_env_value(raw)

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        lowered = value.lower()
        if lowered in ("true", "false"):
            return lowered == "true"
        if lowered in ("none", "null"):
            return None
        if value.isdigit():
            return int(value)
        try:
            return float(value)
        except ValueError:
            return value
