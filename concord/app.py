"""
Application composition root and dependency injection container.

The Application owns the configuration, the backend client, the coincidence
engine and the coincidence service, and manages their lifecycle.

Architecture:
- All configuration values are instance attributes (no module-level config globals)
- Services are registered via register_service() during start()
- Access services via: application.get_service("name") or application.services["name"]
- Do NOT construct services directly outside of this class (tests excepted)

The singleton instance is available as `application` at module level.
"""

from __future__ import annotations

import logging
from typing import Any

from concord.components.backend.backend_client_comp import BackendPaths, HttpBackendClient
from concord.components.coincidence.delay_comp import RandomDelay
from concord.components.coincidence.similarity_comp import CoincidenceEngine
from concord.services.background_tasks_svc import BackgroundTaskService
from concord.services.coincidence_svc import CoincidenceConfig, CoincidenceService
from concord.services.config_svc import ConfigService

logger = logging.getLogger(__name__)


class Application:
    """
    Application composition root and dependency injection container.

    Configuration Access:
    - Raw config is PRIVATE (_config) and used only internally in Application
    - To access config elsewhere, use: application.get_service("config")
    """

    def __init__(self, config_service: ConfigService | None = None) -> None:
        """
        Initialize application with its configuration.

        Services are created later during start().
        """
        self._config_service = config_service or ConfigService()
        self._config = self._config_service.get_config()

        self.api_host: str = self._config_service.get_host()
        self.api_port: int = self._config_service.get_port()
        self.backend_url: str = self._config_service.get_backend_url()
        self.log_level: str = self._config_service.get_log_level()
        self.shutdown_timeout_s: float = self._config_service.get_shutdown_timeout()

        # Services container (DI registry)
        self.services: dict[str, Any] = {}

        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def register_service(self, name: str, service: Any) -> None:
        """Register a service in the DI container."""
        self.services[name] = service

    def get_service(self, name: str) -> Any:
        """
        Get a service from the DI container.

        Raises:
            KeyError: If service not found
        """
        if name not in self.services:
            raise KeyError(f"Service '{name}' not found. Available services: {list(self.services.keys())}")
        return self.services[name]

    def start(self) -> None:
        """Build the backend client, engine and coincidence service and register them."""
        if self._running:
            logger.warning("[Application] Already running, ignoring start() call")
            return

        logger.info("[Application] Starting...")
        cfg = self._config_service

        paths_cfg = cfg.get("backend_paths", {}) or {}
        backend = HttpBackendClient(
            base_url=self.backend_url,
            secret_key=cfg.get_secret_key(),
            timeout=cfg.get_request_timeout(),
            paths=BackendPaths(**paths_cfg),
        )

        delay_min, delay_max = cfg.get_delay_range()
        engine = CoincidenceEngine(delay_policy=RandomDelay(delay_min, delay_max))

        coincidence_service = CoincidenceService(
            backend=backend,
            engine=engine,
            cfg=CoincidenceConfig(secret_key=cfg.get_secret_key(), sync_timeout_s=cfg.get_sync_timeout()),
            tasks=BackgroundTaskService(),
        )

        self.register_service("config", cfg)
        self.register_service("coincidence", coincidence_service)

        logger.info("[Application] Configuration:")
        logger.info(f"[Application]   Backend URL: {self.backend_url}")
        logger.info(f"[Application]   Listening on: {self.api_host}:{self.api_port}")
        logger.info(f"[Application]   Simulated delay: {delay_min:.1f}-{delay_max:.1f}s")

        self._running = True
        logger.info("[Application] Started")

    def stop(self) -> None:
        """Stop the application, waiting briefly for accepted computations."""
        if not self._running:
            return

        logger.info("[Application] Stopping...")
        service = self.services.get("coincidence")
        if isinstance(service, CoincidenceService):
            service.shutdown(timeout=self.shutdown_timeout_s)

        self.services.clear()
        self._running = False
        logger.info("[Application] Stopped")


application = Application()
