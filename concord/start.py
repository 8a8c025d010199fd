#!/usr/bin/env python3
"""
Concord Application Starter
Initializes the Application (config, backend client, services) then starts the API server.
"""

import logging
import signal
import sys

import uvicorn

from concord.app import application
from concord.helpers.logging_helper import configure_logging

# Configure logging once for the whole process
configure_logging(application.log_level)


def shutdown_handler(signum, frame):
    """Handle shutdown signals gracefully."""
    logging.info(f"Received signal {signum}, shutting down...")
    application.stop()
    sys.exit(0)


def main() -> None:
    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)

    logging.info("[Application] ============ Starting Concord ============")
    application.start()

    logging.info("[API] Server starting on %s:%d", application.api_host, application.api_port)
    logging.info("[API] Endpoints:")
    logging.info("[API]   POST /api/calculate-coincidence")
    logging.info("[API]   POST /api/calculate-coincidence-sync")
    logging.info("[API]   GET  /health")

    try:
        uvicorn.run(
            "concord.interfaces.api.api_app:api_app",
            host=application.api_host,
            port=application.api_port,
            timeout_keep_alive=90,
            log_level=application.log_level.lower(),
        )
    finally:
        logging.info("API server stopped, cleaning up...")
        application.stop()


if __name__ == "__main__":
    main()
