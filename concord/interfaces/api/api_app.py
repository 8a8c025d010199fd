"""
FastAPI application setup and configuration.
Main entry point for the Concord API service.

Routes:
- POST /api/calculate-coincidence       (async, callback delivery)
- POST /api/calculate-coincidence-sync  (sync, result in response)
- GET  /health
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from concord.__version__ import __version__
from concord.helpers.exceptions import (
    CoincidenceError,
    ComputationCancelledError,
    ConflictError,
    InvalidRequestError,
    RemoteError,
    UnauthorizedError,
)
from concord.helpers.logging_helper import sanitize_exception_message
from concord.interfaces.api.v1 import coincidence_if

logger = logging.getLogger(__name__)

# Most specific first
_ERROR_STATUS: tuple[tuple[type[CoincidenceError], int], ...] = (
    (InvalidRequestError, 400),
    (UnauthorizedError, 401),
    (ConflictError, 409),
    (RemoteError, 502),
    (ComputationCancelledError, 504),
)


# ----------------------------------------------------------------------
#  App lifecycle
# ----------------------------------------------------------------------
@asynccontextmanager
async def lifespan(_app_instance: FastAPI):
    """
    FastAPI lifespan context manager.

    start.py normally starts the Application before uvicorn runs; starting
    here as well covers `uvicorn concord.interfaces.api.api_app:api_app`.
    """
    from concord.app import application

    if not application.running:
        application.start()
    logger.info("[API] FastAPI starting")

    try:
        yield
    finally:
        logger.info("[API] FastAPI shutting down...")
        application.stop()
        logger.info("[API] Shutdown complete")


# ----------------------------------------------------------------------
#  FastAPI app
# ----------------------------------------------------------------------
api_app = FastAPI(title="Concord", version=__version__, lifespan=lifespan)


@api_app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [{"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")} for err in exc.errors()]
    return JSONResponse(status_code=400, content={"error": "Invalid request body", "details": details})


@api_app.exception_handler(CoincidenceError)
async def coincidence_exception_handler(request: Request, exc: CoincidenceError):
    status_code = next((code for exc_type, code in _ERROR_STATUS if isinstance(exc, exc_type)), 500)
    if status_code >= 500:
        logger.error(f"[API] {request.url.path} failed: {exc}")
    else:
        logger.info(f"[API] {request.url.path} rejected ({status_code}): {exc}")
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


# Global exception handler
@api_app.exception_handler(Exception)
async def exception_handler(request: Request, exc: Exception):
    message = sanitize_exception_message(exc, "Internal server error")
    return JSONResponse(status_code=500, content={"error": message})


api_router = APIRouter(prefix="/api")
api_router.include_router(coincidence_if.router)

api_app.include_router(api_router)
api_app.include_router(coincidence_if.health_router)
