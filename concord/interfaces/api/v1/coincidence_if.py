"""
Coincidence endpoints used by the backend.
Routes: /api/calculate-coincidence, /api/calculate-coincidence-sync, /health

ARCHITECTURE:
- These endpoints are thin HTTP boundaries
- Validation, auth, deduplication and computation live in CoincidenceService
- CoincidenceError subclasses are turned into HTTP responses by api_app handlers
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from concord.interfaces.api.dependencies import get_coincidence_service
from concord.interfaces.api.types.coincidence_types import (
    AcceptedResponse,
    CoincidenceRequest,
    CoincidenceResultResponse,
    HealthResponse,
)
from concord.services.coincidence_svc import CoincidenceService

logger = logging.getLogger(__name__)

# Router instance (included in main app under /api prefix)
router = APIRouter(tags=["coincidence"])

# Liveness lives outside /api
health_router = APIRouter(tags=["health"])


# ----------------------------------------------------------------------
#  POST /calculate-coincidence
# ----------------------------------------------------------------------
@router.post("/calculate-coincidence", status_code=202)
async def calculate_coincidence(
    req: CoincidenceRequest,
    service: CoincidenceService = Depends(get_coincidence_service),
) -> AcceptedResponse:
    """
    Schedule a coincidence calculation and return immediately.

    The result is posted to the backend callback when ready.
    409 if the same composer_analysis_id is already being processed.
    """
    accepted = service.submit_async(req.to_dto())
    return AcceptedResponse.from_dto(accepted)


# ----------------------------------------------------------------------
#  POST /calculate-coincidence-sync
# ----------------------------------------------------------------------
@router.post("/calculate-coincidence-sync")
def calculate_coincidence_sync(
    req: CoincidenceRequest,
    service: CoincidenceService = Depends(get_coincidence_service),
) -> CoincidenceResultResponse:
    """
    Calculate the coincidence and return it in the response.

    Plain def: FastAPI runs it in the thread pool, so concurrent
    synchronous calculations do not block each other or the event loop.
    """
    result = service.submit_sync(req.to_dto())
    return CoincidenceResultResponse.from_dto(result, secret_key=req.secret_key)


# ----------------------------------------------------------------------
#  GET /health
# ----------------------------------------------------------------------
@health_router.get("/health")
async def health() -> HealthResponse:
    """Liveness only."""
    return HealthResponse()
