"""API types - Pydantic request/response models."""

from concord.interfaces.api.types.coincidence_types import (
    AcceptedResponse,
    CoincidenceRequest,
    CoincidenceResultResponse,
    HealthResponse,
)

__all__ = [
    "AcceptedResponse",
    "CoincidenceRequest",
    "CoincidenceResultResponse",
    "HealthResponse",
]
