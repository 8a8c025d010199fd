"""Coincidence API types - Pydantic models for calculation endpoints.

External API contracts; field names match the backend's JSON.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, Field

from concord.helpers.dto.coincidence_dto import ComputationRequest

if TYPE_CHECKING:
    from concord.helpers.dto.coincidence_dto import ComputationResult, SubmissionAccepted


class CoincidenceRequest(BaseModel):
    """Request body for both calculation endpoints."""

    composer_analysis_id: int = Field(..., gt=0, strict=True, description="Composer/analysis join record id")
    composer_id: int = Field(..., gt=0, strict=True, description="Composer id")
    analysis_id: int = Field(..., gt=0, strict=True, description="Analysis id")
    secret_key: str = Field(..., strict=True, description="Shared secret")

    def to_dto(self) -> ComputationRequest:
        return ComputationRequest(
            composer_analysis_id=self.composer_analysis_id,
            composer_id=self.composer_id,
            analysis_id=self.analysis_id,
            secret_key=self.secret_key,
        )


class AcceptedResponse(BaseModel):
    """Immediate acknowledgement for the async endpoint."""

    status: Literal["accepted"] = "accepted"
    message: str = Field(..., description="Human readable acknowledgement")

    @classmethod
    def from_dto(cls, dto: SubmissionAccepted) -> AcceptedResponse:
        return cls(message=dto.message)


class CoincidenceResultResponse(BaseModel):
    """Result of a synchronous calculation."""

    composer_analysis_id: int
    potential_coincidence: float = Field(..., ge=0, le=100)
    secret_key: str
    status: Literal["completed"] = "completed"

    @classmethod
    def from_dto(cls, dto: ComputationResult, secret_key: str) -> CoincidenceResultResponse:
        return cls(
            composer_analysis_id=dto.composer_analysis_id,
            potential_coincidence=dto.potential_coincidence,
            secret_key=secret_key,
            status=dto.status,
        )


class HealthResponse(BaseModel):
    """Liveness probe response."""

    status: Literal["healthy"] = "healthy"
