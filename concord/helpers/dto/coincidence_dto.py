"""Coincidence computation DTOs.

Request/result contracts shared by the HTTP interface, the coincidence service
and the backend client.

Rules:
- Import only stdlib and typing (no concord.* imports)
- Pure data structures only
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ComputationStatus = Literal["completed"]


@dataclass(frozen=True)
class ComputationRequest:
    """Request to compute the coincidence for one composer/analysis join record."""

    composer_analysis_id: int
    composer_id: int
    analysis_id: int
    secret_key: str


@dataclass(frozen=True)
class ComputationResult:
    """Final score for one join record."""

    composer_analysis_id: int
    potential_coincidence: float
    status: ComputationStatus = "completed"


@dataclass(frozen=True)
class SubmissionAccepted:
    """Acknowledgement returned when an async computation has been scheduled."""

    composer_analysis_id: int
    task_id: str
    message: str = "Coincidence calculation started"
