"""
Domain-specific DTOs (Data Transfer Objects) used across multiple layers.

Domain-specific DTOs live in helpers/dto/<domain>_dto.py and form cross-layer contracts
within that domain (interfaces → services → components).

Rules for DTO modules:
- Import only stdlib and typing (no concord.* imports)
- Contain ONLY dataclass/type definitions and simple type aliases
- No I/O, no business logic
"""

from __future__ import annotations

from concord.helpers.dto.coincidence_dto import (
    ComputationRequest,
    ComputationResult,
    ComputationStatus,
    SubmissionAccepted,
)
from concord.helpers.dto.interval_dto import (
    INTERVAL_GROUPS,
    AnalysisRecord,
    ComposerProfile,
    IntervalProfile,
    IntervalStat,
)

__all__ = [
    "INTERVAL_GROUPS",
    "AnalysisRecord",
    "ComposerProfile",
    "ComputationRequest",
    "ComputationResult",
    "ComputationStatus",
    "IntervalProfile",
    "IntervalStat",
    "SubmissionAccepted",
]
