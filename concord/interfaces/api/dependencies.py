"""
FastAPI dependency injection helpers.

Endpoints only inject services; services own all logic and remote access.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import HTTPException

if TYPE_CHECKING:
    from concord.services.coincidence_svc import CoincidenceService


def get_coincidence_service() -> CoincidenceService:
    """Get CoincidenceService instance."""
    from concord.app import application

    service = application.services.get("coincidence")
    if service is None:
        raise HTTPException(status_code=503, detail="Coincidence service not available")
    return service  # type: ignore[no-any-return]
