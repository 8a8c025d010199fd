"""
API layer package for Concord.
Exports the FastAPI app.
"""

from concord.interfaces.api.api_app import api_app

__all__ = ["api_app"]
