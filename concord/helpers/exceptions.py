"""Custom exceptions used across multiple layers.

Rules:
- Only put exceptions here if they need to be raised in one layer and caught in another.
- Keep exceptions simple and focused.
- No I/O, no config loading, no complex logic.
"""

from __future__ import annotations


class CoincidenceError(Exception):
    """Base class for per-request failures. Never fatal to the process."""


class InvalidRequestError(CoincidenceError):
    """Raised when a computation request is malformed."""


class UnauthorizedError(CoincidenceError):
    """Raised when the shared secret does not match."""


class ConflictError(CoincidenceError):
    """Raised when a join record is already being processed."""

    def __init__(self, composer_analysis_id: int) -> None:
        super().__init__(f"Analysis {composer_analysis_id} already being processed")
        self.composer_analysis_id = composer_analysis_id


class RemoteError(CoincidenceError):
    """Raised when a call to the backend fails."""


class RemoteUnavailableError(RemoteError):
    """Backend could not be reached (connection error, timeout)."""


class RemoteRejectedError(RemoteError):
    """Backend answered, but with an error status or an unusable payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ComputationCancelledError(CoincidenceError):
    """Raised when a computation is cancelled or runs past its deadline."""
