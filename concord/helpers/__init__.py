"""
Helpers package.
"""

from .exceptions import (
    CoincidenceError,
    ComputationCancelledError,
    ConflictError,
    InvalidRequestError,
    RemoteError,
    RemoteRejectedError,
    RemoteUnavailableError,
    UnauthorizedError,
)
from .logging_helper import (
    ConcordLogFilter,
    configure_logging,
    log_context,
    sanitize_exception_message,
)
from .number_helper import parse_optional_float, parse_optional_int

__all__ = [
    "CoincidenceError",
    "ComputationCancelledError",
    "ConcordLogFilter",
    "ConflictError",
    "InvalidRequestError",
    "RemoteError",
    "RemoteRejectedError",
    "RemoteUnavailableError",
    "UnauthorizedError",
    "configure_logging",
    "log_context",
    "parse_optional_float",
    "parse_optional_int",
    "sanitize_exception_message",
]
