"""
Logging helpers: log record tagging, per-task context and safe error messages.

Log lines carry an identity tag and a role tag derived from the emitting
module's name suffix (``coincidence_svc`` -> ``[Coincidence] [Service]``),
plus optional key=value context bound to the current thread/task.
"""

from __future__ import annotations

import contextvars
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(concord_identity_tag)s %(concord_role_tag)s %(context_str)s%(message)s"

_ROLE_SUFFIXES: dict[str, str] = {
    "_svc": "Service",
    "_comp": "Component",
    "_if": "Interface",
    "_dto": "DTO",
    "_helper": "Helper",
}

_log_context: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar("concord_log_context", default=None)


@contextmanager
def log_context(**values: Any) -> Iterator[None]:
    """Bind context values for the duration of a with-block."""
    current = dict(_log_context.get() or {})
    current.update(values)
    token = _log_context.set(current)
    try:
        yield
    finally:
        _log_context.reset(token)


def _derive_tags(name: str) -> tuple[str, str]:
    module = name.rsplit(".", 1)[-1]
    for suffix, role in _ROLE_SUFFIXES.items():
        if module.endswith(suffix):
            stem = module[: -len(suffix)]
            if not stem:
                break
            identity = " ".join(part.capitalize() for part in stem.split("_") if part)
            return f"[{identity}]", f"[{role}]"
    return name, ""


class ConcordLogFilter(logging.Filter):
    """Adds concord_identity_tag, concord_role_tag and context_str to records.

    Never suppresses a record and never raises.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            identity, role = _derive_tags(str(record.name or ""))
            context = _log_context.get() or {}
            context_str = "[" + " ".join(f"{k}={v}" for k, v in context.items()) + "] " if context else ""
        except Exception:
            identity, role, context_str = str(getattr(record, "name", "")), "", ""
        record.concord_identity_tag = identity
        record.concord_role_tag = role
        record.context_str = context_str
        return True


def configure_logging(level: str | int = "INFO") -> None:
    """Configure the root logger once for the whole process."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(ConcordLogFilter())

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    # force=True clears handlers installed by earlier imports
    logging.basicConfig(level=level, handlers=[handler], force=True)


def sanitize_exception_message(e: Exception, safe_message: str = "An error occurred") -> str:
    """
    Sanitize exception message for user display.

    Prevents information leakage through detailed error messages while
    preserving the ability to log full details.

    Args:
        e: The exception to sanitize
        safe_message: Generic message to return to users

    Returns:
        Safe error message for user display
    """
    logger.exception(f"[security] Exception sanitized: {e}")
    return safe_message
