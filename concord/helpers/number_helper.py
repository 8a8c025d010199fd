"""Parsing helpers for optional numeric fields arriving from the backend."""

from __future__ import annotations

import math
from typing import Any


def parse_optional_float(value: Any) -> float | None:
    """
    Parse an optional percentage into a float.

    Accepts numbers and numeric strings. Anything else (None, empty or
    non-numeric text, booleans, nan/inf) means "no data" and yields None.

    Examples:
        >>> parse_optional_float("12.5")
        12.5
        >>> parse_optional_float(" 40 ")
        40.0
        >>> parse_optional_float("n/a") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            parsed = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


def parse_optional_int(value: Any, default: int = 0) -> int:
    """Parse an integer counter, falling back to default on junk."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default
