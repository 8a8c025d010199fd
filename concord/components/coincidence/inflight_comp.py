"""In-flight registry: at most one computation per join record id."""

from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)


class InFlightRegistry:
    """Thread-safe set of join record ids currently being processed.

    The lock covers only membership changes, never the processing itself.
    """

    def __init__(self) -> None:
        self._ids: set[int] = set()
        self._lock = threading.Lock()

    def try_acquire(self, composer_analysis_id: int) -> bool:
        """Register the id. Returns False if it is already in flight."""
        with self._lock:
            if composer_analysis_id in self._ids:
                return False
            self._ids.add(composer_analysis_id)
            return True

    def release(self, composer_analysis_id: int) -> None:
        """Remove the id. Releasing an id that is not held is a no-op."""
        with self._lock:
            self._ids.discard(composer_analysis_id)

    def snapshot(self) -> frozenset[int]:
        with self._lock:
            return frozenset(self._ids)

    def __contains__(self, composer_analysis_id: object) -> bool:
        with self._lock:
            return composer_analysis_id in self._ids
