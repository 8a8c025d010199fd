"""Delay policies and cancellation for the simulated computation latency.

The coincidence engine emulates a slow external resource by waiting before it
returns a score. How long it waits is a policy: random 5-10 s in production,
constant (usually zero) in tests. Waits go through a CancellationToken so a
caller can cancel them or bound them with a deadline.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from typing import Protocol, runtime_checkable

from concord.helpers.exceptions import ComputationCancelledError

logger = logging.getLogger(__name__)

DEFAULT_DELAY_MIN_S = 5.0
DEFAULT_DELAY_MAX_S = 10.0


class CancellationToken:
    """Cooperative cancellation flag with an optional monotonic deadline."""

    def __init__(self, deadline: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline = deadline

    @classmethod
    def with_timeout(cls, timeout_s: float) -> CancellationToken:
        """Token that expires timeout_s seconds from now."""
        return cls(deadline=time.monotonic() + timeout_s)

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, None if there is no deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def sleep(self, seconds: float) -> None:
        """
        Wait for the given number of seconds unless cancelled first.

        Raises:
            ComputationCancelledError: If the token is cancelled during the
                wait, or the deadline falls before the wait would end
        """
        if self.cancelled:
            raise ComputationCancelledError("Computation cancelled")

        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            if self._event.wait(remaining):
                raise ComputationCancelledError("Computation cancelled")
            raise ComputationCancelledError(f"Computation deadline exceeded ({seconds:.2f}s delay, {remaining:.2f}s left)")

        if seconds > 0 and self._event.wait(seconds):
            raise ComputationCancelledError("Computation cancelled")


@runtime_checkable
class DelayPolicy(Protocol):
    """Decides how long a single computation should take."""

    def duration(self) -> float: ...


class ConstantDelay:
    """Always wait the same amount of time. ConstantDelay(0) disables waiting."""

    def __init__(self, seconds: float = 0.0) -> None:
        if seconds < 0:
            raise ValueError(f"Delay must be non-negative, got {seconds}")
        self.seconds = float(seconds)

    def duration(self) -> float:
        return self.seconds


class RandomDelay:
    """Wait a uniformly random time in [min_s, max_s)."""

    def __init__(
        self,
        min_s: float = DEFAULT_DELAY_MIN_S,
        max_s: float = DEFAULT_DELAY_MAX_S,
        rng: random.Random | None = None,
    ) -> None:
        if min_s < 0 or max_s < min_s:
            raise ValueError(f"Invalid delay range [{min_s}, {max_s})")
        self.min_s = float(min_s)
        self.max_s = float(max_s)
        self._rng = rng or random.Random()
        self._lock = threading.Lock()

    def duration(self) -> float:
        # random.Random instances are shared across worker threads
        with self._lock:
            return self.min_s + self._rng.random() * (self.max_s - self.min_s)
