"""
Coincidence package.
"""

from .delay_comp import CancellationToken, ConstantDelay, DelayPolicy, RandomDelay
from .inflight_comp import InFlightRegistry
from .similarity_comp import (
    INTERVAL_WEIGHTS,
    CoincidenceEngine,
    calculate_similarity,
    fallback_score,
    round_score,
)

__all__ = [
    "INTERVAL_WEIGHTS",
    "CancellationToken",
    "CoincidenceEngine",
    "ConstantDelay",
    "DelayPolicy",
    "InFlightRegistry",
    "RandomDelay",
    "calculate_similarity",
    "fallback_score",
    "round_score",
]
