"""Similarity engine: composer vs. analysis interval-frequency comparison.

For each of the five interval slots where both sides have a frequency, the
similarity is one minus the absolute difference expressed as a fraction of
the maximum possible deviation (100 percentage points). Slot similarities are
combined with fixed weights into a 0-100 score.

When no slot is comparable the engine returns a random value in [30, 70).
That range never reaches the top of the scale and marks a low-confidence
guess, not an error.
"""

from __future__ import annotations

import logging
import math
import random
import threading

from concord.components.coincidence.delay_comp import CancellationToken, ConstantDelay, DelayPolicy
from concord.helpers.dto.interval_dto import AnalysisRecord, ComposerProfile

logger = logging.getLogger(__name__)

# Same order as INTERVAL_GROUPS: unisons/seconds, thirds, fourths/fifths, sixths/sevenths, octaves
INTERVAL_WEIGHTS: tuple[float, ...] = (0.25, 0.20, 0.20, 0.20, 0.15)

MAX_POSSIBLE_DEVIATION = 100.0
SCORE_MIN = 0.0
SCORE_MAX = 100.0

FALLBACK_MIN = 30.0
FALLBACK_SPAN = 40.0


def round_score(value: float) -> float:
    """Round half away from zero to two decimals (scores are never negative)."""
    return math.floor(value * 100 + 0.5) / 100


def fallback_score(rng: random.Random) -> float:
    """Random score in [30, 70), truncated to two decimals."""
    value = FALLBACK_MIN + rng.random() * FALLBACK_SPAN
    truncated = math.floor(value * 100) / 100
    # 30 + r*40 can round up to exactly 70.0 in binary floating point
    return min(truncated, FALLBACK_MIN + FALLBACK_SPAN - 0.01)


def calculate_similarity(
    composer: ComposerProfile,
    analysis: AnalysisRecord,
    rng: random.Random | None = None,
) -> float:
    """
    Compute the potential coincidence between a composer and an analysis.

    Args:
        composer: Composer with historical interval statistics
        analysis: Join record with the analysis interval frequencies
        rng: Randomness source for the no-data fallback

    Returns:
        Score in [0, 100] with at most two decimals
    """
    total_similarity = 0.0
    total_weight = 0.0

    composer_freqs = composer.interval_profile.frequencies()
    analysis_freqs = analysis.interval_profile.frequencies()

    for composer_freq, analysis_freq, weight in zip(composer_freqs, analysis_freqs, INTERVAL_WEIGHTS):
        if composer_freq is None or analysis_freq is None:
            continue
        deviation = abs(analysis_freq - composer_freq)
        similarity = 1.0 - deviation / MAX_POSSIBLE_DEVIATION
        total_similarity += similarity * weight
        total_weight += weight

    if total_weight > 0:
        result = (total_similarity / total_weight) * 100
        return round_score(max(SCORE_MIN, min(SCORE_MAX, result)))

    score = fallback_score(rng or random.Random())
    logger.info(
        f"No comparable interval data for composer {composer.id} / analysis {analysis.analysis_id}, "
        f"using fallback score {score:.2f}"
    )
    return score


class CoincidenceEngine:
    """Scores composer/analysis pairs after a policy-driven simulated delay.

    The delay emulates a slow external resource; it has no effect on the score.
    """

    def __init__(self, delay_policy: DelayPolicy | None = None, rng: random.Random | None = None) -> None:
        self._delay_policy: DelayPolicy = delay_policy or ConstantDelay(0)
        self._rng = rng or random.Random()
        self._rng_lock = threading.Lock()

    def score(
        self,
        composer: ComposerProfile,
        analysis: AnalysisRecord,
        cancel_token: CancellationToken | None = None,
    ) -> float:
        """
        Wait for the configured delay, then compute the score.

        Raises:
            ComputationCancelledError: If cancel_token fires during the delay
        """
        delay = self._delay_policy.duration()
        logger.debug(f"Simulating computation for analysis {analysis.id}: {delay:.2f}s")
        (cancel_token or CancellationToken()).sleep(delay)

        with self._rng_lock:
            return calculate_similarity(composer, analysis, self._rng)
