"""Interval domain DTOs.

Data transfer objects describing interval-usage statistics for composers and
analyses. These form cross-layer contracts between the backend client, the
similarity engine and the coincidence service.

Rules:
- Import only stdlib and typing (no concord.* imports)
- Pure data structures only (no I/O, no parsing, no scoring)
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Fixed slot order. Slot i of a composer profile pairs with slot i of an analysis.
INTERVAL_GROUPS: tuple[str, ...] = (
    "unisons_seconds",
    "thirds",
    "fourths_fifths",
    "sixths_sevenths",
    "octaves",
)


@dataclass(frozen=True)
class IntervalStat:
    """Statistic for a single interval group.

    Attributes:
        interval_group: Label of the group (as reported by the backend)
        frequency: Mean frequency in percent, None when unknown
        std_dev: Standard deviation in percentage points, None when unknown
    """

    interval_group: str
    frequency: float | None = None
    std_dev: float | None = None


@dataclass(frozen=True)
class IntervalProfile:
    """Exactly five interval statistics in INTERVAL_GROUPS order."""

    stats: tuple[IntervalStat, ...]

    def __post_init__(self) -> None:
        if len(self.stats) != len(INTERVAL_GROUPS):
            raise ValueError(f"IntervalProfile requires {len(INTERVAL_GROUPS)} stats, got {len(self.stats)}")

    @classmethod
    def empty(cls) -> IntervalProfile:
        """Profile with no data in any slot."""
        return cls(stats=tuple(IntervalStat(interval_group=group) for group in INTERVAL_GROUPS))

    def frequencies(self) -> tuple[float | None, ...]:
        return tuple(stat.frequency for stat in self.stats)


@dataclass(frozen=True)
class ComposerProfile:
    """Composer identity, display metadata and historical interval statistics."""

    id: int
    name: str
    interval_profile: IntervalProfile
    biography: str | None = None
    image: str | None = None
    analyzed_works: int = 0
    total_intervals: int = 0
    period: str = ""
    polyphony_type: str = ""


@dataclass(frozen=True)
class AnalysisRecord:
    """Join record between one composer and one analysis.

    The interval profile carries the analysis-side frequencies, already parsed
    from their textual form. Std deviations are never present on this side.
    """

    id: int
    composer_id: int
    analysis_id: int
    interval_profile: IntervalProfile = field(default_factory=IntervalProfile.empty)
    potential_coincidence: str = ""
