"""
Pytest fixtures and configuration for the test suite.

Strategy:
- Real components everywhere (engine, registry, task service)
- Only the backend is faked: FakeBackendClient records calls and can be
  gated to hold a computation in flight
- ConstantDelay(0) and seeded random.Random keep scoring fast and deterministic
"""

import random
import sys
import threading
from pathlib import Path

import pytest

# Add project root to path so tests can import the concord package
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from concord.components.coincidence.delay_comp import ConstantDelay  # noqa: E402
from concord.components.coincidence.similarity_comp import CoincidenceEngine  # noqa: E402
from concord.helpers.dto.coincidence_dto import ComputationRequest, ComputationResult  # noqa: E402
from concord.helpers.dto.interval_dto import (  # noqa: E402
    INTERVAL_GROUPS,
    AnalysisRecord,
    ComposerProfile,
    IntervalProfile,
    IntervalStat,
)
from concord.services.background_tasks_svc import BackgroundTaskService  # noqa: E402
from concord.services.coincidence_svc import CoincidenceConfig, CoincidenceService  # noqa: E402

TEST_SECRET = "test-secret"


# === DATA BUILDERS ===


def make_profile(frequencies, std_devs=None) -> IntervalProfile:
    """IntervalProfile from five optional frequencies."""
    std_devs = std_devs or [None] * len(INTERVAL_GROUPS)
    return IntervalProfile(
        stats=tuple(
            IntervalStat(interval_group=group, frequency=freq, std_dev=std)
            for group, freq, std in zip(INTERVAL_GROUPS, frequencies, std_devs)
        )
    )


def make_composer(frequencies, composer_id: int = 7) -> ComposerProfile:
    return ComposerProfile(id=composer_id, name="J. S. Bach", interval_profile=make_profile(frequencies))


def make_analysis(frequencies, join_id: int = 42, composer_id: int = 7, analysis_id: int = 3) -> AnalysisRecord:
    return AnalysisRecord(
        id=join_id,
        composer_id=composer_id,
        analysis_id=analysis_id,
        interval_profile=make_profile(frequencies),
    )


def make_request(join_id: int = 42, secret: str = TEST_SECRET, composer_id: int = 7, analysis_id: int = 3):
    return ComputationRequest(
        composer_analysis_id=join_id,
        composer_id=composer_id,
        analysis_id=analysis_id,
        secret_key=secret,
    )


# === FAKE BACKEND ===


class FakeBackendClient:
    """In-memory BackendClient.

    Attributes set by tests:
        composer_freqs / analysis_freqs: profile data returned by fetches
        fetch_error / composer_error / deliver_error: exceptions to raise
        gate: when set to an Event, fetch_join_record blocks until it is set
    """

    def __init__(self) -> None:
        self.composer_freqs = [50.0] * 5
        self.analysis_freqs = [50.0] * 5
        self.fetch_error: Exception | None = None
        self.composer_error: Exception | None = None
        self.deliver_error: Exception | None = None
        self.gate: threading.Event | None = None
        self.fetch_started = threading.Event()
        self.join_fetches: list[tuple[int, int, int]] = []
        self.composer_fetches: list[int] = []
        self.delivered: list[ComputationResult] = []
        self._lock = threading.Lock()

    def fetch_join_record(self, composer_analysis_id, analysis_id, composer_id):
        with self._lock:
            self.join_fetches.append((composer_analysis_id, analysis_id, composer_id))
        self.fetch_started.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.fetch_error is not None:
            raise self.fetch_error
        return make_analysis(
            self.analysis_freqs, join_id=composer_analysis_id, composer_id=composer_id, analysis_id=analysis_id
        )

    def fetch_composer_profile(self, composer_id):
        with self._lock:
            self.composer_fetches.append(composer_id)
        if self.composer_error is not None:
            raise self.composer_error
        return make_composer(self.composer_freqs, composer_id=composer_id)

    def deliver_result(self, result):
        if self.deliver_error is not None:
            raise self.deliver_error
        with self._lock:
            self.delivered.append(result)

    @property
    def fetch_count(self) -> int:
        with self._lock:
            return len(self.join_fetches) + len(self.composer_fetches)


# === FIXTURES ===


@pytest.fixture
def fake_backend() -> FakeBackendClient:
    """Provide a fresh fake backend."""
    return FakeBackendClient()


@pytest.fixture
def seeded_rng() -> random.Random:
    """Deterministic randomness for fallback scores."""
    return random.Random(1234)


@pytest.fixture
def engine(seeded_rng) -> CoincidenceEngine:
    """Engine with no simulated delay."""
    return CoincidenceEngine(delay_policy=ConstantDelay(0), rng=seeded_rng)


@pytest.fixture
def coincidence_service(fake_backend, engine) -> CoincidenceService:
    """Real CoincidenceService wired to the fake backend (one per test)."""
    return CoincidenceService(
        backend=fake_backend,
        engine=engine,
        cfg=CoincidenceConfig(secret_key=TEST_SECRET),
        tasks=BackgroundTaskService(),
    )
