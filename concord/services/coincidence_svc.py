"""
Coincidence service - orchestrates fetch → compute → deliver.

Two execution modes:
- submit_async(): validates, registers the join record as in flight and runs
  the pipeline on a background thread; the result is pushed to the backend
  through the callback. At most one computation per join record id.
- submit_sync(): validates and runs fetch → compute inline, returning the
  result to the caller. No in-flight bookkeeping and no callback.

Async delivery is at-most-once: a failed fetch abandons the computation and
a failed callback is logged, never retried.
"""

from __future__ import annotations

import hmac
import logging
import uuid
from dataclasses import dataclass

from concord.components.backend.backend_client_comp import BackendClient
from concord.components.coincidence.delay_comp import CancellationToken
from concord.components.coincidence.inflight_comp import InFlightRegistry
from concord.components.coincidence.similarity_comp import CoincidenceEngine
from concord.helpers.dto.coincidence_dto import ComputationRequest, ComputationResult, SubmissionAccepted
from concord.helpers.exceptions import (
    ComputationCancelledError,
    ConflictError,
    InvalidRequestError,
    RemoteError,
    UnauthorizedError,
)
from concord.helpers.logging_helper import log_context
from concord.services.background_tasks_svc import BackgroundTaskService

logger = logging.getLogger(__name__)


@dataclass
class CoincidenceConfig:
    """Configuration for CoincidenceService."""

    secret_key: str
    sync_timeout_s: float | None = None


class CoincidenceService:
    """Processing coordinator for coincidence computations.

    Owns its in-flight registry; create one instance per application (or per
    test) rather than sharing module-level state.
    """

    def __init__(
        self,
        backend: BackendClient,
        engine: CoincidenceEngine,
        cfg: CoincidenceConfig,
        tasks: BackgroundTaskService | None = None,
    ) -> None:
        self._backend = backend
        self._engine = engine
        self._cfg = cfg
        self._tasks = tasks or BackgroundTaskService()
        self._in_flight = InFlightRegistry()

    # ------------------------------------------------------------------
    #  Request checks
    # ------------------------------------------------------------------
    @staticmethod
    def validate_request(request: ComputationRequest) -> None:
        """Reject malformed requests before any state is touched.

        Raises:
            InvalidRequestError: If an id is not a positive integer or the
                secret is not a string
        """
        for name in ("composer_analysis_id", "composer_id", "analysis_id"):
            value = getattr(request, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidRequestError(f"'{name}' must be a positive integer")
        if not isinstance(request.secret_key, str):
            raise InvalidRequestError("'secret_key' must be a string")

    def authorize(self, request: ComputationRequest) -> None:
        """Compare the shared secret in constant time.

        Raises:
            UnauthorizedError: If the secret does not match
        """
        supplied = request.secret_key.encode("utf-8")
        expected = self._cfg.secret_key.encode("utf-8")
        if not hmac.compare_digest(supplied, expected):
            raise UnauthorizedError("Invalid secret key")

    # ------------------------------------------------------------------
    #  Public operations
    # ------------------------------------------------------------------
    def submit_async(self, request: ComputationRequest) -> SubmissionAccepted:
        """Schedule a computation and return without waiting for it.

        Raises:
            InvalidRequestError: Malformed request
            UnauthorizedError: Secret mismatch
            ConflictError: The join record is already being processed
        """
        self.validate_request(request)
        self.authorize(request)

        join_id = request.composer_analysis_id
        if not self._in_flight.try_acquire(join_id):
            logger.info(f"Rejected duplicate submission for composer analysis {join_id}")
            raise ConflictError(join_id)

        task_id = f"coincidence-{join_id}-{uuid.uuid4().hex[:8]}"
        try:
            self._tasks.start_task(task_id, self._process_async, request)
        except Exception:
            self._in_flight.release(join_id)
            raise

        logger.info(f"Accepted composer analysis {join_id} (task {task_id})")
        return SubmissionAccepted(composer_analysis_id=join_id, task_id=task_id)

    def submit_sync(
        self,
        request: ComputationRequest,
        cancel_token: CancellationToken | None = None,
    ) -> ComputationResult:
        """Run the computation inline and return its result.

        If no token is passed and sync_timeout_s is configured, the
        computation is bounded by that deadline.

        Raises:
            InvalidRequestError: Malformed request
            UnauthorizedError: Secret mismatch
            RemoteError: A backend read failed
            ComputationCancelledError: The token fired during the computation
        """
        self.validate_request(request)
        self.authorize(request)

        if cancel_token is None and self._cfg.sync_timeout_s is not None:
            cancel_token = CancellationToken.with_timeout(self._cfg.sync_timeout_s)

        with log_context(composer_analysis_id=request.composer_analysis_id, mode="sync"):
            logger.info(f"Processing composer analysis {request.composer_analysis_id}")
            result = self.compute(request, cancel_token)
            logger.info(
                f"Calculated coincidence for composer analysis {request.composer_analysis_id}: "
                f"{result.potential_coincidence:.2f}%"
            )
        return result

    def compute(self, request: ComputationRequest, cancel_token: CancellationToken | None = None) -> ComputationResult:
        """Fetch the join record and composer, then score them."""
        analysis = self._backend.fetch_join_record(
            request.composer_analysis_id, request.analysis_id, request.composer_id
        )
        composer = self._backend.fetch_composer_profile(request.composer_id)
        score = self._engine.score(composer, analysis, cancel_token)
        return ComputationResult(composer_analysis_id=request.composer_analysis_id, potential_coincidence=score)

    # ------------------------------------------------------------------
    #  Diagnostics / lifecycle
    # ------------------------------------------------------------------
    def is_in_flight(self, composer_analysis_id: int) -> bool:
        return composer_analysis_id in self._in_flight

    def in_flight_ids(self) -> frozenset[int]:
        return self._in_flight.snapshot()

    @property
    def tasks(self) -> BackgroundTaskService:
        return self._tasks

    def shutdown(self, timeout: float | None = None) -> None:
        """Wait for accepted computations to finish."""
        still_running = self._tasks.join_all(timeout)
        if still_running:
            logger.warning(f"Shutdown with {still_running} computation(s) still running")

    # ------------------------------------------------------------------
    #  Background pipeline
    # ------------------------------------------------------------------
    def _process_async(self, request: ComputationRequest) -> ComputationResult | None:
        join_id = request.composer_analysis_id
        with log_context(composer_analysis_id=join_id, mode="async"):
            try:
                try:
                    result = self.compute(request)
                except (RemoteError, ComputationCancelledError) as e:
                    logger.error(f"Abandoning composer analysis {join_id}: {e}")
                    return None

                try:
                    self._backend.deliver_result(result)
                except RemoteError as e:
                    logger.error(f"Failed to deliver result for composer analysis {join_id}: {e}")
                    return result

                logger.info(
                    f"Delivered coincidence {result.potential_coincidence:.2f}% for composer analysis {join_id}"
                )
                return result
            finally:
                self._in_flight.release(join_id)
