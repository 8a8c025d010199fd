"""Unit tests for concord.helpers.exceptions."""

import pytest

from concord.helpers.exceptions import (
    CoincidenceError,
    ComputationCancelledError,
    ConflictError,
    InvalidRequestError,
    RemoteError,
    RemoteRejectedError,
    RemoteUnavailableError,
    UnauthorizedError,
)


class TestTaxonomy:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "exc_type",
        [InvalidRequestError, UnauthorizedError, ConflictError, RemoteError, ComputationCancelledError],
    )
    def test_all_are_coincidence_errors(self, exc_type) -> None:
        assert issubclass(exc_type, CoincidenceError)

    @pytest.mark.unit
    def test_remote_kinds(self) -> None:
        assert issubclass(RemoteUnavailableError, RemoteError)
        assert issubclass(RemoteRejectedError, RemoteError)

    @pytest.mark.unit
    def test_conflict_carries_id(self) -> None:
        error = ConflictError(42)
        assert error.composer_analysis_id == 42
        assert "42" in str(error)

    @pytest.mark.unit
    def test_rejected_carries_status(self) -> None:
        error = RemoteRejectedError("nope", status_code=503)
        assert error.status_code == 503
        assert str(error) == "nope"
