"""
Integration tests for the HTTP surface.

Exercises the FastAPI app end to end through TestClient with a real
CoincidenceService wired to the fake backend. The lifespan is not entered,
so no real backend client is built.
"""

import threading

import pytest
from conftest import TEST_SECRET, FakeBackendClient
from fastapi.testclient import TestClient

from concord.app import application
from concord.components.coincidence.delay_comp import ConstantDelay
from concord.components.coincidence.similarity_comp import CoincidenceEngine
from concord.helpers.exceptions import RemoteRejectedError, RemoteUnavailableError
from concord.interfaces.api.api_app import api_app
from concord.services.coincidence_svc import CoincidenceConfig, CoincidenceService

pytestmark = pytest.mark.integration


def _body(join_id: int = 42, secret: str = TEST_SECRET) -> dict:
    return {
        "composer_analysis_id": join_id,
        "composer_id": 7,
        "analysis_id": 3,
        "secret_key": secret,
    }


@pytest.fixture
def wired_service(monkeypatch, coincidence_service):
    monkeypatch.setitem(application.services, "coincidence", coincidence_service)
    return coincidence_service


@pytest.fixture
def client(wired_service):
    return TestClient(api_app)


def _wait_idle(service: CoincidenceService) -> None:
    assert service.tasks.join_all(timeout=5) == 0


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_health_without_services():
    # No coincidence service registered; liveness still answers
    response = TestClient(api_app).get("/health")
    assert response.status_code == 200


def test_missing_service_is_503(monkeypatch):
    monkeypatch.delitem(application.services, "coincidence", raising=False)
    response = TestClient(api_app).post("/api/calculate-coincidence", json=_body())
    assert response.status_code == 503


class TestAsyncEndpoint:
    def test_accepted(self, client, wired_service, fake_backend: FakeBackendClient):
        response = client.post("/api/calculate-coincidence", json=_body())

        assert response.status_code == 202
        assert response.json() == {"status": "accepted", "message": "Coincidence calculation started"}

        _wait_idle(wired_service)
        assert [r.composer_analysis_id for r in fake_backend.delivered] == [42]

    def test_duplicate_is_409(self, client, wired_service, fake_backend):
        fake_backend.gate = threading.Event()

        first = client.post("/api/calculate-coincidence", json=_body())
        assert first.status_code == 202
        assert fake_backend.fetch_started.wait(5)

        second = client.post("/api/calculate-coincidence", json=_body())
        assert second.status_code == 409
        assert second.json() == {"error": "Analysis 42 already being processed"}

        fake_backend.gate.set()
        _wait_idle(wired_service)

        third = client.post("/api/calculate-coincidence", json=_body())
        assert third.status_code == 202
        _wait_idle(wired_service)
        assert len(fake_backend.delivered) == 2

    def test_bad_secret_is_401(self, client, fake_backend):
        response = client.post("/api/calculate-coincidence", json=_body(secret="nope"))

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid secret key"}
        assert fake_backend.fetch_count == 0

    @pytest.mark.parametrize(
        "payload",
        [
            {"composer_id": 7, "analysis_id": 3, "secret_key": TEST_SECRET},
            {"composer_analysis_id": 0, "composer_id": 7, "analysis_id": 3, "secret_key": TEST_SECRET},
            {"composer_analysis_id": "abc", "composer_id": 7, "analysis_id": 3, "secret_key": TEST_SECRET},
            {"composer_analysis_id": 42, "composer_id": 7, "analysis_id": 3, "secret_key": 12345},
            {"composer_analysis_id": True, "composer_id": 7, "analysis_id": 3, "secret_key": TEST_SECRET},
            {"composer_analysis_id": "42", "composer_id": 7, "analysis_id": 3, "secret_key": TEST_SECRET},
            {"composer_analysis_id": 42.0, "composer_id": 7, "analysis_id": 3, "secret_key": TEST_SECRET},
            {"composer_analysis_id": 42, "composer_id": "7", "analysis_id": 3, "secret_key": TEST_SECRET},
            {"composer_analysis_id": 42, "composer_id": 7, "analysis_id": 3, "secret_key": True},
        ],
    )
    def test_malformed_body_is_400(self, client, fake_backend, payload):
        response = client.post("/api/calculate-coincidence", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request body"
        assert fake_backend.fetch_count == 0

    def test_non_json_body_is_400(self, client, fake_backend):
        response = client.post(
            "/api/calculate-coincidence",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert fake_backend.fetch_count == 0

    def test_malformed_body_with_bad_secret_is_400(self, client):
        response = client.post("/api/calculate-coincidence", json=_body(join_id=-1, secret="nope"))
        assert response.status_code == 400


class TestSyncEndpoint:
    def test_result(self, client, fake_backend):
        fake_backend.composer_freqs = [20.0] * 5
        fake_backend.analysis_freqs = [30.0] * 5

        response = client.post("/api/calculate-coincidence-sync", json=_body())

        assert response.status_code == 200
        assert response.json() == {
            "composer_analysis_id": 42,
            "potential_coincidence": 90.0,
            "secret_key": TEST_SECRET,
            "status": "completed",
        }
        assert fake_backend.delivered == []

    def test_sync_ignores_in_flight_async(self, client, wired_service, fake_backend):
        fake_backend.gate = threading.Event()
        assert client.post("/api/calculate-coincidence", json=_body()).status_code == 202
        assert fake_backend.fetch_started.wait(5)

        fake_backend.gate.set()
        response = client.post("/api/calculate-coincidence-sync", json=_body())
        assert response.status_code == 200
        _wait_idle(wired_service)

    def test_backend_unavailable_is_502(self, client, fake_backend):
        fake_backend.fetch_error = RemoteUnavailableError("Backend request failed: connection refused")

        response = client.post("/api/calculate-coincidence-sync", json=_body())

        assert response.status_code == 502
        assert "connection refused" in response.json()["error"]

    def test_backend_rejection_is_502(self, client, fake_backend):
        fake_backend.composer_error = RemoteRejectedError("Backend returned status 404", status_code=404)

        response = client.post("/api/calculate-coincidence-sync", json=_body())
        assert response.status_code == 502

    def test_bad_secret_is_401(self, client, fake_backend):
        response = client.post("/api/calculate-coincidence-sync", json=_body(secret="nope"))

        assert response.status_code == 401
        assert fake_backend.fetch_count == 0

    @pytest.mark.parametrize("join_id", [True, "42", 42.0])
    def test_loosely_typed_id_is_400(self, client, fake_backend, join_id):
        body = _body()
        body["composer_analysis_id"] = join_id

        response = client.post("/api/calculate-coincidence-sync", json=body)

        assert response.status_code == 400
        assert fake_backend.fetch_count == 0

    def test_deadline_is_504(self, monkeypatch, fake_backend):
        slow_service = CoincidenceService(
            backend=fake_backend,
            engine=CoincidenceEngine(delay_policy=ConstantDelay(5.0)),
            cfg=CoincidenceConfig(secret_key=TEST_SECRET, sync_timeout_s=0.05),
        )
        monkeypatch.setitem(application.services, "coincidence", slow_service)

        response = TestClient(api_app).post("/api/calculate-coincidence-sync", json=_body())

        assert response.status_code == 504
        assert "deadline" in response.json()["error"]

    def test_unexpected_error_is_500(self, wired_service, fake_backend):
        fake_backend.fetch_error = RuntimeError("boom")

        response = TestClient(api_app, raise_server_exceptions=False).post(
            "/api/calculate-coincidence-sync", json=_body()
        )

        assert response.status_code == 500
        assert "error" in response.json()
