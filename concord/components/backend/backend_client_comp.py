"""Backend client: reads join records and composers, writes results back.

The backend is the system of record (a Django application). Three calls:
GET  /api/composer-analyses/{join_id}/?analysis_id=..&composer_id=..
GET  /api/composers/{composer_id}/
POST /api/analysis-callback/

No retries and no backoff: every call is a single attempt. Transport
failures raise RemoteUnavailableError; error statuses and unusable payloads
raise RemoteRejectedError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import requests

from concord.helpers.dto.coincidence_dto import ComputationResult
from concord.helpers.dto.interval_dto import (
    INTERVAL_GROUPS,
    AnalysisRecord,
    ComposerProfile,
    IntervalProfile,
    IntervalStat,
)
from concord.helpers.exceptions import RemoteRejectedError, RemoteUnavailableError
from concord.helpers.number_helper import parse_optional_float, parse_optional_int

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 30  # seconds

# Analysis-side field for each slot, in INTERVAL_GROUPS order
ANALYSIS_FREQUENCY_FIELDS: tuple[str, ...] = (
    "anon_unisons_seconds_freq",
    "anon_thirds_freq",
    "anon_fourths_fifths_freq",
    "anon_sixths_sevenths_freq",
    "anon_octaves_freq",
)


class BackendClient(Protocol):
    """Contract the coincidence service depends on."""

    def fetch_join_record(self, composer_analysis_id: int, analysis_id: int, composer_id: int) -> AnalysisRecord: ...

    def fetch_composer_profile(self, composer_id: int) -> ComposerProfile: ...

    def deliver_result(self, result: ComputationResult) -> None: ...


@dataclass(frozen=True)
class BackendPaths:
    """URL path templates relative to the backend base URL."""

    join_record: str = "/api/composer-analyses/{composer_analysis_id}/"
    composer: str = "/api/composers/{composer_id}/"
    callback: str = "/api/analysis-callback/"


# ----------------------------------------------------------------------
#  Payload parsing (boundary between backend JSON and DTOs)
# ----------------------------------------------------------------------
def _require_id(payload: dict[str, Any], key: str) -> int:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise RemoteRejectedError(f"Backend payload missing integer '{key}'")
    return value


def parse_join_record(payload: Any) -> AnalysisRecord:
    """Build an AnalysisRecord from the backend join-record JSON.

    Frequencies arrive as optional strings; unparseable values become None.
    """
    if not isinstance(payload, dict):
        raise RemoteRejectedError("Join record payload is not an object")

    stats = tuple(
        IntervalStat(interval_group=group, frequency=parse_optional_float(payload.get(field)))
        for group, field in zip(INTERVAL_GROUPS, ANALYSIS_FREQUENCY_FIELDS)
    )
    coincidence = payload.get("potential_coincidence")
    return AnalysisRecord(
        id=_require_id(payload, "id"),
        composer_id=_require_id(payload, "composer_id"),
        analysis_id=_require_id(payload, "analysis_id"),
        interval_profile=IntervalProfile(stats=stats),
        potential_coincidence="" if coincidence is None else str(coincidence),
    )


def parse_composer(payload: Any) -> ComposerProfile:
    """Build a ComposerProfile from the backend composer JSON.

    interval_stats is matched to slots by position. Missing trailing stats
    leave their slot empty; extra stats are ignored.
    """
    if not isinstance(payload, dict):
        raise RemoteRejectedError("Composer payload is not an object")

    raw_stats = payload.get("interval_stats") or []
    if not isinstance(raw_stats, list):
        raise RemoteRejectedError("Composer 'interval_stats' is not a list")

    stats: list[IntervalStat] = []
    for index, group in enumerate(INTERVAL_GROUPS):
        raw = raw_stats[index] if index < len(raw_stats) else None
        if not isinstance(raw, dict):
            stats.append(IntervalStat(interval_group=group))
            continue
        stats.append(
            IntervalStat(
                interval_group=str(raw.get("IntervalGroup") or group),
                frequency=parse_optional_float(raw.get("Frequency")),
                std_dev=parse_optional_float(raw.get("StdDev")),
            )
        )

    return ComposerProfile(
        id=_require_id(payload, "id"),
        name=str(payload.get("name") or ""),
        interval_profile=IntervalProfile(stats=tuple(stats)),
        biography=payload.get("biography"),
        image=payload.get("image"),
        analyzed_works=parse_optional_int(payload.get("analyzed_works")),
        total_intervals=parse_optional_int(payload.get("total_intervals")),
        period=str(payload.get("period") or ""),
        polyphony_type=str(payload.get("polyphony_type") or ""),
    )


def build_callback_payload(result: ComputationResult, secret_key: str) -> dict[str, Any]:
    """JSON body for the result callback."""
    return {
        "composer_analysis_id": result.composer_analysis_id,
        "potential_coincidence": result.potential_coincidence,
        "secret_key": secret_key,
    }


# ----------------------------------------------------------------------
#  HTTP implementation
# ----------------------------------------------------------------------
class HttpBackendClient:
    """BackendClient over HTTP using requests."""

    def __init__(
        self,
        base_url: str,
        secret_key: str,
        timeout: float = _DEFAULT_TIMEOUT,
        paths: BackendPaths | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._secret_key = secret_key
        self._timeout = timeout
        self._paths = paths or BackendPaths()

    def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        try:
            response = requests.get(url, params=params, timeout=self._timeout)
        except requests.RequestException as e:
            raise RemoteUnavailableError(f"Backend request failed: {e}") from e

        if response.status_code != 200:
            raise RemoteRejectedError(f"Backend returned status {response.status_code} for {url}", response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise RemoteRejectedError(f"Backend returned invalid JSON for {url}") from e

    def fetch_join_record(self, composer_analysis_id: int, analysis_id: int, composer_id: int) -> AnalysisRecord:
        url = self.base_url + self._paths.join_record.format(composer_analysis_id=composer_analysis_id)
        payload = self._get_json(url, params={"analysis_id": analysis_id, "composer_id": composer_id})
        return parse_join_record(payload)

    def fetch_composer_profile(self, composer_id: int) -> ComposerProfile:
        url = self.base_url + self._paths.composer.format(composer_id=composer_id)
        return parse_composer(self._get_json(url))

    def deliver_result(self, result: ComputationResult) -> None:
        """Single POST of the result. Only HTTP 200 counts as acknowledged."""
        url = self.base_url + self._paths.callback
        payload = build_callback_payload(result, self._secret_key)
        try:
            response = requests.post(url, json=payload, timeout=self._timeout)
        except requests.RequestException as e:
            raise RemoteUnavailableError(f"Failed to send result to backend: {e}") from e

        if response.status_code != 200:
            raise RemoteRejectedError(f"Backend returned status {response.status_code} for callback", response.status_code)
