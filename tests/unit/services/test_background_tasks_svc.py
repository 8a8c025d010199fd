"""Unit tests for concord.services.background_tasks_svc."""

import threading

import pytest

from concord.services.background_tasks_svc import BackgroundTaskService


@pytest.mark.unit
def test_completed_task_records_result():
    service = BackgroundTaskService()
    service.start_task("t1", lambda x, y: x + y, 2, y=3)

    state = service.wait_for_task("t1", timeout=5)

    assert state == {"status": "complete", "result": 5, "error": None}


@pytest.mark.unit
def test_failing_task_records_error_without_raising():
    def boom():
        raise ValueError("bad input")

    service = BackgroundTaskService()
    service.start_task("t1", boom)
    state = service.wait_for_task("t1", timeout=5)

    assert state["status"] == "error"
    assert state["error"] == "bad input"


@pytest.mark.unit
def test_running_until_released():
    release = threading.Event()
    service = BackgroundTaskService()
    service.start_task("t1", release.wait, 5)

    assert service.get_task_status("t1")["status"] == "running"
    assert service.running_count() == 1

    release.set()
    service.wait_for_task("t1", timeout=5)
    assert service.running_count() == 0


@pytest.mark.unit
def test_unknown_task_is_none():
    service = BackgroundTaskService()
    assert service.get_task_status("missing") is None
    assert service.wait_for_task("missing", timeout=0.01) is None


@pytest.mark.unit
def test_old_finished_results_are_evicted():
    service = BackgroundTaskService(max_results=2)
    for i in range(4):
        service.start_task(f"t{i}", lambda: None)
        service.wait_for_task(f"t{i}", timeout=5)

    assert service.get_task_status("t0") is None
    assert service.get_task_status("t3")["status"] == "complete"


@pytest.mark.unit
def test_join_all_reports_stragglers():
    release = threading.Event()
    service = BackgroundTaskService()
    service.start_task("slow", release.wait, 5)

    assert service.join_all(timeout=0.05) == 1

    release.set()
    assert service.join_all(timeout=5) == 0
