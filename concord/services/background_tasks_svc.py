"""Background task service: runs accepted computations on daemon threads."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Any, Literal, TypedDict

logger = logging.getLogger(__name__)

# Maximum number of finished task results to keep in memory
MAX_TASK_RESULTS = 100

TaskStatus = Literal["running", "complete", "error"]


class TaskState(TypedDict):
    status: TaskStatus
    result: Any
    error: str | None


class BackgroundTaskService:
    """Starts one thread per task and records its outcome.

    Each task outlives the HTTP request that scheduled it. Task failures are
    logged and recorded, never propagated: a failing task must not take the
    process down.
    """

    def __init__(self, max_results: int = MAX_TASK_RESULTS) -> None:
        self._max_results = max_results
        self._tasks: dict[str, threading.Thread] = {}
        self._task_results: dict[str, TaskState] = {}
        self._task_order: list[str] = []  # insertion order for eviction
        self._lock = threading.Lock()

    def _evict_old_results(self) -> None:
        """Remove oldest finished results when over limit. Must hold lock."""
        for task_id in list(self._task_order):
            if len(self._task_results) <= self._max_results:
                return
            state = self._task_results.get(task_id)
            if state and state["status"] != "running":
                self._task_order.remove(task_id)
                del self._task_results[task_id]
                self._tasks.pop(task_id, None)

        running = sum(1 for s in self._task_results.values() if s["status"] == "running")
        if running > self._max_results:
            logger.warning(f"Task overload: {running} tasks running, exceeds limit of {self._max_results}")

    def start_task(
        self,
        task_id: str,
        task_fn: Callable[..., Any],
        *args: Any,
        **kwargs: Any,
    ) -> str:
        """Start a background task and return task_id.

        Args:
            task_id: Unique identifier for the task
            task_fn: Function to execute in background
            *args: Positional arguments for task_fn
            **kwargs: Keyword arguments for task_fn

        Returns:
            Task ID for status checking

        Raises:
            RuntimeError: If the thread cannot be started
        """

        def wrapper() -> None:
            try:
                result = task_fn(*args, **kwargs)
            except Exception as e:
                logger.error(f"Task {task_id} failed: {e}", exc_info=True)
                with self._lock:
                    self._task_results[task_id] = {"status": "error", "result": None, "error": str(e)}
                return
            with self._lock:
                self._task_results[task_id] = {"status": "complete", "result": result, "error": None}

        thread = threading.Thread(target=wrapper, name=f"task-{task_id}", daemon=True)

        # Register before start so a fast task cannot be overwritten by "running"
        with self._lock:
            self._tasks[task_id] = thread
            self._task_results[task_id] = {"status": "running", "result": None, "error": None}
            self._task_order.append(task_id)
            self._evict_old_results()

        try:
            thread.start()
        except RuntimeError:
            with self._lock:
                self._tasks.pop(task_id, None)
                self._task_results.pop(task_id, None)
                if task_id in self._task_order:
                    self._task_order.remove(task_id)
            raise

        return task_id

    def get_task_status(self, task_id: str) -> TaskState | None:
        """Get task status (running, complete, error), None if unknown."""
        with self._lock:
            state = self._task_results.get(task_id)
            return None if state is None else TaskState(**state)

    def wait_for_task(self, task_id: str, timeout: float | None = None) -> TaskState | None:
        """Block until the task finishes or timeout elapses; return its status."""
        with self._lock:
            thread = self._tasks.get(task_id)
        if thread is not None:
            thread.join(timeout)
        return self.get_task_status(task_id)

    def running_count(self) -> int:
        with self._lock:
            return sum(1 for s in self._task_results.values() if s["status"] == "running")

    def join_all(self, timeout: float | None = None) -> int:
        """Wait for running tasks to finish.

        Args:
            timeout: Overall budget in seconds, None waits indefinitely

        Returns:
            Number of tasks still running afterwards
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._lock:
            threads = list(self._tasks.values())
        for thread in threads:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            thread.join(remaining)
        return self.running_count()
