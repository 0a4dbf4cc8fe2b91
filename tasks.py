# tasks.py

import collections
import itertools
import logging
import threading
import time

from config import (TASK_BACKOFF_SECONDS, TASK_HISTORY_SIZE, TASK_MAX_RETRIES,
                    TASK_QUEUE_SIZE)
from errors import QueueFullError

logger = logging.getLogger(__name__)


class TaskQueue:
    """
    Bounded FIFO of background jobs (report generation, emails).

    Handlers are registered per task kind. run_pending() drains the queue in
    order; a failing task is retried after backoff_base * 2**attempt seconds
    until it has been retried max_retries times, then moved to `failed`.
    Several threads may submit and drain at once. `completed` and `failed`
    keep only the latest history_size entries.
    """

    def __init__(
        self,
        max_size=TASK_QUEUE_SIZE,
        max_retries=TASK_MAX_RETRIES,
        backoff_base=TASK_BACKOFF_SECONDS,
        sleep=time.sleep,
        history_size=TASK_HISTORY_SIZE,
    ):
        self.max_size = max_size
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self._sleep = sleep
        self._handlers = {}
        self._pending = collections.deque()
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self.completed = collections.deque(maxlen=history_size)
        self.failed = collections.deque(maxlen=history_size)

    def register(self, kind, handler):
        with self._lock:
            self._handlers[kind] = handler

    def submit(self, kind, payload, max_retries=None):
        with self._lock:
            if len(self._pending) >= self.max_size:
                raise QueueFullError(f"Task queue full ({self.max_size} pending)")
            task = {
                "id": f"task_{next(self._ids)}",
                "kind": kind,
                "payload": payload,
                "max_retries": self.max_retries if max_retries is None else max_retries,
                "attempts": 0,
                "error": None,
            }
            self._pending.append(task)
        logger.info("queued %s task %s", kind, task["id"])
        return task["id"]

    def pending(self):
        with self._lock:
            return [t["id"] for t in self._pending]

    def backoff(self, attempt):
        return self.backoff_base * 2**attempt

    def _next(self):
        with self._lock:
            if not self._pending:
                return None, None
            task = self._pending.popleft()
            return task, self._handlers.get(task["kind"])

    def run_pending(self):
        """Process queued tasks until the queue is empty. Returns the number processed."""
        processed = 0
        while True:
            task, handler = self._next()
            if task is None:
                return processed
            self._run(task, handler)
            processed += 1

    def run_in_background(self):
        """Drain the queue on a daemon thread so the caller does not wait on retries."""
        worker = threading.Thread(target=self.run_pending, name="task-queue", daemon=True)
        worker.start()
        return worker

    def _run(self, task, handler):
        if handler is None:
            task["error"] = f"Unknown task type: {task['kind']}"
            logger.error("task %s failed: %s", task["id"], task["error"])
            self.failed.append(task)
            return

        while True:
            task["attempts"] += 1
            try:
                handler(task["payload"])
            except Exception as exc:  # handler errors are retried, then recorded
                task["error"] = f"{type(exc).__name__}: {exc}"
                retry = task["attempts"] - 1
                if retry >= task["max_retries"]:
                    logger.error(
                        "task %s failed after %d attempts: %s",
                        task["id"], task["attempts"], task["error"],
                    )
                    self.failed.append(task)
                    return
                delay = self.backoff(retry + 1)
                logger.warning(
                    "task %s attempt %d failed, retrying in %.1fs: %s",
                    task["id"], task["attempts"], delay, task["error"],
                )
                self._sleep(delay)
            else:
                task["error"] = None
                self.completed.append(task["id"])
                logger.info("task %s done", task["id"])
                return
