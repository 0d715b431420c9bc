"""
Bounded worker pool for push deliveries.

A plain ThreadPoolExecutor queues without limit. BoundedExecutor caps the
number of submitted-but-unfinished tasks with a semaphore: once max_pending
tasks are in flight, submit() blocks until one finishes. That keeps a burst
of events from opening an unbounded number of provider connections or
holding an unbounded backlog in memory.

The process-wide pool is created lazily and drained on interpreter exit
and on Celery worker shutdown.

Usage:
    from notifications.executor import get_push_executor

    future = get_push_executor().submit(deliver, device)
"""

from __future__ import annotations

import atexit
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from django.conf import settings

if TYPE_CHECKING:
    from collections.abc import Callable
    from concurrent.futures import Future

logger = logging.getLogger(__name__)


class BoundedExecutor:
    def __init__(self, max_workers: int = 8, max_pending: int = 256, name: str = "push"):
        if max_workers < 1 or max_pending < 1:
            raise ValueError("max_workers and max_pending must be positive")
        self.max_workers = max_workers
        self.max_pending = max_pending
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=name)
        self._slots = threading.BoundedSemaphore(max_pending)

    def submit(self, fn: Callable, *args, **kwargs) -> Future:
        """Submit work, blocking while max_pending tasks are unfinished."""
        self._slots.acquire()
        try:
            future = self._pool.submit(fn, *args, **kwargs)
        except BaseException:
            self._slots.release()
            raise
        future.add_done_callback(lambda _: self._slots.release())
        return future

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work; with wait=True, block until queued work ran."""
        self._pool.shutdown(wait=wait)


_executor: BoundedExecutor | None = None
_executor_lock = threading.Lock()


def get_push_executor() -> BoundedExecutor:
    """Return the process-wide push pool, creating it on first use."""
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = BoundedExecutor(
                max_workers=settings.NOTIFICATIONS_PUSH_MAX_WORKERS,
                max_pending=settings.NOTIFICATIONS_PUSH_MAX_PENDING,
            )
        return _executor


def shutdown_push_executor(**kwargs) -> None:
    """
    Drain and discard the process-wide pool.

    Accepts **kwargs so it can be connected to Celery's worker_shutdown
    signal directly. A later get_push_executor() starts a fresh pool.
    """
    global _executor
    with _executor_lock:
        executor, _executor = _executor, None
    if executor is not None:
        logger.info("Draining push executor")
        executor.shutdown(wait=True)


atexit.register(shutdown_push_executor)
