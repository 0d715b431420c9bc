"""
Tests for the bounded push executor.

Test Classes:
    TestBoundedExecutor: Pending limit and drain on shutdown
    TestProcessExecutor: Lazily created process-wide pool
"""

import threading
import time

import pytest

from notifications import executor as executor_module
from notifications.executor import BoundedExecutor, get_push_executor, shutdown_push_executor


class TestBoundedExecutor:
    def test_runs_work(self):
        pool = BoundedExecutor(max_workers=2, max_pending=2)
        try:
            assert pool.submit(lambda x: x * 2, 21).result(timeout=5) == 42
        finally:
            pool.shutdown()

    def test_submit_blocks_at_pending_limit(self):
        """A third submit waits until one of two pending tasks finishes."""
        release = threading.Event()
        pool = BoundedExecutor(max_workers=1, max_pending=2)
        submitted = threading.Event()

        pool.submit(release.wait, 5)
        pool.submit(release.wait, 5)

        def third():
            pool.submit(lambda: None)
            submitted.set()

        thread = threading.Thread(target=third)
        thread.start()
        try:
            assert not submitted.wait(0.2)
            release.set()
            assert submitted.wait(5)
        finally:
            release.set()
            thread.join(5)
            pool.shutdown()

    def test_exception_releases_slot(self):
        pool = BoundedExecutor(max_workers=1, max_pending=1)

        def boom():
            raise ValueError("boom")

        try:
            with pytest.raises(ValueError):
                pool.submit(boom).result(timeout=5)
            assert pool.submit(lambda: "ok").result(timeout=5) == "ok"
        finally:
            pool.shutdown()

    def test_shutdown_drains_pending_work(self):
        done = []
        pool = BoundedExecutor(max_workers=1, max_pending=4)

        for i in range(3):
            pool.submit(lambda i=i: (time.sleep(0.01), done.append(i)))

        pool.shutdown(wait=True)

        assert done == [0, 1, 2]

    def test_rejects_work_after_shutdown(self):
        pool = BoundedExecutor(max_workers=1, max_pending=1)
        pool.shutdown()

        with pytest.raises(RuntimeError):
            pool.submit(lambda: None)
        # The slot taken by the rejected submit was given back
        assert pool._slots.acquire(blocking=False)

    @pytest.mark.parametrize("workers,pending", [(0, 1), (1, 0)])
    def test_rejects_invalid_sizes(self, workers, pending):
        with pytest.raises(ValueError):
            BoundedExecutor(max_workers=workers, max_pending=pending)


class TestProcessExecutor:
    @pytest.fixture(autouse=True)
    def fresh_pool(self):
        shutdown_push_executor()
        yield
        shutdown_push_executor()

    def test_sized_from_settings(self, settings):
        settings.NOTIFICATIONS_PUSH_MAX_WORKERS = 3
        settings.NOTIFICATIONS_PUSH_MAX_PENDING = 9

        pool = get_push_executor()

        assert (pool.max_workers, pool.max_pending) == (3, 9)
        assert get_push_executor() is pool

    def test_shutdown_drains_and_resets(self):
        done = threading.Event()
        pool = get_push_executor()
        pool.submit(lambda: (time.sleep(0.05), done.set()))

        shutdown_push_executor(signal=None, sender=None)

        assert done.is_set()
        assert executor_module._executor is None
        assert get_push_executor() is not pool
