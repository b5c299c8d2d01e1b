"""Tests for WorkerPool with real worker processes."""

from __future__ import annotations

import math
import os

import psutil
import pytest

from parallel_harness.errors import PoolNotRunningError
from parallel_harness.parallel.pool import WorkerPool, start_pool
from parallel_harness.parallel.pool_config import IsolationMode


def worker_pid(_: object = None) -> int:
    """Return the process id of the worker running the call."""
    return os.getpid()


class TestWorkerPoolLifecycle:
    """Tests for starting and stopping worker processes."""

    def test_start_creates_all_workers(self) -> None:
        """start() brings up exactly N distinct worker processes."""
        with WorkerPool(workers=3) as pool:
            assert pool.is_running
            assert len(pool.worker_ids) == 3
            assert len(set(pool.worker_ids)) == 3
            assert os.getpid() not in pool.worker_ids

    def test_submit_runs_in_worker(self) -> None:
        """Submitted calls run in one of the pool's workers."""
        with WorkerPool(workers=2) as pool:
            assert pool.submit(math.sqrt, 16).result() == 4.0
            assert pool.submit(worker_pid).result() in pool.worker_ids

    def test_stop_is_idempotent(self) -> None:
        """Stopping twice is harmless."""
        pool = start_pool(2)
        pool.stop()
        pool.stop()
        assert not pool.is_running
        assert pool.worker_ids == ()

    def test_restart_uses_fresh_workers(self) -> None:
        """Each start cycle creates new processes and reaps the old ones."""
        pool = WorkerPool(workers=2)
        seen: list[tuple[int, ...]] = []
        for _ in range(3):
            with pool:
                seen.append(pool.worker_ids)
            assert not pool.is_running

        pids = {pid for ids in seen for pid in ids}
        assert all(len(ids) == 2 for ids in seen)
        assert len(pids) == 6
        assert not any(psutil.pid_exists(pid) for pid in pids)
        assert pids.isdisjoint(child.pid for child in psutil.Process().children(recursive=True))

    def test_start_on_running_pool_is_noop(self) -> None:
        """A second start() keeps the same workers."""
        with WorkerPool(workers=2) as pool:
            ids = pool.worker_ids
            assert pool.start() is pool
            assert pool.worker_ids == ids

    def test_context_manager_stops_on_exception(self) -> None:
        """Workers are released when the body raises."""
        pool = WorkerPool(workers=2)
        with pytest.raises(ZeroDivisionError), pool:
            assert pool.is_running
            1 / 0  # noqa: B018
        assert not pool.is_running
        with pytest.raises(PoolNotRunningError):
            pool.submit(math.sqrt, 4)

    def test_single_worker_pool(self) -> None:
        """A pool of one worker is valid."""
        with start_pool(1, IsolationMode.ISOLATED) as pool:
            assert len(pool.worker_ids) == 1
            assert pool.submit(worker_pid).result() == pool.worker_ids[0]
