"""Tests for shared (fork) workers."""

from __future__ import annotations

import os

import pytest

from parallel_harness.parallel.dynamic_scheduler import DynamicScheduler
from parallel_harness.parallel.environment import lookup
from parallel_harness.parallel.pool import WorkerPool
from parallel_harness.parallel.pool_config import IsolationMode


pytestmark = pytest.mark.requires_fork

calls = 0
setting = 'initial'


def count_call(_: object) -> tuple[int, int]:
    """Increment this process's call counter and report it."""
    global calls  # noqa: PLW0603
    calls += 1
    return os.getpid(), calls


def read_setting(_: object) -> str:
    """Return the worker's view of the module setting."""
    return setting


def greet(name: str) -> str:
    """Greet name with the inherited greeting."""
    return f'{lookup("greeting")}, {name}'


class TestSharedWorkers:
    """Shared workers start from a copy of the coordinator."""

    def test_mode_is_shared(self) -> None:
        """The pool runs in shared mode where fork exists."""
        with WorkerPool(workers=2, mode=IsolationMode.SHARED) as pool:
            assert pool.mode is IsolationMode.SHARED
            assert len(pool.worker_ids) == 2

    def test_worker_mutations_stay_private(self) -> None:
        """Counters advance per worker and never in the coordinator."""
        with WorkerPool(workers=2, mode=IsolationMode.SHARED) as pool:
            result = DynamicScheduler().run(pool, count_call, range(20))

        assert calls == 0
        per_worker: dict[int, int] = {}
        for pid, count in result.unwrap():
            per_worker[pid] = max(per_worker.get(pid, 0), count)
        assert sum(per_worker.values()) == 20

    def test_snapshot_taken_at_start(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Workers see module state as it was at start()."""
        monkeypatch.setattr(f'{__name__}.setting', 'before start')
        with WorkerPool(workers=2, mode=IsolationMode.SHARED) as pool:
            monkeypatch.setattr(f'{__name__}.setting', 'after start')
            seen = {pool.submit(read_setting, None).result() for _ in range(6)}
        assert seen == {'before start'}

    def test_namespace_is_inherited(self) -> None:
        """Bindings given at creation resolve without an export."""
        with WorkerPool(workers=2, mode=IsolationMode.SHARED, namespace={'greeting': 'hello'}) as pool:
            result = DynamicScheduler().run(pool, greet, ['a', 'b', 'c'])
            assert pool.exported_names == frozenset()
        assert result.unwrap() == ['hello, a', 'hello, b', 'hello, c']
