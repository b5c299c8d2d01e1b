"""pytest plugin providing a worker pool fixture.

Tests that need real worker processes request the ``worker_pool`` fixture.
The pool is started before the test and always stopped at teardown, even
when the test fails.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from parallel_harness.parallel.pool import WorkerPool
from parallel_harness.parallel.pool_config import IsolationMode, PoolConfig


if TYPE_CHECKING:
    from collections.abc import Iterator


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add command-line options for parallel-harness."""
    group = parser.getgroup('parallel-harness', 'parallel execution harness')
    group.addoption(
        '--harness-workers',
        action='store',
        type=int,
        default=2,
        dest='harness_workers',
        help='Number of workers in the worker_pool fixture (default: 2)',
    )
    group.addoption(
        '--harness-mode',
        action='store',
        choices=[mode.value for mode in IsolationMode],
        default=IsolationMode.ISOLATED.value,
        dest='harness_mode',
        help='Isolation mode of the worker_pool fixture (default: isolated)',
    )


@pytest.fixture
def worker_pool_config(request: pytest.FixtureRequest) -> PoolConfig:
    """PoolConfig built from the command line. Override to customize."""
    return PoolConfig(
        workers=request.config.option.harness_workers,
        mode=IsolationMode.parse(request.config.option.harness_mode),
        allow_fallback=True,
    )


@pytest.fixture
def worker_pool(worker_pool_config: PoolConfig) -> Iterator[WorkerPool]:
    """Started WorkerPool, stopped after the test."""
    with WorkerPool.from_config(worker_pool_config) as pool:
        yield pool
