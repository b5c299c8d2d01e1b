"""Ready-made strategies for the Benchmarker.

Each strategy is a zero-argument closure computing ``map(fn, items)`` one
way. Pooled strategies start a fresh pool on every call and always stop it
before returning, so pool start-up is part of what they measure.
"""

from __future__ import annotations

import math
import time
from typing import TYPE_CHECKING, Any

from parallel_harness.errors import InvalidConfigError
from parallel_harness.parallel.distribution import PARTITIONS
from parallel_harness.parallel.dynamic_scheduler import DynamicScheduler
from parallel_harness.parallel.pool import WorkerPool
from parallel_harness.parallel.pool_config import IsolationMode, PoolConfig, fork_available
from parallel_harness.parallel.sequential import SequentialScheduler
from parallel_harness.parallel.static_scheduler import StaticScheduler


if TYPE_CHECKING:
    from collections.abc import Callable, Sequence


def uneven(x: int) -> int:
    """Return x after a delay that varies with x (0 to 4.5ms)."""
    time.sleep((x % 10) * 0.0005)
    return x


WORKLOADS: dict[str, Callable[[Any], Any]] = {
    'sqrt': math.sqrt,
    'uneven': uneven,
}


def get_workload(name: str) -> Callable[[Any], Any]:
    """Return the demo workload function called name.

    Raises:
        InvalidConfigError: If there is no such workload.
    """
    try:
        return WORKLOADS[name]
    except KeyError:
        msg = f'Unknown workload: {name!r}. Valid workloads are: {sorted(WORKLOADS)}'
        raise InvalidConfigError(msg) from None


def build_strategies(
    fn: Callable[[Any], Any],
    items: Sequence[Any],
    workers: int,
    modes: Sequence[IsolationMode] | None = None,
    partition: str = 'contiguous',
    prefetch: int = 2,
) -> dict[str, Callable[[], Any]]:
    """Build the standard strategy set.

    The set always holds ``vectorized`` (one ``map`` call) and ``sequential``
    (the in-process scheduler), then a static and a dynamic strategy per
    isolation mode. Shared mode is skipped where the platform cannot fork.

    Args:
        fn: Picklable unary function.
        items: The input sequence.
        workers: Pool size of the pooled strategies.
        modes: Isolation modes to include. Defaults to both.
        partition: Partition name for the static strategies.
        prefetch: Items in flight per worker for the dynamic strategies.

    Returns:
        Mapping of strategy name to closure, baseline first.

    Raises:
        InvalidConfigError: If a setting is invalid.
    """
    if partition not in PARTITIONS:
        msg = f'Unknown partition: {partition!r}. Valid partitions are: {sorted(PARTITIONS)}'
        raise InvalidConfigError(msg)

    if modes is None:
        modes = [IsolationMode.ISOLATED, IsolationMode.SHARED]

    static = StaticScheduler(PARTITIONS[partition]())
    dynamic = DynamicScheduler(prefetch=prefetch)
    sequential = SequentialScheduler()

    strategies: dict[str, Callable[[], Any]] = {
        'vectorized': lambda: list(map(fn, items)),
        'sequential': lambda: sequential.run(fn, items).unwrap(),
    }

    for mode in modes:
        if mode is IsolationMode.SHARED and not fork_available():
            continue
        config = PoolConfig(workers=workers, mode=mode)
        strategies[f'static-{mode.value}'] = _pooled(config, lambda pool: static.run(pool, fn, items))
        strategies[f'dynamic-{mode.value}'] = _pooled(config, lambda pool: dynamic.run(pool, fn, items))

    return strategies


def _pooled(config: PoolConfig, body: Callable[[WorkerPool], Any]) -> Callable[[], Any]:
    def strategy() -> Any:  # noqa: ANN401
        with WorkerPool.from_config(config) as pool:
            return body(pool).unwrap()

    return strategy
