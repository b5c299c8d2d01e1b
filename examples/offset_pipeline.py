#!/usr/bin/env python
"""Example: exporting state to isolated workers and comparing schedulers.

This script shows the pieces of parallel-harness working together:

    1. Start an isolated pool and export the values its tasks look up
    2. Run the same function with static and dynamic scheduling
    3. Fold the results with a reduction instead of collecting them
    4. Time custom strategies with the Benchmarker

Usage:
    python examples/offset_pipeline.py
    python examples/offset_pipeline.py --workers 4 --items 2000

Worker functions must live at module level so worker processes can import
them, and the entry point must be guarded by ``if __name__ == '__main__'``.
"""

from __future__ import annotations

import argparse
import operator
import sys

from parallel_harness.benchmark import Benchmarker
from parallel_harness.parallel.dynamic_scheduler import DynamicScheduler
from parallel_harness.parallel.environment import lookup
from parallel_harness.parallel.pool import WorkerPool
from parallel_harness.parallel.static_scheduler import StaticScheduler
from parallel_harness.reporting import ConsoleReporter


def scaled_offset(x: int) -> int:
    """Scale x and add the exported offset."""
    return x * lookup('scale') + lookup('offset')


def run_once(pool: WorkerPool, items: list[int]) -> None:
    """Run both schedulers once and print what they computed."""
    static = StaticScheduler().run(pool, scaled_offset, items)
    dynamic = DynamicScheduler().run(pool, scaled_offset, items)
    assert static.unwrap() == dynamic.unwrap()
    print(f'first values: {static.values[:5]}')

    total = DynamicScheduler().run(pool, scaled_offset, items, accumulate=operator.add, initial=0)
    print(f'sum of values: {total.unwrap()}')

    for stats in dynamic.worker_timings.values():
        print(f'  worker {stats.worker_id}: {stats.items} items in {stats.busy_seconds:.4f}s')


def main(argv: list[str] | None = None) -> int:
    """Run the example."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument('--workers', type=int, default=2)
    parser.add_argument('--items', type=int, default=1000)
    args = parser.parse_args(argv)

    items = list(range(args.items))

    with WorkerPool(workers=args.workers) as pool:
        pool.export({'scale': 3, 'offset': 7})
        run_once(pool, items)

        stats = Benchmarker(repetitions=5).compare(
            {
                'in-process': lambda: [x * 3 + 7 for x in items],
                'static': lambda: StaticScheduler().run(pool, scaled_offset, items).unwrap(),
                'dynamic': lambda: DynamicScheduler().run(pool, scaled_offset, items).unwrap(),
            }
        )

    ConsoleReporter().write_report(stats, baseline='in-process')
    return 0


if __name__ == '__main__':
    sys.exit(main())
