"""parallel-harness: run a function across worker processes and compare strategies.

parallel-harness dispatches a pure function over an input sequence using a
pool of worker processes, under a static partition or dynamic work claiming,
keeps results in input order and times the strategies against a sequential
baseline.

Example:
    Compare the strategies on a cheap function::

        $ parallel-harness compare --workers 4 --items 10000 --repetitions 5

    Use the pool directly::

        from parallel_harness.parallel.pool import WorkerPool
        from parallel_harness.parallel.static_scheduler import StaticScheduler

        with WorkerPool(workers=4) as pool:
            result = StaticScheduler().run(pool, math.sqrt, range(1000))
"""

from __future__ import annotations


__version__ = '0.1.0'
__all__ = ['__version__']
