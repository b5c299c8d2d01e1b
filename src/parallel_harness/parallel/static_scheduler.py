"""Static scheduling: one precomputed chunk per worker.

The input is partitioned once into exactly N chunks (N = pool worker count),
each chunk is submitted as a single task, and the chunk results are written
back by origin index. There is no per-item coordination, which makes static
scheduling the cheaper choice when every item costs about the same.
"""

from __future__ import annotations

from concurrent.futures import as_completed
from concurrent.futures.process import BrokenProcessPool
import logging
import time
from typing import TYPE_CHECKING, Any

from parallel_harness.errors import TaskFailedError
from parallel_harness.parallel.aggregator import ResultAggregator, RunResult
from parallel_harness.parallel.distribution import ContiguousPartition, PartitionStrategy
from parallel_harness.parallel.tasks import run_chunk


if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from parallel_harness.parallel.pool import WorkerPool


logger = logging.getLogger(__name__)


class StaticScheduler:
    """Runs a function over items with a fixed partition.

    A failing item aborts its chunk; the other chunks' values remain valid.
    Nothing is retried.

    Attributes:
        partition: The strategy used to split the input.

    Example:
        >>> with WorkerPool(workers=2) as pool:  # doctest: +SKIP
        ...     StaticScheduler().run(pool, math.sqrt, [1, 4, 9]).values
        [1.0, 2.0, 3.0]
    """

    name = 'static'

    def __init__(self, partition: PartitionStrategy | None = None) -> None:
        """Initialize the scheduler.

        Args:
            partition: Partition strategy. Defaults to ContiguousPartition.
        """
        self.partition = partition if partition is not None else ContiguousPartition()

    def run(self, pool: WorkerPool, fn: Callable[[Any], Any], items: Sequence[Any]) -> RunResult:
        """Apply fn to every item using pool.

        Args:
            pool: A running pool.
            fn: Picklable unary function.
            items: The input sequence.

        Returns:
            RunResult with values in input order.

        Raises:
            PoolNotRunningError: If the pool is not running.
            BrokenProcessPool: If a worker process died.
        """
        start_time = time.perf_counter()
        aggregator = ResultAggregator(total_items=len(items))

        chunks = [chunk for chunk in self.partition.partition(items, pool.workers) if len(chunk)]
        futures = {pool.submit(run_chunk, fn, chunk): chunk for chunk in chunks}
        logger.debug('Submitted %d chunks for %d items', len(futures), len(items))

        for future in as_completed(futures):
            chunk = futures[future]
            try:
                outcome = future.result()
            except BrokenProcessPool:
                raise
            except TaskFailedError as exc:
                logger.warning('Chunk %d failed: %s', chunk.chunk_id, exc)
                aggregator.add_failure(exc, chunk.indices)
                continue
            except Exception as exc:
                # Raised outside the user function, e.g. an unpicklable result
                logger.warning('Chunk %d failed: %s', chunk.chunk_id, exc)
                aggregator.add_failure(TaskFailedError(chunk.indices[0], exc, chunk.chunk_id), chunk.indices)
                continue

            aggregator.add_values(outcome.indices, outcome.values)
            aggregator.record_timing(outcome.timing)

        result = aggregator.build(self.name, time.perf_counter() - start_time)
        logger.info('Static run of %d items finished in %.4fs', len(items), result.elapsed_seconds)
        return result
