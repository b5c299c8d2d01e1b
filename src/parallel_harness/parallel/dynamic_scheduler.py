"""Dynamic scheduling: workers claim items on demand.

Pending items wait in a FIFO ordered by input index. At most
``pool.workers * prefetch`` items are handed to the executor at a time; each
time one completes, the next pending item is released, and whichever worker
becomes idle first claims it. Slow items therefore never hold up a
precomputed share of the input, at the price of one round trip per item.

Use StaticScheduler when per-item cost is uniform and large. Use
DynamicScheduler when per-item cost varies. For trivial functions neither
beats a plain in-process loop: the fixed cost of shipping work to another
process dominates.
"""

from __future__ import annotations

from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, wait
from concurrent.futures.process import BrokenProcessPool
import logging
import time
from typing import TYPE_CHECKING, Any

from parallel_harness.errors import HarnessError, InvalidConfigError, ReductionFailedError, TaskFailedError
from parallel_harness.parallel.aggregator import _NO_INITIAL, ResultAggregator, RunResult
from parallel_harness.parallel.tasks import run_item


if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from parallel_harness.parallel.pool import WorkerPool


logger = logging.getLogger(__name__)


class DynamicScheduler:
    """Runs a function over items with on-demand work claiming.

    A failing item is reported with its index; its peers keep running and
    nothing is retried.

    Attributes:
        prefetch: Items in flight per worker.

    Example:
        >>> with WorkerPool(workers=2) as pool:  # doctest: +SKIP
        ...     DynamicScheduler().run(pool, math.sqrt, [1, 4, 9], accumulate=operator.add, initial=0).reduced
        6.0
    """

    name = 'dynamic'

    def __init__(self, prefetch: int = 2) -> None:
        """Initialize the scheduler.

        Args:
            prefetch: Items in flight per worker. Higher values hide the
                round-trip latency, lower values balance load more finely.

        Raises:
            InvalidConfigError: If prefetch is not positive.
        """
        if prefetch < 1:
            msg = f'prefetch must be positive, got {prefetch}'
            raise InvalidConfigError(msg)
        self.prefetch = prefetch

    def run(
        self,
        pool: WorkerPool,
        fn: Callable[[Any], Any],
        items: Sequence[Any],
        accumulate: Callable[[Any, Any], Any] | None = None,
        initial: Any = _NO_INITIAL,  # noqa: ANN401
    ) -> RunResult:
        """Apply fn to every item using pool.

        Args:
            pool: A running pool.
            fn: Picklable unary function.
            items: The input sequence.
            accumulate: Optional reduction ``accumulate(acc, value)`` applied
                to values in completion order. It should be associative and
                commutative.
            initial: Starting value of the reduction. Without one, the first
                completed value seeds it.

        Returns:
            RunResult with values in input order, or with the reduced value
            when accumulate is given.

        Raises:
            PoolNotRunningError: If the pool is not running.
            ReductionFailedError: If accumulate raised. Work still in flight
                is cancelled or waited for before the error is raised.
            BrokenProcessPool: If a worker process died.
        """
        start_time = time.perf_counter()
        aggregator = ResultAggregator(total_items=len(items), accumulate=accumulate, initial=initial)

        pending = deque(enumerate(items))
        in_flight: dict[Future[Any], int] = {}
        window = pool.workers * self.prefetch

        def release() -> None:
            while pending and len(in_flight) < window:
                index, item = pending.popleft()
                in_flight[pool.submit(run_item, fn, index, item)] = index

        release()
        try:
            while in_flight:
                done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in done:
                    self._collect(future, in_flight.pop(future), aggregator)
                release()
        finally:
            if in_flight:
                pending.clear()
                for future in in_flight:
                    future.cancel()
                wait(in_flight)
                logger.warning('Dynamic run aborted with %d items in flight', len(in_flight))

        result = aggregator.build(self.name, time.perf_counter() - start_time)
        logger.info('Dynamic run of %d items finished in %.4fs', len(items), result.elapsed_seconds)
        return result

    @staticmethod
    def _collect(future: Future[Any], index: int, aggregator: ResultAggregator) -> None:
        try:
            outcome = future.result()
        except BrokenProcessPool:
            raise
        except TaskFailedError as exc:
            logger.warning('Item %d failed: %s', index, exc)
            aggregator.add_failure(exc)
            return
        except Exception as exc:
            logger.warning('Item %d failed: %s', index, exc)
            aggregator.add_failure(TaskFailedError(index, exc))
            return

        try:
            aggregator.add_value(outcome.index, outcome.value)
        except HarnessError:
            raise
        except Exception as exc:
            raise ReductionFailedError(outcome.index, exc) from exc
        aggregator.record_timing(outcome.timing)
