"""Non-parallel baseline with the same result shape as the schedulers."""

from __future__ import annotations

import logging
import os
import time
from typing import TYPE_CHECKING, Any

from parallel_harness.errors import TaskFailedError
from parallel_harness.parallel.aggregator import ResultAggregator, RunResult
from parallel_harness.parallel.tasks import WorkerTiming


if TYPE_CHECKING:
    from collections.abc import Callable, Sequence


logger = logging.getLogger(__name__)


class SequentialScheduler:
    """Applies a function to every item in the calling process.

    The whole input behaves like a single chunk: the first failure stops the
    run, values computed before it are kept and every later position is
    reported missing.
    """

    name = 'sequential'

    def run(self, fn: Callable[[Any], Any], items: Sequence[Any]) -> RunResult:
        """Apply fn to every item in order."""
        start_time = time.perf_counter()
        aggregator = ResultAggregator(total_items=len(items))

        processed = 0
        for index, item in enumerate(items):
            try:
                value = fn(item)
            except Exception as exc:
                error = TaskFailedError(index, exc, chunk_id=0)
                logger.warning('Sequential run failed: %s', error)
                aggregator.add_failure(error, range(index, len(items)))
                break
            aggregator.add_value(index, value)
            processed += 1

        elapsed = time.perf_counter() - start_time
        if items:
            aggregator.record_timing(WorkerTiming(worker_id=os.getpid(), items=processed, busy_seconds=elapsed))
        return aggregator.build(self.name, elapsed)
