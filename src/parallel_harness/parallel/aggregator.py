"""Result aggregation for parallel runs.

This module provides the ResultAggregator class that collects values from
workers into slots indexed by origin position, and the RunResult it produces.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
import threading
from typing import Any

from parallel_harness.errors import HarnessError, RunFailedError, TaskFailedError
from parallel_harness.parallel.tasks import WorkerTiming


_EMPTY = object()
_NO_INITIAL = object()


@dataclass(frozen=True)
class WorkerStats:
    """Work done by one worker over a whole run.

    Attributes:
        worker_id: Process id of the worker.
        tasks: Number of tasks (chunks or items) it ran.
        items: Number of items it processed successfully.
        busy_seconds: Total wall-clock seconds spent in tasks.
    """

    worker_id: int
    tasks: int
    items: int
    busy_seconds: float


@dataclass(frozen=True)
class RunResult:
    """Outcome of one scheduler run.

    Values are aligned with the input sequence regardless of the order in
    which workers completed. Positions listed in failed_indices hold None.

    Attributes:
        strategy: Name of the scheduler that produced the result.
        values: Output per input position.
        errors: Failures, sorted by index.
        elapsed_seconds: Wall-clock duration of the run.
        worker_timings: Per-worker breakdown keyed by process id.
        failed_indices: Input positions without a value.
        reduced: Accumulated value when a reduction was applied.
        reduction_applied: Whether the run folded values instead of
            collecting them.
    """

    strategy: str
    values: list[Any]
    errors: tuple[TaskFailedError, ...] = ()
    elapsed_seconds: float = 0.0
    worker_timings: dict[int, WorkerStats] = field(default_factory=dict)
    failed_indices: tuple[int, ...] = ()
    reduced: Any = None
    reduction_applied: bool = False

    @property
    def ok(self) -> bool:
        """Return True if every item produced a value."""
        return not self.errors

    def unwrap(self) -> Any:  # noqa: ANN401
        """Return the complete output of the run.

        Returns:
            The reduced value if a reduction was applied, else the ordered
            list of values.

        Raises:
            RunFailedError: If any item failed.
        """
        if self.errors:
            raise RunFailedError(self)
        return self.reduced if self.reduction_applied else self.values


class ResultAggregator:
    """Collects results from workers into an indexed buffer.

    Thread-safe. Each slot may be written once; a second write to the same
    position is a scheduling bug and raises. When an accumulate function is
    given, values are folded as they arrive instead of being stored.

    Attributes:
        total_items: Number of items in the run.
        completed: Number of positions resolved so far, failed or not.

    Example:
        >>> aggregator = ResultAggregator(total_items=2)
        >>> aggregator.add_value(1, 'b')
        >>> aggregator.add_value(0, 'a')
        >>> aggregator.build('doc', elapsed_seconds=0.0).values
        ['a', 'b']
    """

    def __init__(
        self,
        total_items: int,
        accumulate: Callable[[Any, Any], Any] | None = None,
        initial: Any = _NO_INITIAL,  # noqa: ANN401
    ) -> None:
        """Initialize the result aggregator.

        Args:
            total_items: Number of items in the run.
            accumulate: Optional reduction applied to each value on arrival.
            initial: Starting value of the reduction. Without one, the first
                value to arrive seeds the reduction, as with functools.reduce.
        """
        self._total_items = total_items
        self._accumulate = accumulate
        self._reduced = initial
        self._slots: list[Any] = [_EMPTY] * total_items
        self._resolved = [False] * total_items
        self._completed = 0
        self._errors: list[TaskFailedError] = []
        self._failed: set[int] = set()
        self._timings: dict[int, list[WorkerTiming]] = {}
        self._lock = threading.Lock()

    @property
    def total_items(self) -> int:
        """Return the number of items in the run."""
        return self._total_items

    @property
    def completed(self) -> int:
        """Return the number of resolved positions."""
        with self._lock:
            return self._completed

    def get_progress(self) -> tuple[int, int]:
        """Get progress as (completed, total)."""
        with self._lock:
            return (self._completed, self._total_items)

    def add_value(self, index: int, value: Any) -> None:  # noqa: ANN401
        """Store the value computed for position index.

        When accumulate raises, the position stays unresolved and the
        reduction keeps its previous value.

        Raises:
            HarnessError: If the position was already resolved.
        """
        with self._lock:
            self._check_unresolved(index)
            if self._accumulate is None:
                self._slots[index] = value
            elif self._reduced is _NO_INITIAL:
                self._reduced = value
            else:
                self._reduced = self._accumulate(self._reduced, value)
            self._claim(index)

    def add_values(self, indices: Iterable[int], values: Iterable[Any]) -> None:
        """Store the values of a whole chunk."""
        for index, value in zip(indices, values, strict=True):
            self.add_value(index, value)

    def add_failure(self, error: TaskFailedError, indices: Iterable[int] | None = None) -> None:
        """Record a failure.

        Args:
            error: The failure, naming the index of the item that raised.
            indices: Every position left without a value by the failure.
                Defaults to the failing index alone.
        """
        lost = list(indices) if indices is not None else [error.index]
        with self._lock:
            for index in lost:
                self._claim(index)
                self._failed.add(index)
            self._errors.append(error)

    def record_timing(self, timing: WorkerTiming) -> None:
        """Record the time a worker spent on one task."""
        with self._lock:
            self._timings.setdefault(timing.worker_id, []).append(timing)

    def build(self, strategy: str, elapsed_seconds: float) -> RunResult:
        """Produce the RunResult of the run.

        Raises:
            HarnessError: If some positions were never resolved.
        """
        with self._lock:
            if self._completed != self._total_items:
                msg = f'Run incomplete: {self._completed} of {self._total_items} positions resolved'
                raise HarnessError(msg)

            values = [] if self._accumulate is not None else [None if v is _EMPTY else v for v in self._slots]
            worker_timings = {
                worker_id: WorkerStats(
                    worker_id=worker_id,
                    tasks=len(timings),
                    items=sum(t.items for t in timings),
                    busy_seconds=sum(t.busy_seconds for t in timings),
                )
                for worker_id, timings in self._timings.items()
            }
            return RunResult(
                strategy=strategy,
                values=values,
                errors=tuple(sorted(self._errors, key=lambda e: e.index)),
                elapsed_seconds=elapsed_seconds,
                worker_timings=worker_timings,
                failed_indices=tuple(sorted(self._failed)),
                reduced=None if self._accumulate is None or self._reduced is _NO_INITIAL else self._reduced,
                reduction_applied=self._accumulate is not None,
            )

    def _check_unresolved(self, index: int) -> None:
        """Refuse a second write. Must be called with lock held."""
        if self._resolved[index]:
            msg = f'Result slot {index} written twice'
            raise HarnessError(msg)

    def _claim(self, index: int) -> None:
        """Mark a position resolved. Must be called with lock held."""
        self._check_unresolved(index)
        self._resolved[index] = True
        self._completed += 1
