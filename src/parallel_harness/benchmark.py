"""Wall-clock comparison of execution strategies.

A strategy is an opaque zero-argument closure. Parallel strategies start
their own pool and must stop it before returning, normally with a ``with``
block. The Benchmarker imposes no timeout: a strategy that hangs blocks the
whole comparison.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import statistics
import time
from typing import TYPE_CHECKING, Any

from parallel_harness.errors import InvalidConfigError


if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BenchmarkRun:
    """Timing of a single strategy run.

    Attributes:
        strategy: Name of the strategy.
        repetition: Which run this is, starting at 1.
        started: perf_counter value at start.
        finished: perf_counter value at end.
    """

    strategy: str
    repetition: int
    started: float
    finished: float

    @property
    def duration(self) -> float:
        """Return the run's wall-clock duration in seconds."""
        return self.finished - self.started


@dataclass(frozen=True)
class DurationStats:
    """Summary statistics for the runs of one strategy, in seconds.

    Attributes:
        strategy: Name of the strategy.
        count: Number of runs.
        mean: Mean duration.
        median: Median duration.
        min: Shortest duration.
        max: Longest duration.
        stdev: Sample standard deviation (0 for a single run).
    """

    strategy: str
    count: int
    mean: float
    median: float
    min: float
    max: float
    stdev: float = 0.0

    @classmethod
    def from_durations(cls, strategy: str, durations: Sequence[float]) -> DurationStats:
        """Summarize a non-empty list of durations."""
        return cls(
            strategy=strategy,
            count=len(durations),
            mean=statistics.mean(durations),
            median=statistics.median(durations),
            min=min(durations),
            max=max(durations),
            stdev=statistics.stdev(durations) if len(durations) > 1 else 0.0,
        )

    def speedup_over(self, baseline: DurationStats) -> float:
        """Return how many times faster this strategy is than baseline."""
        return baseline.mean / self.mean if self.mean > 0 else 0.0


class Benchmarker:
    """Runs named strategies repeatedly and summarizes their durations.

    Attributes:
        repetitions: Default number of runs per strategy.
        runs: Every BenchmarkRun recorded by the last compare().

    Example:
        >>> stats = Benchmarker(repetitions=3).compare({'noop': lambda: None})
        >>> stats['noop'].count
        3
    """

    def __init__(self, repetitions: int = 10) -> None:
        """Initialize the benchmarker.

        Raises:
            InvalidConfigError: If repetitions is not positive.
        """
        _check_repetitions(repetitions)
        self.repetitions = repetitions
        self.runs: list[BenchmarkRun] = []

    def compare(
        self,
        strategies: Mapping[str, Callable[[], Any]],
        repetitions: int | None = None,
    ) -> dict[str, DurationStats]:
        """Run every strategy and summarize the durations.

        Strategies run in mapping order, all repetitions of one strategy
        before the next. A strategy that raises aborts the comparison.

        Args:
            strategies: Mapping of name to zero-argument closure.
            repetitions: Runs per strategy. Defaults to self.repetitions.

        Returns:
            Mapping of name to DurationStats, in strategy order.

        Raises:
            InvalidConfigError: If repetitions is not positive.
        """
        repetitions = self.repetitions if repetitions is None else repetitions
        _check_repetitions(repetitions)
        self.runs = []

        summaries: dict[str, DurationStats] = {}
        for name, strategy in strategies.items():
            runs = [self._time(name, run, strategy) for run in range(1, repetitions + 1)]
            self.runs.extend(runs)
            summaries[name] = DurationStats.from_durations(name, [r.duration for r in runs])
            logger.info('%s: mean %.4fs over %d runs', name, summaries[name].mean, repetitions)

        return summaries

    @staticmethod
    def _time(name: str, repetition: int, strategy: Callable[[], Any]) -> BenchmarkRun:
        started = time.perf_counter()
        try:
            strategy()
        except Exception:
            logger.exception('Strategy %s failed on run %d', name, repetition)
            raise
        finished = time.perf_counter()
        logger.debug('%s run %d took %.4fs', name, repetition, finished - started)
        return BenchmarkRun(strategy=name, repetition=repetition, started=started, finished=finished)


def _check_repetitions(repetitions: int) -> None:
    if isinstance(repetitions, bool) or not isinstance(repetitions, int) or repetitions < 1:
        msg = f'repetitions must be a positive integer, got {repetitions!r}'
        raise InvalidConfigError(msg)
