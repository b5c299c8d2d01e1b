"""Tests for the in-process SequentialScheduler baseline."""

from __future__ import annotations

import math

from parallel_harness.errors import TaskFailedError
from parallel_harness.parallel.sequential import SequentialScheduler


class TestSequentialScheduler:
    """Tests for SequentialScheduler."""

    def test_matches_map(self) -> None:
        """Output equals a plain map over the input."""
        items = list(range(20))
        result = SequentialScheduler().run(math.sqrt, items)
        assert result.values == list(map(math.sqrt, items))
        assert result.strategy == 'sequential'
        assert result.ok

    def test_empty_input(self) -> None:
        """Empty input gives empty output and no timings."""
        result = SequentialScheduler().run(math.sqrt, [])
        assert result.values == []
        assert result.errors == ()
        assert result.worker_timings == {}

    def test_single_worker_timing(self) -> None:
        """The calling process is the only worker."""
        result = SequentialScheduler().run(abs, [-1, -2, -3])
        assert len(result.worker_timings) == 1
        assert next(iter(result.worker_timings.values())).items == 3

    def test_failure_keeps_earlier_values(self) -> None:
        """Values before the failure are kept; later positions are missing."""
        result = SequentialScheduler().run(math.sqrt, [1, 4, -1, 9])
        assert result.values == [1.0, 2.0, None, None]
        assert result.failed_indices == (2, 3)
        assert len(result.errors) == 1
        error = result.errors[0]
        assert isinstance(error, TaskFailedError)
        assert error.index == 2
        assert isinstance(error.cause, ValueError)
