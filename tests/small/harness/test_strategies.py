"""Tests for the ready-made benchmark strategies."""

from __future__ import annotations

import math

import pytest

from parallel_harness import strategies
from parallel_harness.errors import InvalidConfigError
from parallel_harness.parallel.pool_config import IsolationMode
from parallel_harness.strategies import build_strategies, get_workload, uneven


class TestWorkloads:
    """Tests for the demo workloads."""

    def test_sqrt(self) -> None:
        """The sqrt workload is math.sqrt."""
        assert get_workload('sqrt') is math.sqrt

    def test_uneven_returns_input(self) -> None:
        """uneven is the identity with a delay."""
        assert uneven(10) == 10
        assert get_workload('uneven') is uneven

    def test_unknown_workload(self) -> None:
        """Unknown names are a configuration error."""
        with pytest.raises(InvalidConfigError, match='Unknown workload'):
            get_workload('cube')


class TestBuildStrategies:
    """Tests for build_strategies."""

    def test_standard_set(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Baselines come first, then static and dynamic per mode."""
        monkeypatch.setattr(strategies, 'fork_available', lambda: True)
        names = list(build_strategies(math.sqrt, [1, 4], workers=2))
        assert names == [
            'vectorized',
            'sequential',
            'static-isolated',
            'dynamic-isolated',
            'static-shared',
            'dynamic-shared',
        ]

    def test_shared_skipped_without_fork(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Shared strategies are left out where the platform cannot fork."""
        monkeypatch.setattr(strategies, 'fork_available', lambda: False)
        names = list(build_strategies(math.sqrt, [1], workers=2))
        assert 'static-shared' not in names
        assert 'dynamic-shared' not in names
        assert 'static-isolated' in names

    def test_single_mode(self) -> None:
        """modes restricts the pooled strategies."""
        names = list(build_strategies(math.sqrt, [1], workers=2, modes=[IsolationMode.ISOLATED]))
        assert names == ['vectorized', 'sequential', 'static-isolated', 'dynamic-isolated']

    def test_in_process_strategies_compute_map(self) -> None:
        """The baselines compute the same values as map."""
        built = build_strategies(math.sqrt, [1, 4, 9], workers=2, modes=[])
        assert built['vectorized']() == [1.0, 2.0, 3.0]
        assert built['sequential']() == [1.0, 2.0, 3.0]

    def test_unknown_partition(self) -> None:
        """Unknown partition names are rejected."""
        with pytest.raises(InvalidConfigError, match='Unknown partition'):
            build_strategies(math.sqrt, [1], workers=2, partition='random')

    @pytest.mark.parametrize('workers', [0, -2])
    def test_invalid_workers(self, workers: int) -> None:
        """A bad pool size fails before anything runs."""
        with pytest.raises(InvalidConfigError):
            build_strategies(math.sqrt, [1], workers=workers, modes=[IsolationMode.ISOLATED])

    def test_invalid_prefetch(self) -> None:
        """A bad prefetch fails before anything runs."""
        with pytest.raises(InvalidConfigError):
            build_strategies(math.sqrt, [1], workers=2, prefetch=0)
