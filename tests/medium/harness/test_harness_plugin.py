"""Tests for the pytest plugin's worker_pool fixture."""

from __future__ import annotations

import pytest


class TestWorkerPoolFixture:
    """Tests for the worker_pool fixture in a pytest run."""

    def test_fixture_provides_running_pool(self, pytester: pytest.Pytester) -> None:
        """The fixture yields a started pool of the requested size."""
        pytester.makepyfile(
            """
            import math

            from parallel_harness.parallel.static_scheduler import StaticScheduler


            def test_pool(worker_pool):
                assert worker_pool.is_running
                assert len(worker_pool.worker_ids) == 3
                assert StaticScheduler().run(worker_pool, math.sqrt, [1, 4, 9]).values == [1.0, 2.0, 3.0]
            """
        )
        result = pytester.runpytest_subprocess('--harness-workers', '3')
        result.assert_outcomes(passed=1)

    def test_fixture_stops_pool_after_failure(self, pytester: pytest.Pytester) -> None:
        """The pool is stopped even when the test fails."""
        pytester.makepyfile(
            """
            pools = []


            def test_fails(worker_pool):
                pools.append(worker_pool)
                assert False


            def test_pool_was_stopped():
                assert not pools[0].is_running
            """
        )
        result = pytester.runpytest_subprocess('--harness-workers', '1')
        result.assert_outcomes(passed=1, failed=1)

    def test_options_in_help(self, pytester: pytest.Pytester) -> None:
        """The plugin adds its options to pytest --help."""
        result = pytester.runpytest_subprocess('--help')
        result.stdout.fnmatch_lines(['*--harness-workers*', '*--harness-mode*'])
