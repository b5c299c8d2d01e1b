"""Shared pytest configuration and fixtures for parallel-harness tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from parallel_harness.parallel.pool_config import fork_available


# Register markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line('markers', 'small: Fast, isolated unit tests (< 100ms)')
    config.addinivalue_line('markers', 'medium: Integration tests with real worker processes (< 10s)')
    config.addinivalue_line('markers', 'large: End-to-end system tests (< 60s)')
    config.addinivalue_line('markers', 'requires_fork: Test needs the fork start method')


# Auto-mark tests based on directory
def pytest_collection_modifyitems(
    config: pytest.Config,  # noqa: ARG001
    items: list[pytest.Item],
) -> None:
    """Automatically apply markers based on test directory.

    Tests marked requires_fork are skipped where the platform cannot fork.
    """
    skip_fork = pytest.mark.skip(reason='fork start method not available on this platform')
    for item in items:
        # Get the path parts from the item's path
        item_path = Path(str(item.fspath))
        path_parts = item_path.parts

        if 'small' in path_parts:
            item.add_marker(pytest.mark.small)
        elif 'medium' in path_parts:
            item.add_marker(pytest.mark.medium)
        elif 'large' in path_parts:
            item.add_marker(pytest.mark.large)

        if item.get_closest_marker('requires_fork') and not fork_available():
            item.add_marker(skip_fork)
