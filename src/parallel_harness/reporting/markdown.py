"""Markdown rendering of a strategy comparison."""

from __future__ import annotations

from typing import TYPE_CHECKING

from parallel_harness.reporting.console import format_duration


if TYPE_CHECKING:
    from collections.abc import Mapping

    from parallel_harness.benchmark import DurationStats
    from parallel_harness.reporting.environment import EnvironmentInfo


def generate_markdown_report(
    stats: Mapping[str, DurationStats],
    baseline: str | None = None,
    env_info: EnvironmentInfo | None = None,
) -> str:
    """Generate a markdown report from comparison statistics.

    Args:
        stats: Summary per strategy name.
        baseline: Strategy the speedups are relative to. Defaults to the
            first strategy.
        env_info: Optional environment description for the header.

    Returns:
        Markdown formatted report.
    """
    lines = ['# parallel-harness Comparison', '']

    if env_info is not None:
        lines.extend(
            [
                f'**Date**: {env_info.timestamp}',
                f'**Platform**: {env_info.platform}',
                f'**Python**: {env_info.python_version}',
                f'**CPU**: {env_info.cpu_info} ({env_info.cpu_count} cores)',
                f'**Memory**: {env_info.memory_gb} GB',
                f'**Start methods**: {", ".join(env_info.start_methods)}',
                '',
            ]
        )

    if not stats:
        lines.append('No strategies compared.')
        return '\n'.join(lines)

    baseline = baseline if baseline in stats else next(iter(stats))
    base = stats[baseline]

    lines.extend(
        [
            '## Summary',
            '',
            '| Strategy | Runs | Mean | Median | Min | Max | Speedup |',
            '|----------|------|------|--------|-----|-----|---------|',
        ]
    )
    for name, s in stats.items():
        lines.append(
            f'| {name} | {s.count} | {format_duration(s.mean)} | {format_duration(s.median)} | '
            f'{format_duration(s.min)} | {format_duration(s.max)} | {s.speedup_over(base):.2f}x |'
        )

    lines.extend(
        [
            '',
            f'**Baseline**: {baseline} = {format_duration(base.mean)}',
            '',
            '## Interpreting Results',
            '',
            '- **Mean / Median**: Wall-clock time per run, pool start and stop included',
            '- **Min / Max**: Spread between runs (close together means a stable measurement)',
            '- **Speedup**: How many times faster than the baseline (below 1 is slower)',
        ]
    )
    return '\n'.join(lines)
