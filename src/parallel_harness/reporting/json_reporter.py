"""JSON reporter for strategy comparisons.

Produces machine-readable JSON output for automated analysis.
"""

from __future__ import annotations

from dataclasses import asdict
import json
import sys
from typing import TYPE_CHECKING, Any, TextIO


if TYPE_CHECKING:
    from collections.abc import Mapping

    from parallel_harness.benchmark import DurationStats
    from parallel_harness.reporting.environment import EnvironmentInfo


class JsonReporter:
    """Reporter that produces JSON output.

    JSON structure:
        {
            "environment": {"platform": "Linux 6.1", "cpu_count": 8, ...},
            "baseline": "sequential",
            "strategies": {
                "sequential": {
                    "count": 10, "mean": 0.0021, "median": 0.002,
                    "min": 0.002, "max": 0.0024, "stdev": 0.0001,
                    "speedup": 1.0
                },
                ...
            }
        }

    Durations are in seconds.
    """

    def to_json(
        self,
        stats: Mapping[str, DurationStats],
        baseline: str | None = None,
        env_info: EnvironmentInfo | None = None,
    ) -> str:
        """Convert comparison statistics to a JSON string.

        Args:
            stats: Summary per strategy name.
            baseline: Strategy the speedups are relative to. Defaults to the
                first strategy.
            env_info: Optional environment description.

        Returns:
            Pretty-printed JSON string.
        """
        return json.dumps(self._build_report_data(stats, baseline, env_info), indent=2)

    def write_report(
        self,
        stats: Mapping[str, DurationStats],
        baseline: str | None = None,
        env_info: EnvironmentInfo | None = None,
        output: TextIO | None = None,
    ) -> None:
        """Write the comparison as JSON to a text stream (stdout by default)."""
        (output or sys.stdout).write(self.to_json(stats, baseline, env_info) + '\n')

    def _build_report_data(
        self,
        stats: Mapping[str, DurationStats],
        baseline: str | None,
        env_info: EnvironmentInfo | None,
    ) -> dict[str, Any]:
        if stats and baseline not in stats:
            baseline = next(iter(stats))

        data: dict[str, Any] = {
            'baseline': baseline if stats else None,
            'strategies': {name: self._build_entry(s, stats[baseline]) for name, s in stats.items()}
            if stats
            else {},
        }
        if env_info is not None:
            data['environment'] = asdict(env_info)
        return data

    def _build_entry(self, stats: DurationStats, baseline: DurationStats) -> dict[str, Any]:
        return {
            'count': stats.count,
            'mean': stats.mean,
            'median': stats.median,
            'min': stats.min,
            'max': stats.max,
            'stdev': stats.stdev,
            'speedup': stats.speedup_over(baseline),
        }
