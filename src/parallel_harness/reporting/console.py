"""Console reporter for strategy comparisons.

Produces human-readable output for terminal display: one row per strategy
with its duration statistics and its speedup over the baseline.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO


if TYPE_CHECKING:
    from collections.abc import Mapping

    from parallel_harness.benchmark import DurationStats


class ConsoleReporter:
    """Reporter that writes a comparison table to the console.

    Produces output in the following format:

        ================= parallel-harness comparison =================

        strategy            runs      mean    median       min       max  speedup
        sequential            10   2.10ms    2.05ms    2.00ms    2.40ms    1.00x
        static-isolated       10  48.31ms   47.90ms   45.12ms   53.00ms    0.04x

        Baseline: sequential
        ===============================================================

    Attributes:
        output: The file-like object to write to.
    """

    BORDER_CHAR = '='
    BORDER_WIDTH = 78

    def __init__(self, output: TextIO | None = None) -> None:
        """Initialize the console reporter.

        Args:
            output: File-like object to write to. Defaults to sys.stdout.
        """
        self.output = output or sys.stdout

    def write_report(self, stats: Mapping[str, DurationStats], baseline: str | None = None) -> None:
        """Write the comparison report to the output.

        Args:
            stats: Summary per strategy name, in display order.
            baseline: Strategy the speedups are relative to. Defaults to the
                first strategy.
        """
        self._write_header()
        self._write_blank_line()

        if not stats:
            self._write_line('No strategies compared.')
        else:
            baseline = baseline if baseline in stats else next(iter(stats))
            self._write_table(stats, stats[baseline])
            self._write_blank_line()
            self._write_line(f'Baseline: {baseline}')

        self._write_footer()

    def _write_header(self) -> None:
        """Write the report header."""
        title = ' parallel-harness comparison '
        border_len = (self.BORDER_WIDTH - len(title)) // 2
        self._write_line(f'{self.BORDER_CHAR * border_len}{title}{self.BORDER_CHAR * border_len}')

    def _write_footer(self) -> None:
        """Write the report footer."""
        self._write_line(self.BORDER_CHAR * self.BORDER_WIDTH)

    def _write_table(self, stats: Mapping[str, DurationStats], baseline: DurationStats) -> None:
        width = max(len('strategy'), *(len(name) for name in stats))
        self._write_line(
            f'{"strategy":<{width}}  {"runs":>4}  {"mean":>9}  {"median":>9}  {"min":>9}  {"max":>9}  {"speedup":>7}'
        )
        for name, s in stats.items():
            self._write_line(
                f'{name:<{width}}  {s.count:>4}  {format_duration(s.mean):>9}  '
                f'{format_duration(s.median):>9}  {format_duration(s.min):>9}  '
                f'{format_duration(s.max):>9}  {s.speedup_over(baseline):>6.2f}x'
            )

    def _write_blank_line(self) -> None:
        """Write a blank line."""
        self.output.write('\n')

    def _write_line(self, text: str) -> None:
        """Write a line of text followed by newline."""
        self.output.write(text + '\n')


def format_duration(seconds: float) -> str:
    """Format a duration with a readable unit.

    Example:
        >>> format_duration(0.0025)
        '2.50ms'
        >>> format_duration(1.5)
        '1.500s'
    """
    if seconds >= 1:
        return f'{seconds:.3f}s'
    if seconds >= 1e-3:
        return f'{seconds * 1e3:.2f}ms'
    return f'{seconds * 1e6:.1f}us'
