"""Reporting module for parallel-harness comparisons.

This module provides reporters for presenting strategy comparisons in
various formats (console, Markdown, JSON), plus the environment description
that heads them.
"""

from parallel_harness.reporting.console import ConsoleReporter
from parallel_harness.reporting.environment import EnvironmentInfo, get_environment_info
from parallel_harness.reporting.json_reporter import JsonReporter
from parallel_harness.reporting.markdown import generate_markdown_report


__all__ = [
    'ConsoleReporter',
    'EnvironmentInfo',
    'JsonReporter',
    'generate_markdown_report',
    'get_environment_info',
]
