"""Command line interface for parallel-harness.

Usage:
    parallel-harness compare --workers 4 --items 10000 --repetitions 5
    parallel-harness compare --workload uneven --items 400 --format markdown
    python -m parallel_harness compare --mode isolated --format json

Settings not given on the command line come from the
[tool.parallel-harness] section of pyproject.toml in --rootdir.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from parallel_harness.benchmark import Benchmarker
from parallel_harness.config import HarnessConfig, load_config, merge_configs
from parallel_harness.errors import HarnessError, InvalidConfigError, UnsupportedPlatformError
from parallel_harness.parallel.distribution import PARTITIONS
from parallel_harness.parallel.pool_config import IsolationMode, PoolConfig
from parallel_harness.reporting import ConsoleReporter, JsonReporter, generate_markdown_report, get_environment_info
from parallel_harness.strategies import WORKLOADS, build_strategies, get_workload


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_RUN_ERROR = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='parallel-harness',
        description='Compare sequential, static and dynamic parallel execution of a function',
    )
    parser.add_argument('-v', '--verbose', action='count', default=0, help='Increase log verbosity (-v, -vv)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    compare = subparsers.add_parser('compare', help='Benchmark every strategy on a demo workload')
    compare.add_argument('--workers', type=int, default=None, help='Worker processes (default: CPU count)')
    compare.add_argument(
        '--mode',
        choices=[mode.value for mode in IsolationMode],
        default=None,
        help='Only run pooled strategies in this isolation mode (default: both)',
    )
    compare.add_argument('--items', type=int, default=None, help='Size of the input sequence (default: 10000)')
    compare.add_argument('--repetitions', type=int, default=None, help='Runs per strategy (default: 10)')
    compare.add_argument('--workload', choices=sorted(WORKLOADS), default=None, help='Function to apply')
    compare.add_argument('--partition', choices=sorted(PARTITIONS), default=None, help='Static partition strategy')
    compare.add_argument('--prefetch', type=int, default=None, help='Dynamic items in flight per worker')
    compare.add_argument(
        '--format',
        choices=['console', 'markdown', 'json'],
        default='console',
        help='Report format (default: console)',
    )
    compare.add_argument(
        '--rootdir',
        type=Path,
        default=Path.cwd(),
        help='Directory holding pyproject.toml (default: current directory)',
    )
    return parser


def run_compare(config: HarnessConfig, report_format: str) -> None:
    """Run the comparison described by config and print the report.

    Raises:
        InvalidConfigError: If the configuration is invalid.
    """
    workers = config.workers if config.workers is not None else PoolConfig().workers
    if config.items < 0:
        msg = f'items must not be negative, got {config.items}'
        raise InvalidConfigError(msg)

    modes = None if config.mode is None else [IsolationMode.parse(config.mode)]
    fn = get_workload(config.workload)
    items = list(range(1, config.items + 1))

    strategies = build_strategies(
        fn,
        items,
        workers=workers,
        modes=modes,
        partition=config.partition,
        prefetch=config.prefetch,
    )
    logger.info('Comparing %s with %d workers on %d items', ', '.join(strategies), workers, len(items))

    stats = Benchmarker(repetitions=config.repetitions).compare(strategies)

    if report_format == 'json':
        JsonReporter().write_report(stats, baseline='sequential', env_info=get_environment_info())
    elif report_format == 'markdown':
        print(generate_markdown_report(stats, baseline='sequential', env_info=get_environment_info()))
    else:
        ConsoleReporter().write_report(stats, baseline='sequential')


def main(argv: list[str] | None = None) -> int:
    """Run the command line interface.

    Returns:
        Exit code (0 for success, 1 for failed runs, 2 for configuration errors).
    """
    args = build_parser().parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    try:
        config = merge_configs(
            load_config(args.rootdir),
            workers=args.workers,
            mode=args.mode,
            items=args.items,
            repetitions=args.repetitions,
            workload=args.workload,
            partition=args.partition,
            prefetch=args.prefetch,
        )
        run_compare(config, args.format)
    except (InvalidConfigError, UnsupportedPlatformError) as exc:
        print(f'parallel-harness: error: {exc}', file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except HarnessError as exc:
        print(f'parallel-harness: run failed: {exc}', file=sys.stderr)
        return EXIT_RUN_ERROR

    return EXIT_OK


if __name__ == '__main__':  # pragma: no cover
    sys.exit(main())
