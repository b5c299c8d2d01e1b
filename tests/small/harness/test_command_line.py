"""Tests for the parallel-harness command line."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from parallel_harness.cli import EXIT_CONFIG_ERROR, build_parser, main


if TYPE_CHECKING:
    from pathlib import Path


class TestParser:
    """Tests for the argument parser."""

    def test_compare_defaults(self) -> None:
        """Unset options stay None so pyproject.toml can fill them."""
        args = build_parser().parse_args(['compare'])
        assert args.command == 'compare'
        assert args.workers is None
        assert args.mode is None
        assert args.format == 'console'

    def test_compare_options(self) -> None:
        """Options are parsed with their types."""
        args = build_parser().parse_args(
            ['-vv', 'compare', '--workers', '3', '--mode', 'shared', '--items', '20', '--format', 'json']
        )
        assert args.verbose == 2
        assert args.workers == 3
        assert args.mode == 'shared'
        assert args.items == 20
        assert args.format == 'json'

    def test_command_required(self) -> None:
        """Running without a subcommand is a usage error."""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_rejects_unknown_mode(self) -> None:
        """Mode choices are enforced by argparse."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(['compare', '--mode', 'threads'])


class TestConfigErrors:
    """Configuration errors exit with status 2 before any worker starts."""

    def test_zero_workers(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """--workers 0 is rejected."""
        code = main(['compare', '--workers', '0', '--rootdir', str(tmp_path)])
        assert code == EXIT_CONFIG_ERROR
        assert 'workers must be a positive integer' in capsys.readouterr().err

    def test_negative_items(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A negative input size is rejected."""
        code = main(['compare', '--items', '-1', '--rootdir', str(tmp_path)])
        assert code == EXIT_CONFIG_ERROR
        assert 'items must not be negative' in capsys.readouterr().err

    def test_zero_repetitions(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """--repetitions 0 is rejected."""
        code = main(['compare', '--repetitions', '0', '--workers', '2', '--mode', 'isolated', '--rootdir', str(tmp_path)])
        assert code == EXIT_CONFIG_ERROR
        assert 'repetitions' in capsys.readouterr().err

    def test_bad_pyproject_key(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Unknown keys in pyproject.toml are reported."""
        (tmp_path / 'pyproject.toml').write_text('[tool.parallel-harness]\nthreads = 4\n')
        code = main(['compare', '--rootdir', str(tmp_path)])
        assert code == EXIT_CONFIG_ERROR
        assert 'threads' in capsys.readouterr().err

    def test_bad_pyproject_value_type(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A string where a count is expected is reported, not a traceback."""
        (tmp_path / 'pyproject.toml').write_text('[tool.parallel-harness]\nitems = "12"\n')
        code = main(['compare', '--rootdir', str(tmp_path)])
        assert code == EXIT_CONFIG_ERROR
        assert 'items must be int' in capsys.readouterr().err
