"""Configuration loading for parallel-harness.

This module reads configuration from pyproject.toml [tool.parallel-harness]
section and provides sensible defaults when configuration is absent.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
import tomllib
from typing import TYPE_CHECKING, Any

from parallel_harness.errors import InvalidConfigError


if TYPE_CHECKING:
    from pathlib import Path


@dataclass
class HarnessConfig:
    """Configuration for a strategy comparison.

    Attributes:
        workers: Number of worker processes. None means CPU count.
        mode: Isolation mode of the pooled strategies ('isolated' or 'shared').
            None runs both where the platform allows.
        repetitions: Runs per strategy.
        items: Size of the generated input sequence.
        partition: Static partition strategy ('contiguous' or 'round-robin').
        prefetch: Items in flight per worker for dynamic scheduling.
        workload: Name of the demo workload function.
    """

    workers: int | None = None
    mode: str | None = None
    repetitions: int = 10
    items: int = 10_000
    partition: str = 'contiguous'
    prefetch: int = 2
    workload: str = 'sqrt'


_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    'workers': (int, type(None)),
    'mode': (str, type(None)),
    'repetitions': (int,),
    'items': (int,),
    'partition': (str,),
    'prefetch': (int,),
    'workload': (str,),
}


def _validate(data: dict[str, Any]) -> dict[str, Any]:
    known = {f.name for f in fields(HarnessConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        msg = f'Unknown [tool.parallel-harness] keys: {unknown}'
        raise InvalidConfigError(msg)

    for key, value in data.items():
        expected = _FIELD_TYPES[key]
        # bool is an int subclass but never a valid count
        if isinstance(value, bool) or not isinstance(value, expected):
            names = ' or '.join(t.__name__ for t in expected if t is not type(None))
            msg = f'{key} must be {names}, got {value!r}'
            raise InvalidConfigError(msg)
    return dict(data)


def load_config(rootdir: Path) -> HarnessConfig:
    """Load configuration from pyproject.toml.

    Reads the [tool.parallel-harness] section from pyproject.toml in the
    given directory. Returns default configuration if the file or section
    does not exist.

    Args:
        rootdir: Directory containing pyproject.toml.

    Returns:
        HarnessConfig with values from pyproject.toml or defaults.

    Raises:
        InvalidConfigError: If the section holds keys this tool does not know.
    """
    pyproject_path = rootdir / 'pyproject.toml'

    if not pyproject_path.exists():
        return HarnessConfig()

    with pyproject_path.open('rb') as f:
        data = tomllib.load(f)

    tool_config = data.get('tool', {}).get('parallel-harness', {})

    return HarnessConfig(**_validate(tool_config))


def merge_configs(file_config: HarnessConfig, **cli_values: Any) -> HarnessConfig:
    """Merge CLI arguments with file configuration.

    CLI arguments take precedence over pyproject.toml configuration. Values
    of None are treated as not provided.

    Args:
        file_config: Configuration loaded from pyproject.toml.
        **cli_values: HarnessConfig fields given on the command line.

    Returns:
        HarnessConfig with CLI values overriding file config where provided.
    """
    overrides = _validate({key: value for key, value in cli_values.items() if value is not None})
    return replace(file_config, **overrides)
