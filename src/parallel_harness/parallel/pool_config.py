"""Configuration for the worker pool.

This module provides the PoolConfig class and the isolation modes a pool can
run in:

- **Isolated**: workers are started with the 'spawn' method. Each one is a
  fresh interpreter holding none of the coordinator's names; state reaches it
  only through the EnvironmentExporter.

- **Shared**: workers are started with the 'fork' method. Each one is a
  copy-on-write image of the coordinator taken when the pool starts. Only
  platforms that can fork support this mode.

Example:
    >>> config = PoolConfig(workers=4, mode=IsolationMode.SHARED)
    >>> config.workers
    4
    >>> config.mode.value
    'shared'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
import multiprocessing
import os

from parallel_harness.errors import InvalidConfigError, UnsupportedPlatformError


logger = logging.getLogger(__name__)


class IsolationMode(Enum):
    """Memory isolation of pool workers.

    Attributes:
        ISOLATED: Private interpreter per worker, explicit exports only.
        SHARED: Copy-on-write fork of the coordinator at pool start.
    """

    ISOLATED = 'isolated'
    SHARED = 'shared'

    @classmethod
    def parse(cls, value: str | IsolationMode) -> IsolationMode:
        """Return the mode named by value.

        Raises:
            InvalidConfigError: If value names no mode.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = sorted(mode.value for mode in cls)
            msg = f'Invalid isolation mode: {value!r}. Valid modes are: {valid}'
            raise InvalidConfigError(msg) from None


_START_METHODS = {
    IsolationMode.ISOLATED: 'spawn',
    IsolationMode.SHARED: 'fork',
}


def fork_available() -> bool:
    """Return True if the host can duplicate processes with fork."""
    return 'fork' in multiprocessing.get_all_start_methods()


def resolve_start_method(mode: IsolationMode, *, allow_fallback: bool = False) -> tuple[IsolationMode, str]:
    """Determine the effective mode and start method for a pool.

    Args:
        mode: The requested isolation mode.
        allow_fallback: Degrade an unsupported shared request to isolated
            mode instead of raising.

    Returns:
        Tuple of (effective mode, multiprocessing start method).

    Raises:
        UnsupportedPlatformError: If shared mode is requested, the platform
            cannot fork and fallback is not allowed.
    """
    if mode is IsolationMode.SHARED and not fork_available():
        if not allow_fallback:
            msg = 'Shared mode needs the fork start method, which this platform does not provide'
            raise UnsupportedPlatformError(msg)
        logger.warning('fork is unavailable on this platform, falling back to isolated workers')
        mode = IsolationMode.ISOLATED

    return mode, _START_METHODS[mode]


def _default_workers() -> int:
    """Return the default number of workers."""
    return os.cpu_count() or 4


@dataclass(frozen=True, eq=True)
class PoolConfig:
    """Configuration for a WorkerPool.

    Attributes:
        workers: Number of worker processes. Defaults to CPU count.
        mode: Isolation mode of the workers.
        allow_fallback: Use isolated workers when shared mode is unavailable.
        export_timeout: Seconds to wait for every worker to take part in a
            warm-up or an export round.

    Example:
        >>> config = PoolConfig(workers=2)
        >>> config.mode is IsolationMode.ISOLATED
        True
    """

    workers: int = field(default_factory=_default_workers)
    mode: IsolationMode = IsolationMode.ISOLATED
    allow_fallback: bool = False
    export_timeout: float = 30.0

    def __post_init__(self) -> None:
        """Validate configuration values.

        Raises:
            InvalidConfigError: If any configuration value is invalid.
        """
        if not isinstance(self.mode, IsolationMode):
            object.__setattr__(self, 'mode', IsolationMode.parse(self.mode))

        if isinstance(self.workers, bool) or not isinstance(self.workers, int) or self.workers < 1:
            msg = f'workers must be a positive integer, got {self.workers!r}'
            raise InvalidConfigError(msg)

        if self.export_timeout <= 0:
            msg = f'export_timeout must be positive, got {self.export_timeout}'
            raise InvalidConfigError(msg)

    def get_mp_context(self) -> tuple[IsolationMode, multiprocessing.context.BaseContext]:
        """Create the multiprocessing context for this configuration.

        Returns:
            Tuple of (effective mode, multiprocessing context).

        Raises:
            UnsupportedPlatformError: If shared mode cannot be honoured.
        """
        mode, method = resolve_start_method(self.mode, allow_fallback=self.allow_fallback)
        return mode, multiprocessing.get_context(method)
