"""Worker pool manager for parallel execution.

This module provides the WorkerPool class that owns a fixed set of worker
processes for one isolation mode.

Note: This module uses ProcessPoolExecutor which internally uses pickle for
inter-process communication. The data being serialized is the caller's own
functions, items and exported bindings - no untrusted external content is
ever deserialized.
"""

from __future__ import annotations

from concurrent.futures import Future, ProcessPoolExecutor
import logging
from typing import TYPE_CHECKING, Any, Self

from parallel_harness.errors import InvalidConfigError, PoolNotRunningError
from parallel_harness.parallel import environment
from parallel_harness.parallel.pool_config import IsolationMode, PoolConfig


if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping


logger = logging.getLogger(__name__)


class WorkerPool:
    """Manages a pool of worker processes.

    The worker pool wraps a ProcessPoolExecutor and provides lifecycle
    management. All N workers are started and warmed up by start(), so the
    worker count never changes while the pool runs and a shared-mode pool
    snapshots the coordinator at start time.

    A stopped pool can be started again. Every start creates fresh workers,
    so bindings must be exported again after a restart.

    Attributes:
        workers: Number of worker processes.
        mode: Effective isolation mode (after any platform fallback).
        worker_ids: Process ids of the running workers.
        is_running: Whether the pool accepts work.

    Example:
        >>> with WorkerPool(workers=4) as pool:  # doctest: +SKIP
        ...     future = pool.submit(math.sqrt, 16)
        ...     future.result()
        4.0
    """

    def __init__(
        self,
        workers: int | None = None,
        mode: IsolationMode | str = IsolationMode.ISOLATED,
        *,
        config: PoolConfig | None = None,
        namespace: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialize the worker pool.

        Args:
            workers: Number of worker processes. Defaults to CPU count.
            mode: Isolation mode of the workers.
            config: Optional PoolConfig. If provided, workers and mode are
                taken from it.
            namespace: Bindings every shared worker inherits at start. In
                isolated mode use export() instead.

        Raises:
            InvalidConfigError: If the settings are invalid.
        """
        if config is None:
            mode = IsolationMode.parse(mode)
            config = PoolConfig(mode=mode) if workers is None else PoolConfig(workers=workers, mode=mode)

        if namespace and config.mode is IsolationMode.ISOLATED:
            msg = 'Isolated workers inherit nothing; export the namespace after start() instead'
            raise InvalidConfigError(msg)

        self._config = config
        self._namespace = dict(namespace) if namespace else {}
        self._mode = config.mode
        self._executor: ProcessPoolExecutor | None = None
        self._worker_ids: tuple[int, ...] = ()
        self._exported: set[str] = set()

    @classmethod
    def from_config(cls, config: PoolConfig, namespace: Mapping[str, Any] | None = None) -> Self:
        """Create a WorkerPool from a PoolConfig.

        Example:
            >>> pool = WorkerPool.from_config(PoolConfig(workers=2))
            >>> pool.workers
            2
        """
        return cls(config=config, namespace=namespace)

    @property
    def config(self) -> PoolConfig:
        """Return the PoolConfig used by this pool."""
        return self._config

    @property
    def workers(self) -> int:
        """Return the number of workers."""
        return self._config.workers

    @property
    def mode(self) -> IsolationMode:
        """Return the effective isolation mode."""
        return self._mode

    @property
    def worker_ids(self) -> tuple[int, ...]:
        """Return the process ids of the running workers."""
        return self._worker_ids

    @property
    def is_running(self) -> bool:
        """Return whether the pool is currently running."""
        return self._executor is not None

    @property
    def exported_names(self) -> frozenset[str]:
        """Return the names exported since the pool last started."""
        return frozenset(self._exported)

    def __enter__(self) -> Self:
        """Enter the context manager, starting the worker pool."""
        return self.start()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit the context manager, shutting down the pool."""
        self.stop()

    def start(self) -> Self:
        """Start and warm up the worker processes.

        Platform support is checked before any worker is created. Calling
        start() on a running pool does nothing.

        Returns:
            The pool itself.

        Raises:
            UnsupportedPlatformError: If shared mode cannot be honoured.
        """
        if self._executor is not None:
            return self

        mode, mp_context = self._config.get_mp_context()
        fell_back = mode is not self._config.mode
        barrier = mp_context.Barrier(self.workers)
        inherited = self._namespace if mode is IsolationMode.SHARED else None

        self._mode = mode
        self._exported = set()
        self._executor = ProcessPoolExecutor(
            max_workers=self.workers,
            mp_context=mp_context,
            initializer=environment._init_worker,
            initargs=(barrier, self._config.export_timeout, inherited),
        )

        try:
            self._warmup_workers()
            if fell_back and self._namespace:
                self.export(self._namespace)
        except BaseException:
            self.stop()
            raise

        logger.info(
            'Started %d %s workers (%s)',
            self.workers,
            mode.value,
            mp_context.get_start_method(),
        )
        return self

    def _warmup_workers(self) -> None:
        """Force all workers to exist before any real work arrives."""
        self._worker_ids = tuple(
            environment.broadcast(self, environment._warmup_worker, timeout=self._config.export_timeout)
        )
        logger.debug('Workers ready: %s', self._worker_ids)

    def stop(self, wait: bool = True) -> None:
        """Shut down the worker processes.

        Safe to call any number of times.

        Args:
            wait: If True, wait for running tasks to finish. If False, cancel
                  pending work immediately.
        """
        if self._executor is None:
            return

        executor, self._executor = self._executor, None
        executor.shutdown(wait=wait, cancel_futures=not wait)
        self._worker_ids = ()
        self._exported = set()
        self._mode = self._config.mode
        logger.info('Stopped worker pool')

    def submit(self, fn: Callable[..., Any], /, *args: Any) -> Future[Any]:
        """Submit one call for execution by an idle worker.

        Args:
            fn: Picklable callable to run in a worker.
            *args: Arguments for fn.

        Returns:
            Future that will contain the call's return value.

        Raises:
            PoolNotRunningError: If the pool is not running.
        """
        if self._executor is None:
            msg = 'WorkerPool is not running. Call start() or use it as a context manager.'
            raise PoolNotRunningError(msg)

        return self._executor.submit(fn, *args)

    def export(self, bindings: Mapping[str, Any]) -> None:
        """Install bindings in every worker. See EnvironmentExporter."""
        environment.EnvironmentExporter().export(self, bindings)

    def _record_export(self, names: Iterable[str]) -> None:
        self._exported.update(names)


def start_pool(
    workers: int,
    mode: IsolationMode | str = IsolationMode.ISOLATED,
    *,
    allow_fallback: bool = False,
    namespace: Mapping[str, Any] | None = None,
) -> WorkerPool:
    """Create and start a pool.

    The caller owns the pool and must stop() it, typically with a ``with``
    block.

    Raises:
        InvalidConfigError: If workers is not a positive integer.
        UnsupportedPlatformError: If shared mode cannot be honoured.
    """
    config = PoolConfig(workers=workers, mode=IsolationMode.parse(mode), allow_fallback=allow_fallback)
    return WorkerPool.from_config(config, namespace=namespace).start()
