"""Worker execution context and the EnvironmentExporter.

Every worker process keeps its own binding namespace in this module. An
isolated worker starts with an empty namespace, so anything its tasks need
has to be pushed in with EnvironmentExporter.export(). A shared worker starts
with the snapshot the pool was created with, inherited through fork.

Task code reads the namespace with lookup():

    def add_offset(x):
        return x + lookup('offset')

Pushing to *every* worker of a ProcessPoolExecutor needs a trick, since the
executor hands each call to whichever worker is idle. Each round submits one
call per worker and every call waits on a barrier shared by all N workers, so
no worker can take a second call of the same round.

Note: bindings travel with pickle. The payload is produced by the
coordinator from values the caller exported; nothing untrusted is ever
deserialized.
"""

from __future__ import annotations

from concurrent.futures import wait
import logging
import os
import pickle
from typing import TYPE_CHECKING, Any

from parallel_harness.errors import HarnessError, UnresolvedBindingError


if TYPE_CHECKING:
    from collections.abc import Mapping
    import multiprocessing.synchronize

    from parallel_harness.parallel.pool import WorkerPool


logger = logging.getLogger(__name__)

# Worker-side state. In the coordinator these stay empty.
_bindings: dict[str, Any] = {}
_barrier: multiprocessing.synchronize.Barrier | None = None
_rendezvous_timeout = 30.0


def lookup(name: str) -> Any:  # noqa: ANN401
    """Return the value exported to this worker under name.

    Args:
        name: The binding name.

    Returns:
        The worker's own copy of the exported value.

    Raises:
        UnresolvedBindingError: If name was never exported to this worker.
    """
    try:
        return _bindings[name]
    except KeyError:
        raise UnresolvedBindingError(name) from None


def exported_names() -> frozenset[str]:
    """Return the names currently bound in this worker."""
    return frozenset(_bindings)


def _init_worker(
    barrier: multiprocessing.synchronize.Barrier,
    timeout: float,
    inherited: Mapping[str, Any] | None,
) -> None:  # pragma: no cover - runs in worker processes
    """Prepare a freshly started worker."""
    global _barrier, _rendezvous_timeout  # noqa: PLW0603
    _barrier = barrier
    _rendezvous_timeout = timeout
    _bindings.clear()
    if inherited:
        _bindings.update(inherited)


def _rendezvous() -> int:  # pragma: no cover - runs in worker processes
    """Block until every worker of the pool reached the barrier."""
    if _barrier is not None:
        _barrier.wait(_rendezvous_timeout)
    return os.getpid()


def _warmup_worker() -> int:  # pragma: no cover - runs in worker processes
    """Force the worker to exist and report its process id."""
    return _rendezvous()


def _install_bindings(payload: bytes) -> int:  # pragma: no cover - runs in worker processes
    """Install a pickled binding snapshot and report the worker's process id."""
    _bindings.update(pickle.loads(payload))  # noqa: S301
    return _rendezvous()


def broadcast(pool: WorkerPool, fn: Any, *args: Any, timeout: float | None = None) -> list[int]:  # noqa: ANN401
    """Run fn once in every worker of pool.

    fn must end with a call to _rendezvous() so that each worker takes
    exactly one call.

    Args:
        pool: A running pool.
        fn: Worker-side function returning the worker's process id.
        *args: Arguments for fn.
        timeout: Seconds to wait for the whole round.

    Returns:
        Process ids of the workers that ran fn.

    Raises:
        HarnessError: If not every worker took part before the timeout.
    """
    futures = [pool.submit(fn, *args) for _ in range(pool.workers)]
    done, not_done = wait(futures, timeout=timeout)
    if not_done:
        msg = f'Only {len(done)} of {pool.workers} workers responded within {timeout}s'
        raise HarnessError(msg)
    return [future.result() for future in futures]


class EnvironmentExporter:
    """Pushes named values into every worker of a pool.

    The exporter takes a snapshot of the bindings when export() is called:
    later changes to the caller's objects are not seen by workers, and changes
    a worker makes to its copy are not seen by anyone else.

    No dependency analysis is performed. The caller must export every name a
    task will look up. Functions travel by reference, so they must be
    importable module-level functions.

    Example:
        >>> with WorkerPool(workers=2) as pool:  # doctest: +SKIP
        ...     EnvironmentExporter().export(pool, {'offset': 10})
    """

    def __init__(self, timeout: float | None = None) -> None:
        """Initialize the exporter.

        Args:
            timeout: Seconds to wait for all workers to install the bindings.
                Defaults to the pool's configured export timeout.
        """
        self._timeout = timeout

    def export(self, pool: WorkerPool, bindings: Mapping[str, Any]) -> None:
        """Install bindings in every worker of pool.

        Returns only after all workers confirmed installation, so tasks
        submitted afterwards always see the bindings.

        Args:
            pool: A running pool.
            bindings: Mapping of name to value. Existing names are overwritten.

        Raises:
            PoolNotRunningError: If the pool is not running.
            HarnessError: If a worker did not confirm in time.
        """
        snapshot = dict(bindings)
        if not snapshot:
            return

        payload = pickle.dumps(snapshot)
        timeout = self._timeout if self._timeout is not None else pool.config.export_timeout
        worker_ids = broadcast(pool, _install_bindings, payload, timeout=timeout)
        pool._record_export(snapshot.keys())
        logger.debug('Exported %s to workers %s', sorted(snapshot), worker_ids)
