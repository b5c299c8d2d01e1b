"""Exception hierarchy for parallel-harness.

Configuration and platform errors are raised before any worker starts.
Binding and task errors are local to one item or chunk and travel back from
worker processes, so every exception that can cross the process boundary
rebuilds itself from its constructor arguments when unpickled.
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from parallel_harness.parallel.aggregator import RunResult


class HarnessError(Exception):
    """Base class for all parallel-harness errors."""


class InvalidConfigError(HarnessError, ValueError):
    """A pool or harness setting is out of range."""


class UnsupportedPlatformError(HarnessError, RuntimeError):
    """Shared (fork) mode was requested on a platform that cannot fork."""


class PoolNotRunningError(HarnessError, RuntimeError):
    """Work was submitted to a pool that is not running."""


class UnresolvedBindingError(HarnessError, NameError):
    """A worker looked up a name that was never exported to it.

    Attributes:
        name: The binding name that could not be resolved.
    """

    def __init__(self, name: str) -> None:
        super().__init__(f'Binding {name!r} was not exported to this worker', name=name)

    def __reduce__(self) -> tuple[type[UnresolvedBindingError], tuple[str]]:
        return (self.__class__, (self.name,))


class TaskFailedError(HarnessError):
    """The user function raised while processing one input item.

    Attributes:
        index: Origin index of the item that failed.
        cause: The exception raised by the user function.
        chunk_id: The chunk the item belonged to (static scheduling only).
    """

    def __init__(self, index: int, cause: BaseException, chunk_id: int | None = None) -> None:
        self.index = index
        self.cause = cause
        self.chunk_id = chunk_id
        where = f'item {index}' if chunk_id is None else f'item {index} of chunk {chunk_id}'
        super().__init__(f'Task failed on {where}: {type(cause).__name__}: {cause}')

    def __reduce__(
        self,
    ) -> tuple[type[TaskFailedError], tuple[int, BaseException, int | None]]:
        return (self.__class__, (self.index, self.cause, self.chunk_id))


class ReductionFailedError(HarnessError):
    """The accumulate function raised while folding a completed value.

    The run is aborted: a reduction missing one value has no meaning.

    Attributes:
        index: Origin index of the value being folded.
        cause: The exception raised by the accumulate function.
    """

    def __init__(self, index: int, cause: BaseException) -> None:
        self.index = index
        self.cause = cause
        super().__init__(f'Reduction failed on item {index}: {type(cause).__name__}: {cause}')


class RunFailedError(HarnessError):
    """A run finished with one or more failed items.

    Raised by RunResult.unwrap() for callers that want all-or-nothing
    semantics. The partial result stays available on the exception.

    Attributes:
        result: The RunResult holding the surviving values and the errors.
    """

    def __init__(self, result: RunResult) -> None:
        self.result = result
        failed = ', '.join(str(error.index) for error in result.errors)
        super().__init__(f'{len(result.errors)} task(s) failed at index {failed}')

    @property
    def failures(self) -> tuple[TaskFailedError, ...]:
        """Return the task failures of the run."""
        return self.result.errors
