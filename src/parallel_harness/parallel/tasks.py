"""Task wrappers executed inside worker processes.

The schedulers never submit the user function directly. They submit one of
the wrappers below, which apply the function, time the work and tag any
failure with the origin index of the item that raised.

The outcomes are plain dataclasses of picklable values so they can be sent
back from a worker process.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
import time
from typing import TYPE_CHECKING, Any

from parallel_harness.errors import TaskFailedError


if TYPE_CHECKING:
    from collections.abc import Callable

    from parallel_harness.parallel.distribution import TaskChunk


@dataclass(frozen=True)
class WorkerTiming:
    """Time one worker spent on one task.

    Attributes:
        worker_id: Process id of the worker.
        items: Number of items the task processed.
        busy_seconds: Wall-clock seconds spent inside the task.
    """

    worker_id: int
    items: int
    busy_seconds: float


@dataclass(frozen=True)
class ChunkOutcome:
    """Values produced by one static chunk, in chunk order."""

    chunk_id: int
    indices: tuple[int, ...]
    values: list[Any]
    timing: WorkerTiming


@dataclass(frozen=True)
class ItemOutcome:
    """Value produced for one dynamically claimed item."""

    index: int
    value: Any
    timing: WorkerTiming


def run_chunk(fn: Callable[[Any], Any], chunk: TaskChunk) -> ChunkOutcome:
    """Apply fn to every item of chunk sequentially.

    The first failure aborts the chunk.

    Args:
        fn: The user function.
        chunk: The items to process with their origin indices.

    Returns:
        ChunkOutcome with one value per item.

    Raises:
        TaskFailedError: If fn raised, tagged with the failing item's index.
    """
    start_time = time.perf_counter()
    values: list[Any] = []

    for index, item in zip(chunk.indices, chunk.items, strict=True):
        try:
            values.append(fn(item))
        except Exception as exc:
            raise TaskFailedError(index, exc, chunk.chunk_id) from exc

    timing = WorkerTiming(
        worker_id=os.getpid(),
        items=len(values),
        busy_seconds=time.perf_counter() - start_time,
    )
    return ChunkOutcome(chunk_id=chunk.chunk_id, indices=chunk.indices, values=values, timing=timing)


def run_item(fn: Callable[[Any], Any], index: int, item: Any) -> ItemOutcome:  # noqa: ANN401
    """Apply fn to a single item.

    Raises:
        TaskFailedError: If fn raised, tagged with index.
    """
    start_time = time.perf_counter()
    try:
        value = fn(item)
    except Exception as exc:
        raise TaskFailedError(index, exc) from exc

    timing = WorkerTiming(worker_id=os.getpid(), items=1, busy_seconds=time.perf_counter() - start_time)
    return ItemOutcome(index=index, value=value, timing=timing)
