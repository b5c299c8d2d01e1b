"""Partition strategies for static scheduling.

This module provides strategies for splitting an input sequence into one
chunk per worker. Every chunk remembers the origin index of each of its items
so results can be written back in input order whatever the partition.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol


if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(frozen=True)
class TaskChunk:
    """Ordered items assigned to one worker.

    Attributes:
        chunk_id: Position of the chunk in the partition.
        indices: Origin index of each item in the input sequence.
        items: The items themselves, aligned with indices.
    """

    chunk_id: int
    indices: tuple[int, ...]
    items: tuple[Any, ...]

    def __len__(self) -> int:
        return len(self.items)


class PartitionStrategy(Protocol):
    """Protocol for partition strategies.

    Implementations split items into exactly num_workers chunks.
    """

    def partition(self, items: Sequence[Any], num_workers: int) -> list[TaskChunk]:
        """Split items across workers.

        Args:
            items: The input sequence.
            num_workers: Number of worker processes.

        Returns:
            List of num_workers chunks. Some may be empty.
        """
        ...


class ContiguousPartition:
    """Contiguous block partition.

    Every chunk holds len(items) // num_workers consecutive items and the last
    chunk absorbs the remainder. When there are fewer items than workers,
    the first len(items) chunks hold one item each.

    Example:
        >>> chunks = ContiguousPartition().partition(list(range(10)), num_workers=3)
        >>> [list(chunk.items) for chunk in chunks]
        [[0, 1, 2], [3, 4, 5], [6, 7, 8, 9]]
    """

    def partition(self, items: Sequence[Any], num_workers: int) -> list[TaskChunk]:
        """Split items into num_workers contiguous chunks."""
        total = len(items)
        size = total // num_workers
        chunks: list[TaskChunk] = []

        if size == 0:
            for worker_idx in range(num_workers):
                bounds = (worker_idx, worker_idx + 1) if worker_idx < total else (total, total)
                chunks.append(_make_chunk(worker_idx, items, range(*bounds)))
            return chunks

        for worker_idx in range(num_workers):
            start = worker_idx * size
            stop = total if worker_idx == num_workers - 1 else start + size
            chunks.append(_make_chunk(worker_idx, items, range(start, stop)))

        return chunks


class RoundRobinPartition:
    """Simple round-robin partition.

    Assigns item N to worker N % num_workers. Spreads a run of expensive
    neighbouring items over several workers.

    Example:
        >>> chunks = RoundRobinPartition().partition(['a', 'b', 'c', 'd', 'e'], num_workers=3)
        >>> [list(chunk.items) for chunk in chunks]
        [['a', 'd'], ['b', 'e'], ['c']]
    """

    def partition(self, items: Sequence[Any], num_workers: int) -> list[TaskChunk]:
        """Split items round-robin across num_workers chunks."""
        return [
            _make_chunk(worker_idx, items, range(worker_idx, len(items), num_workers))
            for worker_idx in range(num_workers)
        ]


PARTITIONS: dict[str, type[ContiguousPartition] | type[RoundRobinPartition]] = {
    'contiguous': ContiguousPartition,
    'round-robin': RoundRobinPartition,
}


def _make_chunk(chunk_id: int, items: Sequence[Any], indices: range) -> TaskChunk:
    return TaskChunk(
        chunk_id=chunk_id,
        indices=tuple(indices),
        items=tuple(items[i] for i in indices),
    )
