"""Distributed reduction substrate.

jaxglm needs exactly three things from a cluster: split examples into
independent partitions, broadcast a read-only vector to every partition,
and tree-reduce partition-local results. ``ReductionBackend`` names those
capabilities; ``LocalBackend`` provides them in-process, optionally running
partitions on a thread pool.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Protocol, Sequence, TypeVar

import jax.numpy as jnp
import numpy as np
from jax import Array

from jaxglm.data.example import LabeledExample
from jaxglm.distributed.aggregate import add_partials, tree_aggregate

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReductionBackend(Protocol):
    """Protocol for the distributed execution substrate."""

    def partition(
        self, examples: Sequence[LabeledExample], num_partitions: int
    ) -> list[list[LabeledExample]]:
        """Split examples into ``num_partitions`` disjoint subsets."""
        ...

    def broadcast(self, vector: Any) -> Array:
        """Read-only copy of ``vector`` shared by all partitions."""
        ...

    def map_partitions(
        self, fn: Callable[[int, Any], T], partitions: Sequence[Any]
    ) -> list[T]:
        """Apply ``fn(index, partition)`` to every partition, in order."""
        ...

    def tree_aggregate(
        self,
        partials: Sequence[T],
        combine: Callable[[T, T], T],
        zero: T,
        depth: int,
    ) -> T:
        """Combine partition results through a tree of the given depth."""
        ...


class LocalBackend:
    """In-process backend.

    Partitions are assigned round-robin, so example ``i`` lands in
    partition ``i % num_partitions``. With ``max_workers > 1`` partitions run
    on a thread pool; results are still returned in partition order.

    Example:
        >>> backend = LocalBackend(max_workers=4)
        >>> dataset = DistributedDataset.parallelize(examples, 5, 4, backend)
    """

    def __init__(self, max_workers: int | None = None) -> None:
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.max_workers = max_workers

    def partition(
        self, examples: Sequence[LabeledExample], num_partitions: int
    ) -> list[list[LabeledExample]]:
        if num_partitions < 1:
            raise ValueError(f"num_partitions must be >= 1, got {num_partitions}")
        return [list(examples[i::num_partitions]) for i in range(num_partitions)]

    def broadcast(self, vector: Any) -> Array:
        # jnp arrays are immutable; copying detaches from the caller's buffer.
        return jnp.array(np.asarray(vector, dtype=np.float64))

    def map_partitions(
        self, fn: Callable[[int, Any], T], partitions: Sequence[Any]
    ) -> list[T]:
        if self.max_workers is None or self.max_workers == 1:
            return [fn(index, partition) for index, partition in enumerate(partitions)]
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return list(executor.map(fn, range(len(partitions)), partitions))

    def tree_aggregate(
        self,
        partials: Sequence[T],
        combine: Callable[[T, T], T] = add_partials,
        zero: T | None = None,
        depth: int = 2,
    ) -> T:
        return tree_aggregate(partials, combine, zero, depth)

    def __repr__(self) -> str:
        return f"LocalBackend(max_workers={self.max_workers})"
