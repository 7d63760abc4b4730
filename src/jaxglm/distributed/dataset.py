"""Partitioned datasets."""

from __future__ import annotations

import logging
from typing import Sequence

from jaxglm.data.example import LabeledExample, stack_examples
from jaxglm.distributed.backend import LocalBackend, ReductionBackend

logger = logging.getLogger(__name__)


class DistributedDataset:
    """Examples split into partitions, each stacked into one block.

    Every partition block is a ``LabeledExample`` with a leading batch axis
    (see ``stack_examples``). Partitions may be empty.

    Attributes:
        dimension: Feature dimension shared by every example.
        backend: Substrate used to map and reduce over partitions.
        partitions: Stacked blocks, one per partition.
    """

    def __init__(
        self,
        examples: Sequence[LabeledExample],
        dimension: int,
        partitions: Sequence[Sequence[LabeledExample]],
        backend: ReductionBackend,
    ) -> None:
        self.dimension = dimension
        self.backend = backend
        self._examples = tuple(examples)
        # Stacking checks every example's dimension before any evaluation.
        self.partitions = tuple(stack_examples(part, dimension) for part in partitions)
        self.partition_sizes = tuple(len(part) for part in partitions)
        logger.debug(
            "DistributedDataset: %d examples in %d partitions %s",
            len(self._examples),
            len(self.partitions),
            self.partition_sizes,
        )

    @classmethod
    def parallelize(
        cls,
        examples: Sequence[LabeledExample],
        dimension: int,
        num_partitions: int = 4,
        backend: ReductionBackend | None = None,
    ) -> DistributedDataset:
        """Partition ``examples`` with ``backend`` (a ``LocalBackend`` by default).

        Raises:
            DimensionMismatch: If any example's features are not
                ``dimension`` long.
        """
        backend = backend or LocalBackend()
        partitions = backend.partition(examples, num_partitions)
        return cls(examples, dimension, partitions, backend)

    def repartition(self, num_partitions: int) -> DistributedDataset:
        """The same examples split into ``num_partitions`` partitions."""
        return DistributedDataset.parallelize(
            self._examples, self.dimension, num_partitions, self.backend
        )

    @property
    def num_partitions(self) -> int:
        return len(self.partitions)

    @property
    def examples(self) -> tuple[LabeledExample, ...]:
        return self._examples

    def __len__(self) -> int:
        return len(self._examples)

    def __repr__(self) -> str:
        return (
            f"DistributedDataset(num_examples={len(self)}, dimension={self.dimension}, "
            f"num_partitions={self.num_partitions})"
        )
