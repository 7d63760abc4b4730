"""Dataset-wide GLM objective.

Wraps a per-example loss kernel. Each partition evaluates the kernel on
every example with ``jax.vmap`` (jitted once per objective), sums the
contributions locally, and the backend tree-aggregates the partition sums.

Example:
    >>> objective = GLMObjective(LogisticLoss(), dimension=5)
    >>> dataset = DistributedDataset.parallelize(examples, 5, num_partitions=4)
    >>> objective.value(params, dataset)
    >>> objective.gradient(params, dataset)
    >>> objective.hessian_vector(params, direction, dataset)
"""

from __future__ import annotations

import logging

import jax
import jax.numpy as jnp
import numpy as np
from jax import Array

from jaxglm.core.errors import DimensionMismatch, NumericOverflow, UnsupportedOperation
from jaxglm.core.protocols import Capability, LossKernel, supports
from jaxglm.data.example import LabeledExample, as_vector
from jaxglm.distributed.aggregate import PartialSums, add_partials
from jaxglm.distributed.dataset import DistributedDataset

logger = logging.getLogger(__name__)


class GLMObjective:
    """Sum of a loss kernel's per-example contributions over a dataset.

    Attributes:
        kernel: Per-example loss kernel.
        dimension: Problem dimension D.
        capabilities: The kernel's capabilities.
        tree_aggregate_depth: Depth of the reduction tree. A performance
            knob only: changing it never changes results beyond rounding.
    """

    def __init__(
        self,
        kernel: LossKernel,
        dimension: int,
        tree_aggregate_depth: int = 1,
    ) -> None:
        if dimension < 1:
            raise ValueError(f"dimension must be >= 1, got {dimension}")
        self.kernel = kernel
        self.dimension = dimension
        self.capabilities = kernel.capabilities
        self.tree_aggregate_depth = tree_aggregate_depth

        self._values = jax.jit(jax.vmap(kernel.value, in_axes=(None, 0)))
        self._gradients = jax.jit(jax.vmap(kernel.gradient, in_axes=(None, 0)))
        self._hessian_vectors = jax.jit(
            jax.vmap(kernel.hessian_vector, in_axes=(None, None, 0))
        )

    @property
    def tree_aggregate_depth(self) -> int:
        return self._tree_aggregate_depth

    @tree_aggregate_depth.setter
    def tree_aggregate_depth(self, depth: int) -> None:
        if depth < 1:
            raise ValueError(f"tree_aggregate_depth must be >= 1, got {depth}")
        self._tree_aggregate_depth = depth

    def value(self, params: Array, dataset: DistributedDataset) -> float:
        """Sum of per-example loss values.

        Raises:
            DimensionMismatch: If params or the dataset has the wrong dimension.
            NumericOverflow: If any contribution or the total is not finite.
        """
        total = self._evaluate(dataset, params, None, values=True)
        return float(total.value)

    def gradient(self, params: Array, dataset: DistributedDataset) -> Array:
        """Sum of per-example gradients, shape (dimension,)."""
        total = self._evaluate(dataset, params, None, gradients=True)
        return total.gradient

    def value_and_gradient(
        self, params: Array, dataset: DistributedDataset
    ) -> tuple[float, Array]:
        """Value and gradient from a single pass over the partitions."""
        total = self._evaluate(dataset, params, None, values=True, gradients=True)
        return float(total.value), total.gradient

    def hessian_vector(
        self, params: Array, direction: Array, dataset: DistributedDataset
    ) -> Array:
        """Sum of per-example Hessian-vector products, shape (dimension,).

        Raises:
            UnsupportedOperation: If the kernel is not twice differentiable.
                Raised before any partition is touched.
        """
        if not supports(self, Capability.HESSIAN_VECTOR):
            raise UnsupportedOperation(
                f"{self.kernel.name} loss does not support Hessian-vector products"
            )
        total = self._evaluate(dataset, params, direction, hessian_vectors=True)
        return total.hessian_vector

    def _evaluate(
        self,
        dataset: DistributedDataset,
        params: Array,
        direction: Array | None,
        values: bool = False,
        gradients: bool = False,
        hessian_vectors: bool = False,
    ) -> PartialSums:
        if dataset.dimension != self.dimension:
            raise DimensionMismatch("dataset features", self.dimension, dataset.dimension)
        backend = dataset.backend
        params = backend.broadcast(as_vector(params, self.dimension, "params"))
        if direction is not None:
            direction = backend.broadcast(as_vector(direction, self.dimension, "direction"))

        zeros = jnp.zeros(self.dimension)
        zero = PartialSums(
            count=jnp.asarray(0),
            value=jnp.asarray(0.0) if values else None,
            gradient=zeros if gradients else None,
            hessian_vector=zeros if hessian_vectors else None,
        )

        def partition_sums(index: int, block: LabeledExample) -> PartialSums:
            count = block.label.shape[0]
            if count == 0:
                return zero
            partial = zero._replace(count=jnp.asarray(count))
            if values:
                contributions = self._values(params, block)
                self._check_finite(contributions, "value", index)
                partial = partial._replace(value=jnp.sum(contributions))
            if gradients:
                contributions = self._gradients(params, block)
                self._check_finite(contributions, "gradient", index)
                partial = partial._replace(gradient=jnp.sum(contributions, axis=0))
            if hessian_vectors:
                contributions = self._hessian_vectors(params, direction, block)
                self._check_finite(contributions, "Hessian-vector product", index)
                partial = partial._replace(hessian_vector=jnp.sum(contributions, axis=0))
            return partial

        partials = backend.map_partitions(partition_sums, dataset.partitions)
        total = backend.tree_aggregate(
            partials, add_partials, zero, self.tree_aggregate_depth
        )
        for name, leaf in zip(PartialSums._fields[1:], total[1:]):
            if leaf is not None and not bool(jnp.all(jnp.isfinite(leaf))):
                raise NumericOverflow(f"{self.kernel.name} loss aggregate {name} is not finite")

        logger.debug(
            "%s: evaluated %d examples over %d partitions (depth=%d)",
            self.kernel.name,
            int(total.count),
            dataset.num_partitions,
            self.tree_aggregate_depth,
        )
        return total

    def _check_finite(self, contributions: Array, what: str, partition: int) -> None:
        finite = np.isfinite(np.asarray(contributions))
        if finite.ndim > 1:
            finite = finite.all(axis=tuple(range(1, finite.ndim)))
        if not finite.all():
            example = int(np.argmin(finite))
            raise NumericOverflow(
                f"{self.kernel.name} loss {what} is not finite",
                partition=partition,
                example=example,
            )

    def __repr__(self) -> str:
        return f"GLMObjective({self.kernel!r}, dimension={self.dimension})"
