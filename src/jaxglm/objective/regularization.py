"""Regularization decorators.

``RegularizedObjective`` wraps any objective, including an already
regularized one, and adds a closed-form penalty that depends only on the
parameters:

    L2(λ): value + λ‖θ‖²,  gradient + 2λθ,       hessian_vector + 2λd
    L1(λ): value + λ‖θ‖₁,  gradient + λ·sign(θ)  (sign(0) = 0)

L1 is not twice differentiable at zero, so an L1-wrapped objective drops
the HESSIAN_VECTOR capability whatever it wraps.

Example:
    >>> base = GLMObjective(LogisticLoss(), dimension=5)
    >>> objective = with_regularization(base, RegularizationType.L2, 100.0)
    >>> objective = with_regularization(objective, RegularizationType.L1, 1.0)
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass

import jax.numpy as jnp
from jax import Array

from jaxglm.core.errors import NumericOverflow, UnsupportedOperation
from jaxglm.core.protocols import Capability, ObjectiveFunction, supports
from jaxglm.data.example import as_vector
from jaxglm.distributed.dataset import DistributedDataset


class RegularizationType(enum.Enum):
    L1 = "L1"
    L2 = "L2"


@dataclass(frozen=True)
class RegularizationContext:
    """Penalty kind and weight.

    Attributes:
        kind: L1 or L2.
        weight: Non-negative penalty weight λ.
    """

    kind: RegularizationType
    weight: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.weight) or self.weight < 0:
            raise ValueError(
                f"regularization weight must be finite and non-negative, got {self.weight}"
            )

    @property
    def capabilities(self) -> Capability:
        if self.kind is RegularizationType.L1:
            return Capability.DIFFERENTIABLE
        return Capability.TWICE_DIFFERENTIABLE

    def value(self, params: Array) -> Array:
        if self.kind is RegularizationType.L1:
            return self.weight * jnp.sum(jnp.abs(params))
        return self.weight * jnp.sum(params**2)

    def gradient(self, params: Array) -> Array:
        if self.kind is RegularizationType.L1:
            return self.weight * jnp.sign(params)
        return 2.0 * self.weight * params

    def hessian_vector(self, direction: Array) -> Array:
        if self.kind is RegularizationType.L1:
            raise UnsupportedOperation("L1 regularization is not twice differentiable")
        return 2.0 * self.weight * direction


class RegularizedObjective:
    """An objective plus a regularization penalty.

    The wrapped objective keeps ownership of all dataset-dependent work;
    this class never touches partitions itself.
    """

    def __init__(
        self, objective: ObjectiveFunction, regularization: RegularizationContext
    ) -> None:
        self.objective = objective
        self.regularization = regularization
        self.dimension = objective.dimension
        self.capabilities = objective.capabilities & regularization.capabilities

    @property
    def tree_aggregate_depth(self) -> int:
        return self.objective.tree_aggregate_depth

    @tree_aggregate_depth.setter
    def tree_aggregate_depth(self, depth: int) -> None:
        self.objective.tree_aggregate_depth = depth

    def value(self, params: Array, dataset: DistributedDataset) -> float:
        params = as_vector(params, self.dimension, "params")
        penalty = float(self.regularization.value(params))
        return self._checked(self.objective.value(params, dataset) + penalty, "value")

    def gradient(self, params: Array, dataset: DistributedDataset) -> Array:
        params = as_vector(params, self.dimension, "params")
        gradient = self.objective.gradient(params, dataset) + self.regularization.gradient(params)
        return self._checked(gradient, "gradient")

    def value_and_gradient(
        self, params: Array, dataset: DistributedDataset
    ) -> tuple[float, Array]:
        params = as_vector(params, self.dimension, "params")
        value, gradient = self.objective.value_and_gradient(params, dataset)
        value = value + float(self.regularization.value(params))
        gradient = gradient + self.regularization.gradient(params)
        return self._checked(value, "value"), self._checked(gradient, "gradient")

    def hessian_vector(
        self, params: Array, direction: Array, dataset: DistributedDataset
    ) -> Array:
        if not supports(self, Capability.HESSIAN_VECTOR):
            raise UnsupportedOperation(
                f"{self!r} does not support Hessian-vector products"
            )
        params = as_vector(params, self.dimension, "params")
        direction = as_vector(direction, self.dimension, "direction")
        hessian_vector = self.objective.hessian_vector(
            params, direction, dataset
        ) + self.regularization.hessian_vector(direction)
        return self._checked(hessian_vector, "Hessian-vector product")

    def _checked(self, result, what: str):
        # The penalty can overflow even when the wrapped objective is finite.
        if not bool(jnp.all(jnp.isfinite(result))):
            raise NumericOverflow(f"{self!r} {what} is not finite")
        return result

    def __repr__(self) -> str:
        return (
            f"RegularizedObjective({self.objective!r}, "
            f"{self.regularization.kind.value}, weight={self.regularization.weight})"
        )


def with_regularization(
    objective: ObjectiveFunction,
    kind: RegularizationType,
    weight: float,
) -> RegularizedObjective:
    """Wrap ``objective`` with a ``kind`` penalty of the given weight."""
    return RegularizedObjective(objective, RegularizationContext(kind, weight))
