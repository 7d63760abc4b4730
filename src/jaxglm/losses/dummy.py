"""Data-independent test kernel.

Every example contributes the same quadratic bowl, so an objective over N
examples must equal ``N * sum((params - CENTROID) ** 2)`` exactly. Any
deviation points at the aggregation plumbing, not at loss math.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array

from jaxglm.core.protocols import Capability
from jaxglm.data.example import LabeledExample

CENTROID = 4.0


class DummyLoss:
    """Quadratic bowl centred at ``CENTROID``, ignoring the example's data."""

    name = "dummy"
    capabilities = Capability.TWICE_DIFFERENTIABLE

    def __init__(self, centroid: float = CENTROID) -> None:
        self.centroid = centroid

    def value(self, params: Array, example: LabeledExample) -> Array:
        return jnp.sum((params - self.centroid) ** 2)

    def gradient(self, params: Array, example: LabeledExample) -> Array:
        return 2.0 * (params - self.centroid)

    def hessian_vector(
        self, params: Array, direction: Array, example: LabeledExample
    ) -> Array:
        return 2.0 * direction

    def __repr__(self) -> str:
        return f"DummyLoss(centroid={self.centroid})"
