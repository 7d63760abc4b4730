"""Pointwise GLM loss kernels.

A GLM loss depends on the parameters only through the margin
``s = params @ x + offset``. Subclasses define the scalar loss ``l(s, y)``
and its first two derivatives in ``s``; the chain rule gives

    value          = w * l(s, y)
    gradient       = w * l'(s, y) * x
    hessian_vector = w * l''(s, y) * (x @ d) * x

All methods act on a single example and are pure JAX, so they can be
``jax.vmap``-ed over a stacked block and ``jax.jit``-ed.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array

from jaxglm.core.errors import UnsupportedOperation
from jaxglm.core.protocols import Capability, supports
from jaxglm.data.example import LabeledExample


class PointwiseLoss:
    """Base class for losses of the form ``w * l(params @ x + offset, y)``."""

    name: str = "pointwise"
    capabilities: Capability = Capability.DIFFERENTIABLE

    def loss(self, margin: Array, label: Array) -> Array:
        """Unweighted loss at ``margin``."""
        raise NotImplementedError

    def dz(self, margin: Array, label: Array) -> Array:
        """First derivative of ``loss`` in the margin."""
        raise NotImplementedError

    def dzz(self, margin: Array, label: Array) -> Array:
        """Second derivative of ``loss`` in the margin."""
        raise UnsupportedOperation(f"{self.name} loss is not twice differentiable")

    def margin(self, params: Array, example: LabeledExample) -> Array:
        return jnp.dot(example.features, params) + example.offset

    def value(self, params: Array, example: LabeledExample) -> Array:
        margin = self.margin(params, example)
        return example.weight * self.loss(margin, example.label)

    def gradient(self, params: Array, example: LabeledExample) -> Array:
        margin = self.margin(params, example)
        return example.weight * self.dz(margin, example.label) * example.features

    def hessian_vector(
        self, params: Array, direction: Array, example: LabeledExample
    ) -> Array:
        if not supports(self, Capability.HESSIAN_VECTOR):
            raise UnsupportedOperation(
                f"{self.name} loss does not support Hessian-vector products"
            )
        margin = self.margin(params, example)
        curvature = example.weight * self.dzz(margin, example.label)
        return curvature * jnp.dot(example.features, direction) * example.features

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
