"""Regression loss kernels."""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array

from jaxglm.core.protocols import Capability
from jaxglm.losses.base import PointwiseLoss


class SquaredLoss(PointwiseLoss):
    """Squared error: (s - y)^2."""

    name = "squared"
    capabilities = Capability.TWICE_DIFFERENTIABLE

    def loss(self, margin: Array, label: Array) -> Array:
        return (margin - label) ** 2

    def dz(self, margin: Array, label: Array) -> Array:
        return 2.0 * (margin - label)

    def dzz(self, margin: Array, label: Array) -> Array:
        return jnp.full_like(margin, 2.0)


class PoissonLoss(PointwiseLoss):
    """Poisson negative log-likelihood up to a constant: exp(s) - y * s.

    Large margins overflow ``exp``; the objective reports that as
    ``NumericOverflow`` instead of returning ``inf``.
    """

    name = "poisson"
    capabilities = Capability.TWICE_DIFFERENTIABLE

    def loss(self, margin: Array, label: Array) -> Array:
        return jnp.exp(margin) - label * margin

    def dz(self, margin: Array, label: Array) -> Array:
        return jnp.exp(margin) - label

    def dzz(self, margin: Array, label: Array) -> Array:
        return jnp.exp(margin)
