"""Classification loss kernels.

Labels are in {-1, +1}.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array

from jaxglm.core.protocols import Capability
from jaxglm.losses.base import PointwiseLoss


class LogisticLoss(PointwiseLoss):
    """Logistic loss: log(1 + exp(-y * s))."""

    name = "logistic"
    capabilities = Capability.TWICE_DIFFERENTIABLE

    def loss(self, margin: Array, label: Array) -> Array:
        # Numerically stable softplus(t), t = -y * s:
        # max(t, 0) + log(1 + exp(-|t|))
        t = -label * margin
        return jnp.maximum(t, 0) + jnp.log1p(jnp.exp(-jnp.abs(t)))

    def dz(self, margin: Array, label: Array) -> Array:
        return -label * jax.nn.sigmoid(-label * margin)

    def dzz(self, margin: Array, label: Array) -> Array:
        # y^2 * σ(t)(1 - σ(t)), which is σ(s)(1 - σ(s)) for y in {-1, +1}.
        p = jax.nn.sigmoid(-label * margin)
        return label**2 * p * (1.0 - p)


class SmoothedHingeLoss(PointwiseLoss):
    """Smoothed hinge loss (Rennie & Srebro), with z = y * s.

        h(z) = 0             if z >= 1
             = (1 - z)^2 / 2 if 0 < z < 1
             = 1/2 - z       if z <= 0

    The first derivative is continuous but the second jumps at z = 0 and
    z = 1, so Hessian-vector products are not offered.
    """

    name = "smoothed hinge"
    capabilities = Capability.DIFFERENTIABLE

    def loss(self, margin: Array, label: Array) -> Array:
        z = label * margin
        return jnp.where(
            z >= 1.0,
            0.0,
            jnp.where(z <= 0.0, 0.5 - z, 0.5 * (1.0 - z) ** 2),
        )

    def dz(self, margin: Array, label: Array) -> Array:
        z = label * margin
        dh = jnp.where(z >= 1.0, 0.0, jnp.where(z <= 0.0, -1.0, z - 1.0))
        return label * dh
