"""Per-example loss kernels for jaxglm."""

from jaxglm.losses.base import PointwiseLoss
from jaxglm.losses.classification import LogisticLoss, SmoothedHingeLoss
from jaxglm.losses.dummy import DummyLoss
from jaxglm.losses.regression import PoissonLoss, SquaredLoss

__all__ = [
    "PointwiseLoss",
    "LogisticLoss",
    "SmoothedHingeLoss",
    "SquaredLoss",
    "PoissonLoss",
    "DummyLoss",
]
