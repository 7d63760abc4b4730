"""
Dataset-wide objective functions and regularization decorators.

Quick Start:
    >>> from jaxglm.losses import PoissonLoss
    >>> from jaxglm.objective import GLMObjective, RegularizationType, with_regularization
    >>>
    >>> objective = GLMObjective(PoissonLoss(), dimension=5, tree_aggregate_depth=2)
    >>> objective = with_regularization(objective, RegularizationType.L2, 0.1)
    >>> value, gradient = objective.value_and_gradient(params, dataset)
"""

from jaxglm.objective.glm import GLMObjective
from jaxglm.objective.regularization import (
    RegularizationContext,
    RegularizationType,
    RegularizedObjective,
    with_regularization,
)

__all__ = [
    "GLMObjective",
    "RegularizationContext",
    "RegularizationType",
    "RegularizedObjective",
    "with_regularization",
]
