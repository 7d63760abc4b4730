"""
jaxglm: GLM objective functions with verified derivatives, in JAX.

Three main capabilities:
1. Per-example loss kernels (logistic, squared, Poisson, smoothed hinge)
   with exact gradients and Hessian-vector products
2. Dataset-wide objectives over partitioned data, tree-aggregated with a
   configurable depth, and stackable L1/L2 regularization decorators
3. Finite-difference consistency checks that certify the derivatives

Float64 is enabled on import: central differences with a 1e-6 step are
meaningless in float32.

Quick Start (Objectives):
    >>> from jaxglm import GLMObjective, LogisticLoss, DistributedDataset
    >>> from jaxglm.data import benign_classification
    >>> examples = benign_classification(seed=0, num_samples=25, dimension=5)
    >>> dataset = DistributedDataset.parallelize(examples, dimension=5, num_partitions=4)
    >>> objective = GLMObjective(LogisticLoss(), dimension=5, tree_aggregate_depth=2)
    >>> objective.gradient(jnp.zeros(5), dataset)

Quick Start (Verification):
    >>> from jaxglm import ConsistencyVerifier, RegularizationType, with_regularization
    >>> regularized = with_regularization(objective, RegularizationType.L2, 100.0)
    >>> ConsistencyVerifier().verify("logistic + L2", regularized, dataset).raise_for_failures()
"""

import jax

jax.config.update("jax_enable_x64", True)

from jaxglm._version import __version__

# Core
from jaxglm.core import (
    Capability,
    DimensionMismatch,
    JaxGLMError,
    LossKernel,
    NumericOverflow,
    ObjectiveFunction,
    UnsupportedOperation,
    supports,
)

# Data
from jaxglm.data import LabeledExample, SparseFeatures, make_example

# Loss kernels
from jaxglm.losses import (
    DummyLoss,
    LogisticLoss,
    PoissonLoss,
    SmoothedHingeLoss,
    SquaredLoss,
)

# Distributed evaluation
from jaxglm.distributed import DistributedDataset, LocalBackend, tree_aggregate

# Objectives
from jaxglm.objective import (
    GLMObjective,
    RegularizationContext,
    RegularizationType,
    RegularizedObjective,
    with_regularization,
)

# Verification
from jaxglm.verification import (
    ConsistencyConfig,
    ConsistencyFailure,
    ConsistencyVerifier,
    VerificationReport,
)

__all__ = [
    "__version__",
    # Core
    "Capability",
    "LossKernel",
    "ObjectiveFunction",
    "supports",
    "JaxGLMError",
    "NumericOverflow",
    "UnsupportedOperation",
    "DimensionMismatch",
    # Data
    "LabeledExample",
    "SparseFeatures",
    "make_example",
    # Losses
    "LogisticLoss",
    "SquaredLoss",
    "PoissonLoss",
    "SmoothedHingeLoss",
    "DummyLoss",
    # Distributed
    "DistributedDataset",
    "LocalBackend",
    "tree_aggregate",
    # Objectives
    "GLMObjective",
    "RegularizationContext",
    "RegularizationType",
    "RegularizedObjective",
    "with_regularization",
    # Verification
    "ConsistencyConfig",
    "ConsistencyVerifier",
    "ConsistencyFailure",
    "VerificationReport",
]
