"""Finite-difference verification of objective derivatives."""

from jaxglm.verification.scenarios import (
    NUM_PARTITIONS,
    PROBLEM_DIMENSION,
    REGULARIZATION_WEIGHT,
    TRAINING_SAMPLES,
    Scenario,
    differentiable_scenarios,
    twice_differentiable_scenarios,
)
from jaxglm.verification.verifier import (
    CellResult,
    ConsistencyConfig,
    ConsistencyFailure,
    ConsistencyVerifier,
    VerificationReport,
    compare,
)

__all__ = [
    "ConsistencyConfig",
    "ConsistencyVerifier",
    "ConsistencyFailure",
    "CellResult",
    "VerificationReport",
    "compare",
    # Scenarios
    "Scenario",
    "differentiable_scenarios",
    "twice_differentiable_scenarios",
    "PROBLEM_DIMENSION",
    "TRAINING_SAMPLES",
    "NUM_PARTITIONS",
    "REGULARIZATION_WEIGHT",
]
