"""Catalog of objective/dataset scenarios for consistency checks.

Every kernel is paired with its natural data (classification, regression
or counts), in benign and outlier flavours, and decorated with each
regularization the kernel's capabilities allow.
"""

from __future__ import annotations

from typing import Callable, NamedTuple

from jaxglm.core.protocols import Capability, LossKernel, ObjectiveFunction, supports
from jaxglm.data.example import LabeledExample
from jaxglm.data.synthetic import (
    Generator,
    benign_classification,
    benign_poisson,
    benign_regression,
    outlier_classification,
    outlier_poisson,
    outlier_regression,
    weighted_dataset,
)
from jaxglm.losses import DummyLoss, LogisticLoss, PoissonLoss, SmoothedHingeLoss, SquaredLoss
from jaxglm.objective import GLMObjective, RegularizationType, with_regularization

PROBLEM_DIMENSION = 5
TRAINING_SAMPLES = PROBLEM_DIMENSION * PROBLEM_DIMENSION
NUM_PARTITIONS = 4
REGULARIZATION_WEIGHT = 100.0
DATA_RANDOM_SEED = 0


class Scenario(NamedTuple):
    """A described objective with the examples it should be checked on."""

    description: str
    objective: ObjectiveFunction
    examples: list[LabeledExample]


_BASE_CASES: list[tuple[str, Callable[[], LossKernel], Generator, Generator]] = [
    ("dummy", DummyLoss, benign_classification, outlier_classification),
    ("logistic", LogisticLoss, benign_classification, outlier_classification),
    ("smoothed hinge", SmoothedHingeLoss, benign_classification, outlier_classification),
    ("squared", SquaredLoss, benign_regression, outlier_regression),
    ("poisson", PoissonLoss, benign_poisson, outlier_poisson),
]


def _base_scenarios(
    dimension: int, num_samples: int, required: Capability
) -> list[Scenario]:
    scenarios = []
    for data in ("benign", "outlier"):
        for name, kernel_factory, benign, outlier in _BASE_CASES:
            kernel = kernel_factory()
            if not supports(kernel, required):
                continue
            generator = benign if data == "benign" else outlier
            examples = weighted_dataset(generator, DATA_RANDOM_SEED, num_samples, dimension)
            scenarios.append(
                Scenario(
                    f"{name} loss, {data} data",
                    GLMObjective(kernel, dimension),
                    examples,
                )
            )
    return scenarios


def differentiable_scenarios(
    dimension: int = PROBLEM_DIMENSION,
    num_samples: int = TRAINING_SAMPLES,
    regularization_weight: float = REGULARIZATION_WEIGHT,
) -> list[Scenario]:
    """Every kernel, undecorated and with L2 and L1 regularization."""
    scenarios = []
    for base in _base_scenarios(dimension, num_samples, Capability.DIFFERENTIABLE):
        scenarios.append(base)
        for kind in (RegularizationType.L2, RegularizationType.L1):
            # Each decorated scenario wraps its own base objective so that
            # depth changes on one scenario never leak into another.
            own_base = GLMObjective(base.objective.kernel, dimension)
            scenarios.append(
                Scenario(
                    f"{base.description} with {kind.value} regularization",
                    with_regularization(own_base, kind, regularization_weight),
                    base.examples,
                )
            )
    return scenarios


def twice_differentiable_scenarios(
    dimension: int = PROBLEM_DIMENSION,
    num_samples: int = TRAINING_SAMPLES,
    regularization_weight: float = REGULARIZATION_WEIGHT,
) -> list[Scenario]:
    """Twice differentiable kernels, undecorated and with L2 regularization."""
    scenarios = []
    for base in _base_scenarios(dimension, num_samples, Capability.TWICE_DIFFERENTIABLE):
        scenarios.append(base)
        own_base = GLMObjective(base.objective.kernel, dimension)
        scenarios.append(
            Scenario(
                f"{base.description} with L2 regularization",
                with_regularization(own_base, RegularizationType.L2, regularization_weight),
                base.examples,
            )
        )
    return scenarios
