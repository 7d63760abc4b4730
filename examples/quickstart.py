"""
jaxglm Quickstart
=================

Evaluate GLM objectives over a partitioned dataset and check their
derivatives against finite differences.
"""

import logging

import jax.numpy as jnp
import numpy as np

from jaxglm import (
    ConsistencyConfig,
    ConsistencyVerifier,
    DistributedDataset,
    GLMObjective,
    LogisticLoss,
    RegularizationType,
    with_regularization,
)
from jaxglm.data import benign_classification, weighted_dataset
from jaxglm.verification import (
    NUM_PARTITIONS,
    PROBLEM_DIMENSION,
    differentiable_scenarios,
    twice_differentiable_scenarios,
)


def objective_example():
    """Logistic regression objective with L2 regularization."""
    print("=" * 60)
    print(" Objective: logistic loss with L2 regularization")
    print("=" * 60)

    examples = weighted_dataset(benign_classification, 0, 25, PROBLEM_DIMENSION)
    dataset = DistributedDataset.parallelize(examples, PROBLEM_DIMENSION, NUM_PARTITIONS)
    print(dataset)

    base = GLMObjective(LogisticLoss(), PROBLEM_DIMENSION, tree_aggregate_depth=2)
    objective = with_regularization(base, RegularizationType.L2, 100.0)

    params = jnp.asarray(np.random.RandomState(0).uniform(size=PROBLEM_DIMENSION))
    value, gradient = objective.value_and_gradient(params, dataset)
    print(f"\nvalue:          {value:.6f}")
    print(f"gradient:       {np.asarray(gradient)}")

    direction = jnp.ones(PROBLEM_DIMENSION)
    hessian_vector = objective.hessian_vector(params, direction, dataset)
    print(f"hessian_vector: {np.asarray(hessian_vector)}")


def consistency_example():
    """Finite-difference checks across the scenario catalog."""
    print("\n" + "=" * 60)
    print(" Consistency checks")
    print("=" * 60)

    verifier = ConsistencyVerifier(ConsistencyConfig(num_iterations=3))
    failed = 0

    print("\nGradient:")
    for scenario in differentiable_scenarios():
        dataset = DistributedDataset.parallelize(
            scenario.examples, PROBLEM_DIMENSION, NUM_PARTITIONS
        )
        report = verifier.check_gradient(scenario.description, scenario.objective, dataset)
        failed += len(report.failures)
        status = "ok" if report.passed else f"{len(report.failures)} FAILED"
        print(f"  {scenario.description:<55} {status}")

    print("\nHessian-vector:")
    for scenario in twice_differentiable_scenarios():
        dataset = DistributedDataset.parallelize(
            scenario.examples, PROBLEM_DIMENSION, NUM_PARTITIONS
        )
        report = verifier.check_hessian(scenario.description, scenario.objective, dataset)
        failed += len(report.failures)
        status = "ok" if report.passed else f"{len(report.failures)} FAILED"
        print(f"  {scenario.description:<55} {status}")

    return failed


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING)
    objective_example()
    failed = consistency_example()
    print(f"\n{failed} inconsistent cell(s)")
