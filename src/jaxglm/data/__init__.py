"""Labeled examples and synthetic data generators."""

from jaxglm.data.example import (
    LabeledExample,
    SparseFeatures,
    as_vector,
    densify,
    feature_dimension,
    make_example,
    stack_examples,
)
from jaxglm.data.synthetic import (
    benign_classification,
    benign_poisson,
    benign_regression,
    outlier_classification,
    outlier_poisson,
    outlier_regression,
    weighted_dataset,
)

__all__ = [
    "LabeledExample",
    "SparseFeatures",
    "make_example",
    "stack_examples",
    "densify",
    "feature_dimension",
    "as_vector",
    # Generators
    "benign_classification",
    "outlier_classification",
    "benign_regression",
    "outlier_regression",
    "benign_poisson",
    "outlier_poisson",
    "weighted_dataset",
]
