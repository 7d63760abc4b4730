"""Tests for labeled examples and synthetic generators."""

import jax.numpy as jnp
import numpy as np
import pytest

from jaxglm import DimensionMismatch, LabeledExample, SparseFeatures, make_example
from jaxglm.data import (
    as_vector,
    benign_classification,
    benign_poisson,
    benign_regression,
    densify,
    feature_dimension,
    outlier_classification,
    outlier_poisson,
    outlier_regression,
    stack_examples,
    weighted_dataset,
)

GENERATORS = [
    benign_classification,
    outlier_classification,
    benign_regression,
    outlier_regression,
    benign_poisson,
    outlier_poisson,
]


class TestLabeledExample:
    def test_defaults(self):
        """Offset defaults to 0 and weight to 1."""
        example = make_example(1.0, [1.0, 2.0])
        assert example.offset == 0.0
        assert example.weight == 1.0

    def test_copies_dense_features(self):
        """Mutating the caller's buffer does not change the example."""
        buffer = np.array([1.0, 2.0, 3.0])
        example = make_example(0.0, buffer)
        buffer[0] = 100.0
        assert example.features[0] == 1.0

    @pytest.mark.parametrize("weight", [-1.0, float("nan"), float("inf")])
    def test_rejects_bad_weight(self, weight):
        """Weights must be finite and non-negative."""
        with pytest.raises(ValueError):
            make_example(1.0, [1.0], weight=weight)

    def test_immutable(self):
        """Examples are NamedTuples and cannot be reassigned."""
        example = make_example(1.0, [1.0])
        with pytest.raises(AttributeError):
            example.label = 2.0

    def test_sparse_densify(self):
        """Sparse features densify to the full dimension."""
        sparse = SparseFeatures(np.array([0, 3]), np.array([2.0, -1.0]), 5)
        example = make_example(1.0, sparse)

        assert feature_dimension(example.features) == 5
        assert np.array_equal(densify(example.features), [2.0, 0.0, 0.0, -1.0, 0.0])

    def test_sparse_index_out_of_range(self):
        """Sparse indices must be inside the declared size."""
        with pytest.raises(ValueError):
            make_example(1.0, SparseFeatures(np.array([5]), np.array([1.0]), 5))


class TestStackExamples:
    def test_shapes(self):
        """Stacking adds a leading batch axis to every field."""
        examples = [make_example(float(i), np.ones(4), weight=2.0) for i in range(3)]
        block = stack_examples(examples, 4)

        assert isinstance(block, LabeledExample)
        assert block.features.shape == (3, 4)
        assert block.label.shape == (3,)
        assert jnp.allclose(block.weight, 2.0)
        assert block.features.dtype == jnp.float64

    def test_mixed_sparse_and_dense(self):
        """Sparse and dense examples stack into one dense block."""
        examples = [
            make_example(1.0, [1.0, 2.0, 3.0]),
            make_example(-1.0, SparseFeatures(np.array([1]), np.array([5.0]), 3)),
        ]
        block = stack_examples(examples, 3)
        assert jnp.allclose(block.features[1], jnp.array([0.0, 5.0, 0.0]))

    def test_empty(self):
        """An empty partition stacks to zero-length arrays."""
        block = stack_examples([], 3)
        assert block.features.shape == (0, 3)

    def test_dimension_mismatch(self):
        """Wrong feature length is reported before any computation."""
        examples = [make_example(1.0, [1.0, 2.0]), make_example(1.0, [1.0, 2.0, 3.0])]
        with pytest.raises(DimensionMismatch) as info:
            stack_examples(examples, 2)
        assert info.value.expected == 2
        assert info.value.actual == 3


class TestAsVector:
    def test_converts_to_float64(self):
        """Lists become float64 JAX vectors."""
        vector = as_vector([1, 2, 3], 3, "params")
        assert vector.dtype == jnp.float64

    @pytest.mark.parametrize("vector", [[1.0, 2.0], [[1.0, 2.0, 3.0]]])
    def test_mismatch(self, vector):
        """Wrong length or rank raises DimensionMismatch."""
        with pytest.raises(DimensionMismatch):
            as_vector(vector, 3, "params")


class TestGenerators:
    @pytest.mark.parametrize("generator", GENERATORS)
    def test_shapes_and_determinism(self, generator):
        """Same seed, same data; every example has the requested dimension."""
        first = generator(0, 25, 5)
        second = generator(0, 25, 5)

        assert len(first) == 25
        for a, b in zip(first, second):
            assert a.features.shape == (5,)
            assert np.array_equal(a.features, b.features)
            assert a.label == b.label
            assert a.weight == 1.0

    @pytest.mark.parametrize("generator", GENERATORS)
    def test_seed_changes_data(self, generator):
        """Different seeds give different features."""
        a = np.stack([e.features for e in generator(0, 10, 3)])
        b = np.stack([e.features for e in generator(1, 10, 3)])
        assert not np.allclose(a, b)

    @pytest.mark.parametrize("generator", [benign_classification, outlier_classification])
    def test_balanced_binary_labels(self, generator):
        """Classification labels are balanced {-1, +1}."""
        labels = np.array([e.label for e in generator(0, 20, 5)])
        assert set(labels) == {-1.0, 1.0}
        assert labels.sum() == 0

    @pytest.mark.parametrize("generator", [benign_poisson, outlier_poisson])
    def test_counts(self, generator):
        """Poisson labels are non-negative integers."""
        labels = np.array([e.label for e in generator(0, 50, 5)])
        assert np.all(labels >= 0)
        assert np.array_equal(labels, np.round(labels))

    def test_outliers_are_larger(self):
        """Outlier features reach further from zero than benign ones."""
        benign = np.stack([e.features for e in benign_regression(0, 200, 5)])
        outlier = np.stack([e.features for e in outlier_regression(0, 200, 5)])
        assert np.abs(outlier).max() > 3 * np.abs(benign).max()


class TestWeightedDataset:
    def test_doubles_with_random_weights(self):
        """First half unit weights, second half random weights in [0, 10)."""
        examples = weighted_dataset(benign_classification, 0, 25, 5)
        weights = np.array([e.weight for e in examples])

        assert len(examples) == 50
        assert np.all(weights[:25] == 1.0)
        assert np.all((weights[25:] >= 0.0) & (weights[25:] < 10.0))
        assert not np.allclose(weights[25:], 1.0)

    def test_second_half_repeats_data(self):
        """Reweighted examples keep their labels and features."""
        examples = weighted_dataset(benign_regression, 0, 10, 3)
        for unit, reweighted in zip(examples[:10], examples[10:]):
            assert unit.label == reweighted.label
            assert np.array_equal(unit.features, reweighted.features)

    def test_deterministic(self):
        """Weights are drawn from a fixed seed."""
        a = [e.weight for e in weighted_dataset(benign_poisson, 0, 10, 3)]
        b = [e.weight for e in weighted_dataset(benign_poisson, 0, 10, 3)]
        assert a == b
