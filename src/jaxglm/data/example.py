"""Labeled examples.

A ``LabeledExample`` is an immutable record of one observation. The same
NamedTuple with a leading batch axis on every field is the stacked block
that loss kernels are vmapped over, so a single type serves as both the
record and the partition layout.
"""

from __future__ import annotations

import math
from typing import NamedTuple, Sequence, Union

import jax.numpy as jnp
import numpy as np
from jax import Array

from jaxglm.core.errors import DimensionMismatch


class SparseFeatures(NamedTuple):
    """Sparse feature vector.

    Attributes:
        indices: Positions of the non-zero entries, shape (nnz,).
        values: Non-zero entries, shape (nnz,).
        size: Full dimension of the vector.
    """

    indices: np.ndarray
    values: np.ndarray
    size: int


Features = Union[np.ndarray, Array, SparseFeatures]


class LabeledExample(NamedTuple):
    """One labeled observation.

    Attributes:
        label: Response value. {-1, +1} for classification kernels.
        features: Feature vector, dense (dim,) or ``SparseFeatures``.
        offset: Pre-computed term added to the linear score.
        weight: Non-negative importance weight.
    """

    label: float | Array
    features: Features
    offset: float | Array = 0.0
    weight: float | Array = 1.0


def make_example(
    label: float,
    features: Features | Sequence[float],
    offset: float = 0.0,
    weight: float = 1.0,
) -> LabeledExample:
    """Build a validated example.

    Dense features are copied into a float64 array so that the record
    cannot be changed through the caller's buffer.
    """
    if not math.isfinite(weight) or weight < 0:
        raise ValueError(f"weight must be finite and non-negative, got {weight}")
    if isinstance(features, SparseFeatures):
        indices = np.asarray(features.indices, dtype=np.int64)
        values = np.asarray(features.values, dtype=np.float64)
        if indices.shape != values.shape:
            raise ValueError("sparse indices and values must have the same length")
        if indices.size and (indices.min() < 0 or indices.max() >= features.size):
            raise ValueError(f"sparse index out of range for size {features.size}")
        features = SparseFeatures(indices, values, int(features.size))
    else:
        features = np.array(features, dtype=np.float64)
        if features.ndim != 1:
            raise ValueError(f"features must be 1-D, got shape {features.shape}")
    return LabeledExample(
        label=float(label),
        features=features,
        offset=float(offset),
        weight=float(weight),
    )


def feature_dimension(features: Features) -> int:
    """Length of a dense or sparse feature vector."""
    if isinstance(features, SparseFeatures):
        return features.size
    return int(np.shape(features)[0])


def densify(features: Features) -> np.ndarray:
    """Dense float64 copy of a feature vector."""
    if isinstance(features, SparseFeatures):
        dense = np.zeros(features.size, dtype=np.float64)
        # Repeated indices accumulate, matching sparse-vector semantics.
        np.add.at(dense, features.indices, features.values)
        return dense
    return np.asarray(features, dtype=np.float64)


def stack_examples(examples: Sequence[LabeledExample], dimension: int) -> LabeledExample:
    """Stack examples into one batched block.

    Args:
        examples: Examples to stack. May be empty.
        dimension: Expected feature dimension.

    Returns:
        A ``LabeledExample`` whose fields have a leading axis of
        ``len(examples)``: features (n, dimension), the rest (n,).

    Raises:
        DimensionMismatch: If any example's features are not ``dimension`` long.
    """
    n = len(examples)
    features = np.zeros((n, dimension), dtype=np.float64)
    labels = np.zeros(n, dtype=np.float64)
    offsets = np.zeros(n, dtype=np.float64)
    weights = np.zeros(n, dtype=np.float64)

    for i, example in enumerate(examples):
        size = feature_dimension(example.features)
        if size != dimension:
            raise DimensionMismatch(f"features of example {i}", dimension, size)
        features[i] = densify(example.features)
        labels[i] = example.label
        offsets[i] = example.offset
        weights[i] = example.weight

    return LabeledExample(
        label=jnp.asarray(labels),
        features=jnp.asarray(features),
        offset=jnp.asarray(offsets),
        weight=jnp.asarray(weights),
    )


def as_vector(vector: Array | np.ndarray | Sequence[float], dimension: int, what: str) -> Array:
    """Convert to a float64 JAX vector, checking its dimension first.

    Raises:
        DimensionMismatch: If ``vector`` is not 1-D of length ``dimension``.
    """
    array = np.asarray(vector, dtype=np.float64)
    if array.ndim != 1:
        raise DimensionMismatch(what, dimension, int(array.size))
    if array.shape[0] != dimension:
        raise DimensionMismatch(what, dimension, array.shape[0])
    return jnp.asarray(array)
