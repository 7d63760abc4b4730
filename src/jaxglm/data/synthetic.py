"""Synthetic data generators.

Six distributions: benign or outlier features for binary classification,
linear regression and Poisson regression. Every generator takes
``(seed, num_samples, dimension)`` and is deterministic in the seed.

Benign data keeps features near unit scale. Outlier data multiplies a
random ``OUTLIER_FRACTION`` of feature entries (and, for regression, of
labels) by ``OUTLIER_SCALE`` so that margins land far from zero.

Example:
    >>> examples = benign_classification(seed=0, num_samples=25, dimension=5)
    >>> weighted = weighted_dataset(benign_classification, 0, 25, 5)
    >>> len(weighted)
    50
"""

from __future__ import annotations

from typing import Callable

import jax
import jax.numpy as jnp
import numpy as np
from jax import Array

from jaxglm.data.example import LabeledExample, make_example

Generator = Callable[[int, int, int], list[LabeledExample]]

OUTLIER_FRACTION = 0.1
OUTLIER_SCALE = 10.0
WEIGHT_RANDOM_SEED = 100
WEIGHT_RANDOM_MAX = 10.0


def _to_examples(features: Array, labels: Array) -> list[LabeledExample]:
    features = np.asarray(features, dtype=np.float64)
    labels = np.asarray(labels, dtype=np.float64)
    return [make_example(label, row) for label, row in zip(labels, features)]


def _with_outliers(key: Array, values: Array) -> Array:
    """Scale a random subset of entries by ``OUTLIER_SCALE``."""
    mask = jax.random.bernoulli(key, OUTLIER_FRACTION, values.shape)
    return jnp.where(mask, values * OUTLIER_SCALE, values)


def _balanced_labels(num_samples: int) -> Array:
    # Alternating +1 / -1 keeps classes balanced for any sample count.
    return jnp.where(jnp.arange(num_samples) % 2 == 0, 1.0, -1.0)


def _classification(key: Array, num_samples: int, dimension: int) -> tuple[Array, Array]:
    keys = jax.random.split(key, 2)
    labels = _balanced_labels(num_samples)
    direction = jax.random.uniform(keys[0], (dimension,), minval=-1.0, maxval=1.0)
    noise = jax.random.normal(keys[1], (num_samples, dimension))
    features = noise * 0.5 + 0.25 * labels[:, None] * direction
    return features, labels


def _regression(key: Array, num_samples: int, dimension: int) -> tuple[Array, Array, Array]:
    keys = jax.random.split(key, 3)
    coefficients = jax.random.uniform(keys[0], (dimension,), minval=-1.0, maxval=1.0)
    features = jax.random.normal(keys[1], (num_samples, dimension))
    noise = jax.random.normal(keys[2], (num_samples,)) * 0.1
    return features, coefficients, noise


def benign_classification(seed: int, num_samples: int, dimension: int) -> list[LabeledExample]:
    """Balanced {-1, +1} classification with unit-scale dense features."""
    features, labels = _classification(jax.random.PRNGKey(seed), num_samples, dimension)
    return _to_examples(features, labels)


def outlier_classification(seed: int, num_samples: int, dimension: int) -> list[LabeledExample]:
    """Balanced classification where some feature entries are outliers."""
    key, outlier_key = jax.random.split(jax.random.PRNGKey(seed))
    features, labels = _classification(key, num_samples, dimension)
    return _to_examples(_with_outliers(outlier_key, features), labels)


def benign_regression(seed: int, num_samples: int, dimension: int) -> list[LabeledExample]:
    """Linear regression: y = x·beta + small Gaussian noise."""
    features, coefficients, noise = _regression(jax.random.PRNGKey(seed), num_samples, dimension)
    return _to_examples(features, features @ coefficients + noise)


def outlier_regression(seed: int, num_samples: int, dimension: int) -> list[LabeledExample]:
    """Linear regression with outlying features and outlying labels."""
    key, feature_key, label_key = jax.random.split(jax.random.PRNGKey(seed), 3)
    features, coefficients, noise = _regression(key, num_samples, dimension)
    labels = _with_outliers(label_key, features @ coefficients + noise)
    return _to_examples(_with_outliers(feature_key, features), labels)


def _poisson(key: Array, num_samples: int, dimension: int) -> tuple[Array, Array]:
    keys = jax.random.split(key, 3)
    coefficients = jax.random.uniform(keys[0], (dimension,), minval=-1.0, maxval=1.0)
    features = jax.random.normal(keys[1], (num_samples, dimension)) * 0.25
    rates = jnp.exp(features @ coefficients)
    labels = jax.random.poisson(keys[2], rates, (num_samples,))
    return features, labels.astype(features.dtype)


def benign_poisson(seed: int, num_samples: int, dimension: int) -> list[LabeledExample]:
    """Count data: y ~ Poisson(exp(x·beta)) with small features."""
    features, labels = _poisson(jax.random.PRNGKey(seed), num_samples, dimension)
    return _to_examples(features, labels)


def outlier_poisson(seed: int, num_samples: int, dimension: int) -> list[LabeledExample]:
    """Count data whose features contain outliers.

    Labels are drawn from the benign rates, so outlying features make the
    fitted rate disagree strongly with the observed counts.
    """
    key, outlier_key = jax.random.split(jax.random.PRNGKey(seed))
    features, labels = _poisson(key, num_samples, dimension)
    return _to_examples(_with_outliers(outlier_key, features), labels)


def weighted_dataset(
    generator: Generator,
    seed: int,
    num_samples: int,
    dimension: int,
    weight_seed: int = WEIGHT_RANDOM_SEED,
    weight_max: float = WEIGHT_RANDOM_MAX,
) -> list[LabeledExample]:
    """Generator output twice: once with weight 1, once with random weights.

    Returns:
        ``2 * num_samples`` examples. The second half repeats the first half's
        labels and features with weights drawn uniformly from
        ``[0, weight_max)``.
    """
    unit = generator(seed, num_samples, dimension)
    rng = np.random.RandomState(weight_seed)
    reweighted = [
        example._replace(weight=float(rng.uniform(0.0, weight_max)))
        for example in generator(seed, num_samples, dimension)
    ]
    return unit + reweighted
