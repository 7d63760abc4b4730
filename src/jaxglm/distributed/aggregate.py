"""Tree aggregation of partition-local partial sums.

Combines per-partition partials through a multi-level tree so that the
driver only ever combines a bounded number of results:

    scale = max(ceil(P ** (1 / depth)), 2)
    while P > scale + ceil(P / scale):
        P = P // scale
        partials = [combine(group) for group in partials grouped by index % P]
    result = combine(partials)

``depth=1`` combines every partial at the driver. Depth only changes
summation order, so results agree across depths up to rounding.
"""

from __future__ import annotations

import functools
import logging
import math
from typing import Callable, NamedTuple, Sequence, TypeVar

import jax
import jax.numpy as jnp
from jax import Array

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PartialSums(NamedTuple):
    """Partition-local sums of per-example contributions.

    Fields that an evaluation does not need stay ``None``; ``None`` is an
    empty pytree node, so ``add_partials`` leaves it untouched.

    Attributes:
        count: Number of examples summed.
        value: Sum of loss values, scalar.
        gradient: Sum of gradients, shape (dim,).
        hessian_vector: Sum of Hessian-vector products, shape (dim,).
    """

    count: Array
    value: Array | None = None
    gradient: Array | None = None
    hessian_vector: Array | None = None


def add_partials(left: T, right: T) -> T:
    """Leaf-wise sum of two partial-sum pytrees."""
    return jax.tree_util.tree_map(jnp.add, left, right)


def tree_aggregate(
    partials: Sequence[T],
    combine: Callable[[T, T], T] = add_partials,
    zero: T | None = None,
    depth: int = 2,
) -> T:
    """Reduce ``partials`` through a balanced tree of the given depth.

    Args:
        partials: One partial result per partition, in partition order.
        combine: Associative, commutative binary combine.
        zero: Result for an empty sequence of partials.
        depth: Suggested tree depth, >= 1.

    Returns:
        The combined result.

    Raises:
        ValueError: If ``depth < 1``, or if ``partials`` is empty and no
            ``zero`` was given.
    """
    if depth < 1:
        raise ValueError(f"depth must be >= 1, got {depth}")
    if not partials:
        if zero is None:
            raise ValueError("cannot aggregate zero partials without a zero value")
        return zero

    level = list(partials)
    num_groups = len(level)
    scale = max(math.ceil(num_groups ** (1.0 / depth)), 2)
    while num_groups > scale + math.ceil(num_groups / scale):
        num_groups //= scale
        level = [
            functools.reduce(combine, level[group::num_groups])
            for group in range(num_groups)
        ]
        logger.debug("tree_aggregate: combined into %d groups", num_groups)

    return functools.reduce(combine, level)

