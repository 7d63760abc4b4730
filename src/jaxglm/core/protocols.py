"""
The two seams of jaxglm: per-example loss kernels and dataset-wide objectives.

What a function can compute is declared as a ``Capability`` flag and checked
with ``supports()`` before any work starts. Regularization decorators narrow
the flags of the objective they wrap, so a chain of decorators reports
exactly the derivatives it can deliver.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from jax import Array

if TYPE_CHECKING:
    from jaxglm.data.example import LabeledExample
    from jaxglm.distributed.dataset import DistributedDataset


class Capability(enum.Flag):
    """Operations a kernel or objective can evaluate."""

    VALUE = enum.auto()
    GRADIENT = enum.auto()
    HESSIAN_VECTOR = enum.auto()

    DIFFERENTIABLE = VALUE | GRADIENT
    TWICE_DIFFERENTIABLE = VALUE | GRADIENT | HESSIAN_VECTOR


@runtime_checkable
class LossKernel(Protocol):
    """Protocol for per-example loss kernels.

    A kernel is pure math over a single example. Kernels never see the
    dataset as a whole; aggregation is the objective's job.
    """

    name: str
    capabilities: Capability

    def value(self, params: Array, example: LabeledExample) -> Array:
        """Loss contribution of one example, a scalar."""
        ...

    def gradient(self, params: Array, example: LabeledExample) -> Array:
        """Gradient contribution of one example, shape (dim,)."""
        ...

    def hessian_vector(
        self, params: Array, direction: Array, example: LabeledExample
    ) -> Array:
        """Hessian-vector product contribution of one example, shape (dim,)."""
        ...


@runtime_checkable
class ObjectiveFunction(Protocol):
    """Protocol for dataset-wide objective functions.

    Implemented by plain GLM objectives and by regularization decorators,
    so a decorated objective can itself be decorated again.
    """

    dimension: int
    capabilities: Capability
    tree_aggregate_depth: int

    def value(self, params: Array, dataset: DistributedDataset) -> float:
        """Objective value summed over the dataset."""
        ...

    def gradient(self, params: Array, dataset: DistributedDataset) -> Array:
        """Gradient summed over the dataset, shape (dimension,)."""
        ...

    def value_and_gradient(
        self, params: Array, dataset: DistributedDataset
    ) -> tuple[float, Array]:
        """Value and gradient from one pass over the dataset."""
        ...

    def hessian_vector(
        self, params: Array, direction: Array, dataset: DistributedDataset
    ) -> Array:
        """Hessian-vector product summed over the dataset, shape (dimension,)."""
        ...


def supports(obj: LossKernel | ObjectiveFunction, capability: Capability) -> bool:
    """Whether ``obj`` declares every operation in ``capability``."""
    return capability in obj.capabilities
