"""Core abstractions and protocols for jaxglm."""

from jaxglm.core.errors import (
    DimensionMismatch,
    JaxGLMError,
    NumericOverflow,
    UnsupportedOperation,
)
from jaxglm.core.protocols import Capability, LossKernel, ObjectiveFunction, supports

__all__ = [
    "Capability",
    "LossKernel",
    "ObjectiveFunction",
    "supports",
    "JaxGLMError",
    "NumericOverflow",
    "UnsupportedOperation",
    "DimensionMismatch",
]
