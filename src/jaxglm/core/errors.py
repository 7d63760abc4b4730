"""Error taxonomy for jaxglm.

Mathematical errors are raised where they are detected and are never
retried: they point at a logic or input error.
"""

from __future__ import annotations


class JaxGLMError(Exception):
    """Base class for all jaxglm errors."""


class NumericOverflow(JaxGLMError, ArithmeticError):
    """A per-example or aggregate computation produced a non-finite value."""

    def __init__(
        self,
        message: str,
        partition: int | None = None,
        example: int | None = None,
    ) -> None:
        location = []
        if partition is not None:
            location.append(f"partition={partition}")
        if example is not None:
            location.append(f"example={example}")
        if location:
            message = f"{message} ({', '.join(location)})"
        super().__init__(message)
        self.partition = partition
        self.example = example


class UnsupportedOperation(JaxGLMError, NotImplementedError):
    """The requested operation is not in the function's capability set."""


class DimensionMismatch(JaxGLMError, ValueError):
    """A vector's length does not equal the configured problem dimension."""

    def __init__(self, what: str, expected: int, actual: int) -> None:
        super().__init__(
            f"{what} has dimension {actual}, expected {expected}"
        )
        self.what = what
        self.expected = expected
        self.actual = actual
