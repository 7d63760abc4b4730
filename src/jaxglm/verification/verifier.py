"""Finite-difference consistency checks for objective functions.

For each iteration a parameter vector θ is drawn (the zero vector first,
then uniform [0, 1) vectors from a seeded RandomState) and every coordinate
i is perturbed by ±δ:

- gradient check:  (f(θ + δeᵢ) - f(θ - δeᵢ)) / 2δ  vs  ∇f(θ)ᵢ
- Hessian check:   (∇f(θ + δeᵢ)_b - ∇f(θ - δeᵢ)_b) / 2δ  vs  (H(θ) e_b)ᵢ

A cell passes when the relative error OR the absolute error is below the
tolerance. Non-finite evaluations fail the cell outright. All cells are
checked before anything is raised, so one run reports every violation.

Example:
    >>> verifier = ConsistencyVerifier(ConsistencyConfig(num_iterations=5))
    >>> report = verifier.verify("logistic, benign", objective, dataset)
    >>> report.raise_for_failures()
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Literal, NamedTuple

import numpy as np

from jaxglm.core.errors import JaxGLMError, NumericOverflow
from jaxglm.core.protocols import Capability, ObjectiveFunction, supports
from jaxglm.distributed.dataset import DistributedDataset

logger = logging.getLogger(__name__)

CheckKind = Literal["gradient", "hessian"]


@dataclass
class ConsistencyConfig:
    """Configuration for consistency checks.

    Attributes:
        num_iterations: Parameter vectors to check. The first is all zeros.
        delta: Finite-difference step δ.
        gradient_tolerance: Tolerance for gradient cells.
        hessian_tolerance: Tolerance for Hessian cells.
        parameter_seed: Seed for the random parameter draws.
        verbose: Whether to log a summary per report at INFO level.
    """

    num_iterations: int = 5
    delta: float = 1e-6
    gradient_tolerance: float = 1e-3
    hessian_tolerance: float = 1e-3
    parameter_seed: int = 500
    verbose: bool = False

    def __post_init__(self) -> None:
        if self.num_iterations < 1:
            raise ValueError(f"num_iterations must be >= 1, got {self.num_iterations}")
        if not self.delta > 0:
            raise ValueError(f"delta must be positive, got {self.delta}")
        if not (self.gradient_tolerance > 0 and self.hessian_tolerance > 0):
            raise ValueError("tolerances must be positive")


class CellResult(NamedTuple):
    """Outcome of comparing one analytic derivative entry with its estimate.

    Attributes:
        check: "gradient" or "hessian".
        iteration: Parameter draw index.
        coordinate: Perturbed coordinate i.
        basis: Hessian column b, None for gradient cells.
        numeric: Central-difference estimate.
        analytic: Analytic value.
        absolute_error: |numeric - analytic|.
        relative_error: absolute_error / max(|numeric|, |analytic|).
        finite: Whether every evaluation behind the cell was finite.
        passed: Whether the cell is accepted.
    """

    check: CheckKind
    iteration: int
    coordinate: int
    basis: int | None
    numeric: float
    analytic: float
    absolute_error: float
    relative_error: float
    finite: bool
    passed: bool

    def describe(self) -> str:
        where = f"iter=[{self.iteration}], idx=[{self.coordinate}]"
        if self.basis is not None:
            where += f", basis=[{self.basis}]"
        if not self.finite:
            return f"{self.check} {where}: non-finite objective evaluation"
        return (
            f"{self.check} {where}: estimated [{self.numeric}] v. computed "
            f"[{self.analytic}] with absolute error [{self.absolute_error}] "
            f"and relative error [{self.relative_error}]"
        )


class ConsistencyFailure(JaxGLMError, AssertionError):
    """Analytic derivatives disagree with finite-difference estimates."""

    def __init__(self, description: str, failures: list[CellResult]) -> None:
        lines = [f"{description}: {len(failures)} inconsistent cell(s)"]
        lines.extend(f"  {cell.describe()}" for cell in failures)
        super().__init__("\n".join(lines))
        self.description = description
        self.failures = failures


@dataclass
class VerificationReport:
    """All checked cells for one objective/dataset pair."""

    description: str
    cells: list[CellResult] = field(default_factory=list)

    @property
    def failures(self) -> list[CellResult]:
        return [cell for cell in self.cells if not cell.passed]

    @property
    def passed(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        """Raise ``ConsistencyFailure`` listing every failed cell, if any."""
        if self.failures:
            raise ConsistencyFailure(self.description, self.failures)


def compare(numeric: float, analytic: float, tolerance: float) -> tuple[float, float, bool]:
    """Absolute error, relative error and acceptance of one cell."""
    absolute = abs(numeric - analytic)
    denominator = max(abs(numeric), abs(analytic))
    if denominator == 0:
        denominator = 1.0
    relative = absolute / denominator
    return absolute, relative, relative < tolerance or absolute < tolerance


def _non_finite_cell(
    check: CheckKind, iteration: int, coordinate: int, basis: int | None
) -> CellResult:
    nan = float("nan")
    return CellResult(check, iteration, coordinate, basis, nan, nan, nan, nan, False, False)


class ConsistencyVerifier:
    """Checks objectives' derivatives against central finite differences.

    Only the checks an objective's capabilities allow are generated: every
    differentiable objective gets the gradient check, twice differentiable
    ones also get the Hessian check.
    """

    def __init__(self, config: ConsistencyConfig | None = None) -> None:
        self.config = config or ConsistencyConfig()

    def parameter_draws(self, dimension: int) -> list[np.ndarray]:
        """Parameter vectors to check: zeros, then seeded uniform draws."""
        rng = np.random.RandomState(self.config.parameter_seed)
        draws = [np.zeros(dimension)]
        for _ in range(1, self.config.num_iterations):
            draws.append(rng.uniform(size=dimension))
        return draws

    def verify(
        self,
        description: str,
        objective: ObjectiveFunction,
        dataset: DistributedDataset,
    ) -> VerificationReport:
        """Run every check ``objective`` supports and return the combined report."""
        report = VerificationReport(description)
        if supports(objective, Capability.GRADIENT):
            report.cells.extend(self.check_gradient(description, objective, dataset).cells)
        if supports(objective, Capability.HESSIAN_VECTOR):
            report.cells.extend(self.check_hessian(description, objective, dataset).cells)
        return report

    def check_gradient(
        self,
        description: str,
        objective: ObjectiveFunction,
        dataset: DistributedDataset,
    ) -> VerificationReport:
        """Compare the analytic gradient with central differences of the value."""
        config = self.config
        report = VerificationReport(description)

        for iteration, params in enumerate(self.parameter_draws(objective.dimension)):
            computed = _evaluate(lambda: np.asarray(objective.gradient(params, dataset)))
            for idx in range(objective.dimension):
                before, after = _perturbed(params, idx, config.delta)
                obj_before = _evaluate(lambda: objective.value(before, dataset))
                obj_after = _evaluate(lambda: objective.value(after, dataset))
                if not _all_finite(computed) or not _finite(obj_before, obj_after):
                    report.cells.append(_non_finite_cell("gradient", iteration, idx, None))
                    continue
                numeric = (obj_after - obj_before) / (2.0 * config.delta)
                analytic = float(computed[idx])
                absolute, relative, passed = compare(
                    numeric, analytic, config.gradient_tolerance
                )
                report.cells.append(
                    CellResult(
                        "gradient", iteration, idx, None, numeric, analytic,
                        absolute, relative, True, passed,
                    )
                )

        self._log(report)
        return report

    def check_hessian(
        self,
        description: str,
        objective: ObjectiveFunction,
        dataset: DistributedDataset,
    ) -> VerificationReport:
        """Compare Hessian-vector products with central differences of the gradient.

        H e_b is the b-th column of the Hessian, so its i-th entry is compared
        against the derivative of gradient coordinate b along coordinate i.
        """
        config = self.config
        dimension = objective.dimension
        report = VerificationReport(description)

        for iteration, params in enumerate(self.parameter_draws(dimension)):
            # Perturbed gradients do not depend on the basis; compute them once.
            perturbed = []
            for idx in range(dimension):
                before, after = _perturbed(params, idx, config.delta)
                perturbed.append(
                    (
                        _evaluate(lambda: np.asarray(objective.gradient(before, dataset))),
                        _evaluate(lambda: np.asarray(objective.gradient(after, dataset))),
                    )
                )

            for basis in range(dimension):
                direction = np.zeros(dimension)
                direction[basis] = 1.0
                hessian_vector = _evaluate(
                    lambda: np.asarray(objective.hessian_vector(params, direction, dataset))
                )
                for idx, (grad_before, grad_after) in enumerate(perturbed):
                    if (
                        not _all_finite(hessian_vector)
                        or grad_before is None
                        or grad_after is None
                        or not _finite(grad_before[basis], grad_after[basis])
                    ):
                        report.cells.append(_non_finite_cell("hessian", iteration, idx, basis))
                        continue
                    numeric = float(grad_after[basis] - grad_before[basis]) / (2.0 * config.delta)
                    analytic = float(hessian_vector[idx])
                    absolute, relative, passed = compare(
                        numeric, analytic, config.hessian_tolerance
                    )
                    report.cells.append(
                        CellResult(
                            "hessian", iteration, idx, basis, numeric, analytic,
                            absolute, relative, True, passed,
                        )
                    )

        self._log(report)
        return report

    def _log(self, report: VerificationReport) -> None:
        for cell in report.failures:
            logger.warning("%s: %s", report.description, cell.describe())
        level = logging.INFO if self.config.verbose else logging.DEBUG
        logger.log(
            level,
            "%s: %d/%d cells consistent",
            report.description,
            len(report.cells) - len(report.failures),
            len(report.cells),
        )


def _perturbed(params: np.ndarray, idx: int, delta: float) -> tuple[np.ndarray, np.ndarray]:
    before = params.copy()
    before[idx] -= delta
    after = params.copy()
    after[idx] += delta
    return before, after


def _evaluate(fn: Callable[[], object]):
    """Run one evaluation, mapping ``NumericOverflow`` to ``None``.

    Overflow is recorded as a non-finite cell by the caller rather than
    aborting the scenario.
    """
    try:
        return fn()
    except NumericOverflow as e:
        logger.warning("non-finite evaluation: %s", e)
        return None


def _finite(*values: float | None) -> bool:
    return all(value is not None and math.isfinite(value) for value in values)


def _all_finite(values: np.ndarray | None) -> bool:
    return values is not None and bool(np.all(np.isfinite(values)))
