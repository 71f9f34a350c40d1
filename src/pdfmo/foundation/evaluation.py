"""
Safe objective/Jacobian evaluation.

`safe_evalf` and `safe_evalJf` turn domain violations raised by a problem
library into a tagged `EvalOutcome`; any other exception is a genuine bug and
propagates unchanged. The `*_solver` variants are the callbacks handed to
solvers: they unwrap the outcome and re-raise a `DomainViolationError` so the
solver (or the runner around it) can tell domain failures apart from bugs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import numpy as np

from pdfmo.foundation.exceptions import DomainViolationError
from pdfmo.foundation.problem.types import ProblemProtocol

DomainErrors = tuple[type[BaseException], ...]
DEFAULT_DOMAIN_ERRORS: DomainErrors = (DomainViolationError,)


@dataclass(frozen=True)
class EvalOutcome:
    ok: bool
    value: np.ndarray | None = None
    error: BaseException | None = None

    @classmethod
    def success(cls, value: Any) -> "EvalOutcome":
        return cls(ok=True, value=np.asarray(value, dtype=float))

    @classmethod
    def failure(cls, error: BaseException) -> "EvalOutcome":
        return cls(ok=False, error=error)

    def unwrap(self, *, problem: str | None = None) -> np.ndarray:
        if self.ok:
            if self.value is None:
                raise ValueError("Successful evaluation outcome carries no value.")
            return self.value
        if isinstance(self.error, DomainViolationError):
            raise self.error
        raise DomainViolationError(str(self.error) or "Evaluation outside the problem domain.", problem=problem) from self.error


def _guarded(fn: Callable[[np.ndarray], Any], x: np.ndarray, domain_errors: DomainErrors) -> EvalOutcome:
    try:
        return EvalOutcome.success(fn(x))
    except domain_errors as exc:
        return EvalOutcome.failure(exc)


def safe_evalf(problem: ProblemProtocol, x: np.ndarray, *, domain_errors: DomainErrors = DEFAULT_DOMAIN_ERRORS) -> EvalOutcome:
    return _guarded(problem.eval_f, x, domain_errors)


def safe_evalJf(problem: ProblemProtocol, x: np.ndarray, *, domain_errors: DomainErrors = DEFAULT_DOMAIN_ERRORS) -> EvalOutcome:
    return _guarded(getattr(problem, "eval_jacobian"), x, domain_errors)


def safe_evalf_solver(problem: ProblemProtocol, x: np.ndarray, *, domain_errors: DomainErrors = DEFAULT_DOMAIN_ERRORS) -> np.ndarray:
    return safe_evalf(problem, x, domain_errors=domain_errors).unwrap(problem=getattr(problem, "name", None))


def safe_evalJf_solver(problem: ProblemProtocol, x: np.ndarray, *, domain_errors: DomainErrors = DEFAULT_DOMAIN_ERRORS) -> np.ndarray:
    return safe_evalJf(problem, x, domain_errors=domain_errors).unwrap(problem=getattr(problem, "name", None))


def solver_callbacks(
    problem: ProblemProtocol,
    *,
    domain_errors: DomainErrors = DEFAULT_DOMAIN_ERRORS,
) -> tuple[Callable[[np.ndarray], np.ndarray], Callable[[np.ndarray], np.ndarray]]:
    """Return the (evalf, evalJf) closures passed to solver functions."""

    def evalf(x: np.ndarray) -> np.ndarray:
        return safe_evalf_solver(problem, x, domain_errors=domain_errors)

    def evalJf(x: np.ndarray) -> np.ndarray:
        return safe_evalJf_solver(problem, x, domain_errors=domain_errors)

    return evalf, evalJf


__all__ = [
    "EvalOutcome",
    "DomainErrors",
    "DEFAULT_DOMAIN_ERRORS",
    "safe_evalf",
    "safe_evalJf",
    "safe_evalf_solver",
    "safe_evalJf_solver",
    "solver_callbacks",
]
