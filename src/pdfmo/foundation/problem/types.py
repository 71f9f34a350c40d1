from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class ProblemProtocol(Protocol):
    """Test problem exposed by an external problem library."""

    nvar: int
    nobj: int
    name: str
    bounds: tuple[np.ndarray, np.ndarray]

    def eval_f(self, x: np.ndarray) -> np.ndarray: ...


@runtime_checkable
class JacobianProblemProtocol(ProblemProtocol, Protocol):
    def eval_jacobian(self, x: np.ndarray) -> np.ndarray: ...


def has_jacobian(problem: object) -> bool:
    return callable(getattr(problem, "eval_jacobian", None))


__all__ = ["ProblemProtocol", "JacobianProblemProtocol", "has_jacobian"]
