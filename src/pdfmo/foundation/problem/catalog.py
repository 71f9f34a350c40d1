"""
Problem catalog: named zero-argument constructors for test problems.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import cast

import numpy as np

from pdfmo.foundation.exceptions import InvalidProblemError, ProblemDefinitionError
from pdfmo.foundation.problem.types import ProblemProtocol
from pdfmo.foundation.registry import Registry

ProblemFactory = Callable[[], object]


def validate_problem(problem: ProblemProtocol, name: str) -> None:
    if int(problem.nvar) <= 0 or int(problem.nobj) <= 0:
        raise ProblemDefinitionError(name, "nvar and nobj must be positive.")
    try:
        lower, upper = problem.bounds
    except (TypeError, ValueError) as exc:
        raise ProblemDefinitionError(name, "bounds must be a (lower, upper) pair.") from exc
    lower = np.asarray(lower, dtype=float)
    upper = np.asarray(upper, dtype=float)
    if lower.shape != (problem.nvar,) or upper.shape != (problem.nvar,):
        raise ProblemDefinitionError(name, f"bounds must both have length nvar={problem.nvar}.")
    if np.any(lower > upper):
        raise ProblemDefinitionError(name, "lower bounds must not exceed upper bounds.")


class ProblemCatalog:
    """
    Maps problem names to zero-argument constructors.

    The catalog is the only way the harness reaches the problem library, so
    several catalogs (e.g. a test double and a real library) can coexist.
    """

    def __init__(self, factories: Mapping[str, ProblemFactory] | None = None, *, name: str = "problems") -> None:
        self._registry: Registry[ProblemFactory] = Registry(name)
        for key, factory in (factories or {}).items():
            self._registry.register(key, factory)

    @classmethod
    def from_module(cls, module: object, names: list[str] | None = None) -> "ProblemCatalog":
        """Build a catalog from constructors exposed as module attributes."""
        if names is None:
            names = [attr for attr in dir(module) if not attr.startswith("_") and callable(getattr(module, attr))]
        return cls({name: getattr(module, name) for name in names})

    def register(self, name: str, factory: ProblemFactory, *, override: bool = False) -> ProblemFactory:
        return cast(ProblemFactory, self._registry.register(name, factory, override=override))

    def list(self) -> list[str]:
        return self._registry.list()

    def __contains__(self, name: object) -> bool:
        return name in self._registry

    def __len__(self) -> int:
        return len(self._registry)

    def factory(self, name: str) -> ProblemFactory:
        if name not in self._registry:
            available = self._registry.list()
            raise InvalidProblemError(name, available, self._registry.similar(name))
        return self._registry[name]

    def create(self, name: str) -> ProblemProtocol:
        """Instantiate the problem registered under *name* and check its shape."""
        problem = cast(ProblemProtocol, self.factory(name)())
        validate_problem(problem, name)
        return problem


def problem_bounds(problem: ProblemProtocol) -> tuple[np.ndarray, np.ndarray]:
    lower, upper = problem.bounds
    return np.asarray(lower, dtype=float), np.asarray(upper, dtype=float)


__all__ = ["ProblemCatalog", "ProblemFactory", "validate_problem", "problem_bounds"]
