"""
Benchmark context: the explicit bundle of collaborators a run needs.

Problem libraries, solver implementations and the solver-kind table are
passed around in a `BenchmarkContext` rather than read from module globals,
so independent benchmark setups can run side by side in one process.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pdfmo.foundation.evaluation import DEFAULT_DOMAIN_ERRORS, DomainErrors
from pdfmo.foundation.problem.catalog import ProblemCatalog, ProblemFactory
from pdfmo.foundation.registry import Registry
from pdfmo.foundation.solver.kinds import SOLVER_KINDS, SolverCatalog, SolverFunction, SolverKind, resolve_solver_kind


@dataclass(frozen=True)
class BenchmarkContext:
    problems: ProblemCatalog
    solvers: SolverCatalog = field(default_factory=SolverCatalog)
    kinds: Registry[SolverKind] = field(default_factory=lambda: SOLVER_KINDS)
    domain_errors: DomainErrors = DEFAULT_DOMAIN_ERRORS

    @classmethod
    def build(
        cls,
        problems: ProblemCatalog | Mapping[str, ProblemFactory],
        solvers: SolverCatalog | Mapping[str, SolverFunction] | None = None,
        **kwargs: Any,
    ) -> "BenchmarkContext":
        catalog = problems if isinstance(problems, ProblemCatalog) else ProblemCatalog(problems)
        solver_catalog = solvers if isinstance(solvers, SolverCatalog) else SolverCatalog(solvers)
        return cls(problems=catalog, solvers=solver_catalog, **kwargs)

    def solver_kind(self, solver_name: str) -> SolverKind:
        return resolve_solver_kind(solver_name, self.kinds)


__all__ = ["BenchmarkContext"]
