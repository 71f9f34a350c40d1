from __future__ import annotations

import logging
from types import SimpleNamespace

import numpy as np
import pytest

from pdfmo.experiment.context import BenchmarkContext
from pdfmo.foundation.core.experiment_config import ExperimentConfig
from pdfmo.foundation.exceptions import DomainViolationError
from pdfmo.foundation.solver.options import CommonSolverOptions, SolverConfiguration


class ZDT1Like:
    """Smooth bi-objective problem on the unit box."""

    name = "ZDT1"

    def __init__(self, nvar: int = 3):
        self.nvar = nvar
        self.nobj = 2
        self.bounds = (np.zeros(nvar), np.ones(nvar))

    def eval_f(self, x):
        x = np.asarray(x, dtype=float)
        g = 1.0 + 9.0 * np.sum(x[1:]) / (self.nvar - 1)
        return np.array([x[0], g * (1.0 - np.sqrt(x[0] / g))])

    def eval_jacobian(self, x):
        return np.ones((self.nobj, self.nvar))


class TriObjectiveNoJacobian:
    name = "TRI"

    def __init__(self):
        self.nvar = 4
        self.nobj = 3
        self.bounds = (np.full(4, -1.0), np.full(4, 1.0))

    def eval_f(self, x):
        x = np.asarray(x, dtype=float)
        return np.array([np.sum(x**2), np.sum((x - 1) ** 2), np.sum((x + 1) ** 2)])


class OutOfDomainProblem:
    """Every evaluation is outside the domain."""

    name = "BROKEN"

    def __init__(self):
        self.nvar = 2
        self.nobj = 2
        self.bounds = (np.zeros(2), np.ones(2))

    def eval_f(self, x):
        raise DomainViolationError("log of a negative number", problem=self.name)

    def eval_jacobian(self, x):
        raise DomainViolationError("log of a negative number", problem=self.name)


def _outcome(evalf, x0, *, n_Jf_evals=0):
    F0 = np.asarray(evalf(x0), dtype=float)
    return SimpleNamespace(
        success=True,
        iter=3,
        n_f_evals=4,
        n_Jf_evals=n_Jf_evals,
        total_time=0.01,
        F_init=F0,
        Fval=F0 * 0.5,
        message="converged",
    )


class SolverRecorder:
    """Collects the arguments every fake solver receives."""

    def __init__(self):
        self.calls: list[dict] = []

    def objective_only(self, evalf, data_matrices, delta, x0, options, *, lb, ub, evalJf=None):
        self.calls.append(
            {
                "convention": "objective_only",
                "data_matrices": data_matrices,
                "delta": delta,
                "x0": x0,
                "options": options,
                "lb": lb,
                "ub": ub,
                "evalJf": evalJf,
            }
        )
        return _outcome(evalf, x0)

    def with_jacobian(self, evalf, evalJf, data_matrices, delta, x0, options, *, lb, ub):
        self.calls.append(
            {
                "convention": "with_jacobian",
                "data_matrices": data_matrices,
                "delta": delta,
                "x0": x0,
                "options": options,
                "lb": lb,
                "ub": ub,
                "evalJf": evalJf,
            }
        )
        evalJf(x0)
        return _outcome(evalf, x0, n_Jf_evals=1)


@pytest.fixture(autouse=True)
def _restore_pdfmo_logger():
    logger = logging.getLogger("pdfmo")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


PROBLEMS = {"ZDT1": ZDT1Like, "TRI": TriObjectiveNoJacobian, "BROKEN": OutOfDomainProblem}


@pytest.fixture
def recorder() -> SolverRecorder:
    return SolverRecorder()


@pytest.fixture
def context(recorder: SolverRecorder) -> BenchmarkContext:
    return BenchmarkContext.build(
        problems=PROBLEMS,
        solvers={
            "PDFPM": recorder.objective_only,
            "DFreeMO": recorder.objective_only,
            "ProxGrad": recorder.with_jacobian,
            "CondG": recorder.with_jacobian,
        },
    )


@pytest.fixture
def common_options() -> CommonSolverOptions:
    return CommonSolverOptions(max_iter=20, opt_tol=1e-4)


@pytest.fixture
def make_config(common_options):
    def _make(
        solver_name: str = "PDFPM",
        problem_name: str = "ZDT1",
        *,
        run_id: int = 1,
        delta: float = 0.0,
        nvar: int = 3,
        nobj: int = 2,
    ) -> ExperimentConfig:
        rng = np.random.default_rng(run_id)
        return ExperimentConfig(
            solver_name=solver_name,
            problem_name=problem_name,
            run_id=run_id,
            delta=delta,
            initial_point=rng.random(nvar),
            solver_config=SolverConfiguration(common_options),
            data_matrices=tuple(rng.random((nvar, nvar)) for _ in range(nobj)),
        )

    return _make
