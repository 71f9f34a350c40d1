"""
Single-experiment execution.

`run_single_experiment` never raises for per-instance failures: domain
violations, unsupported solvers, solver exceptions and solver-reported
non-success all come back as a failed `ExperimentResult` with NaN objective
vectors, so one pathological starting point cannot stop a benchmark.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import numpy as np

from pdfmo.experiment.context import BenchmarkContext
from pdfmo.foundation.core.experiment_config import ExperimentConfig, ExperimentResult
from pdfmo.foundation.evaluation import solver_callbacks
from pdfmo.foundation.exceptions import (
    ConfigurationError,
    DomainViolationError,
    ProblemError,
    SolverInternalError,
    UnsupportedSolverError,
)
from pdfmo.foundation.problem.catalog import problem_bounds
from pdfmo.foundation.problem.types import ProblemProtocol, has_jacobian
from pdfmo.foundation.solver.kinds import CallingConvention, SolverKind, get_solver_options


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


def create_failed_result(config: ExperimentConfig, nobj: int, message: str = "") -> ExperimentResult:
    return ExperimentResult.failed(config, nobj, message)


def _dispatch(
    kind: SolverKind,
    solver_fn: Any,
    problem: ProblemProtocol,
    config: ExperimentConfig,
    options: Any,
    context: BenchmarkContext,
) -> Any:
    evalf, evalJf = solver_callbacks(problem, domain_errors=context.domain_errors)
    lower, upper = problem_bounds(problem)
    matrices = list(config.data_matrices)
    x0 = np.array(config.initial_point, dtype=float)

    if kind.convention is CallingConvention.OBJECTIVE_ONLY:
        kwargs: dict[str, Any] = {"lb": lower, "ub": upper}
        if kind.optional_jacobian and has_jacobian(problem):
            kwargs["evalJf"] = evalJf
        return solver_fn(evalf, matrices, config.delta, x0, options, **kwargs)
    if kind.convention is CallingConvention.WITH_JACOBIAN:
        if not has_jacobian(problem):
            raise UnsupportedSolverError(kind.name, f"Problem '{config.problem_name}' provides no Jacobian.")
        return solver_fn(evalf, evalJf, matrices, config.delta, x0, options, lb=lower, ub=upper)
    raise UnsupportedSolverError(kind.name, f"Unknown calling convention {kind.convention!r}.")


def _vector(value: Any, nobj: int) -> np.ndarray:
    if value is None:
        return np.full(nobj, np.nan)
    arr = np.array(value, dtype=float).reshape(-1)
    if arr.shape != (nobj,):
        raise ValueError(f"expected {nobj} objective values, got {arr.size}")
    return arr


def _result_from_solver(config: ExperimentConfig, raw: Any, nobj: int) -> ExperimentResult:
    return ExperimentResult(
        solver_name=config.solver_name,
        problem_name=config.problem_name,
        run_id=config.run_id,
        delta=config.delta,
        initial_point=np.array(config.initial_point, dtype=float),
        success=True,
        iter=int(raw.iter),
        n_f_evals=int(raw.n_f_evals),
        n_Jf_evals=int(raw.n_Jf_evals),
        total_time=float(raw.total_time),
        F_init=_vector(getattr(raw, "F_init", None), nobj),
        final_objective_value=_vector(raw.Fval, nobj),
        message=str(getattr(raw, "message", "") or ""),
    )


def run_single_experiment(config: ExperimentConfig, *, context: BenchmarkContext) -> ExperimentResult:
    """
    Run one experiment instance and convert the outcome into a result record.

    The problem is resolved from the context catalog, options are mapped for the
    solver kind and the solver is called with the convention its kind declares.
    """
    try:
        problem = context.problems.create(config.problem_name)
    except ProblemError as exc:
        _logger().warning("Cannot resolve problem for %s: %s", config.describe(), exc.message)
        return create_failed_result(config, len(config.data_matrices) or 1, exc.message)
    except Exception as exc:
        _logger().warning("Problem constructor failed for %s", config.describe(), exc_info=True)
        return create_failed_result(config, len(config.data_matrices) or 1, f"problem construction failed: {exc}")
    nobj = int(problem.nobj)

    try:
        kind = context.solver_kind(config.solver_name)
        options = get_solver_options(config.solver_name, config.solver_config, kinds=context.kinds)
        solver_fn = context.solvers.function(config.solver_name)
        raw = _dispatch(kind, solver_fn, problem, config, options, context)
    except DomainViolationError as exc:
        _logger().info("Domain violation in %s: %s", config.describe(), exc.message)
        return create_failed_result(config, nobj, f"domain violation: {exc.message}")
    except ConfigurationError as exc:
        _logger().error("Configuration error in %s: %s", config.describe(), exc.message)
        return create_failed_result(config, nobj, exc.message)
    except Exception as exc:
        err = SolverInternalError(config.solver_name, config.problem_name, config.run_id, config.delta, exc)
        _logger().warning("%s", err.message, exc_info=True)
        return create_failed_result(config, nobj, err.message)

    if not bool(getattr(raw, "success", False)):
        message = str(getattr(raw, "message", "") or "solver reported failure")
        _logger().info("Solver did not succeed on %s: %s", config.describe(), message)
        return create_failed_result(config, nobj, message)

    try:
        return _result_from_solver(config, raw, nobj)
    except (AttributeError, TypeError, ValueError) as exc:
        _logger().warning("Malformed solver result for %s: %s", config.describe(), exc)
        return create_failed_result(config, nobj, f"malformed solver result: {exc}")


def run_experiment(configs: Sequence[ExperimentConfig], *, context: BenchmarkContext) -> list[ExperimentResult]:
    """Run every config in order and keep all results in memory."""
    total = len(configs)
    _logger().info("Running %d experiments", total)
    results: list[ExperimentResult] = []
    for idx, config in enumerate(configs, start=1):
        _logger().debug("[Experiment] (%d/%d) %s", idx, total, config.describe())
        result = run_single_experiment(config, context=context)
        if not result.success:
            _logger().debug("Run failed: %s (%s)", config.describe(), result.message)
        results.append(result)
    return results


__all__ = ["run_single_experiment", "run_experiment", "create_failed_result"]
