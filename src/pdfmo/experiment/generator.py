"""
Experiment grid generation.

Random inputs are drawn once per problem (starting points) and once per
(problem, delta) pair (perturbation matrices) and then shared by every solver,
so solver comparisons on the same (problem, delta) see identical data.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping, Sequence

import numpy as np

from pdfmo.experiment.context import BenchmarkContext
from pdfmo.foundation.core.experiment_config import ExperimentConfig
from pdfmo.foundation.exceptions import ConfigurationError
from pdfmo.foundation.problem.catalog import ProblemCatalog, problem_bounds
from pdfmo.foundation.registry import Registry
from pdfmo.foundation.solver.kinds import SolverKind, resolve_solver_kind
from pdfmo.foundation.solver.options import CommonSolverOptions, SolverConfiguration, SolverSpecificOptions

RngLike = np.random.Generator | int | None


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


def as_generator(rng: RngLike) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def datas(n: int, m: int, rng: RngLike = None) -> list[np.ndarray]:
    """
    Draw `m` matrices of shape (n, n) with entries uniform in [0, 1).

    One matrix per objective; they parametrise the nondifferentiable
    perturbation term scaled by delta. Drawn for every delta, including 0.
    """
    gen = as_generator(rng)
    return [gen.random((n, n)) for _ in range(m)]


def random_starting_points(lower: np.ndarray, upper: np.ndarray, nrun: int, rng: RngLike = None) -> list[np.ndarray]:
    """Draw `nrun` points uniformly inside the box [lower, upper]."""
    gen = as_generator(rng)
    lower = np.asarray(lower, dtype=float)
    upper = np.asarray(upper, dtype=float)
    return [lower + gen.random(lower.shape[0]) * (upper - lower) for _ in range(nrun)]


def _shared_payload(matrices: Iterable[np.ndarray]) -> tuple[np.ndarray, ...]:
    payload = []
    for mat in matrices:
        arr = np.asarray(mat, dtype=float)
        arr.setflags(write=False)
        payload.append(arr)
    return tuple(payload)


def _check_grid(problems: Sequence[str], solvers: Sequence[str], nrun: int, deltas: Sequence[float]) -> None:
    if not problems:
        raise ConfigurationError("At least one problem is required.")
    if not solvers:
        raise ConfigurationError("At least one solver is required.")
    if not deltas:
        raise ConfigurationError("At least one delta value is required.")
    if isinstance(nrun, bool) or int(nrun) != nrun or nrun < 1:
        raise ConfigurationError(f"nrun must be a positive integer; got {nrun!r}.")
    for delta in deltas:
        if not math.isfinite(float(delta)) or float(delta) < 0:
            raise ConfigurationError(f"delta values must be finite and non-negative; got {delta!r}.")
    if len(set(problems)) != len(problems):
        raise ConfigurationError(f"Duplicate problem names: {list(problems)}.")
    if len(set(solvers)) != len(solvers):
        raise ConfigurationError(f"Duplicate solver names: {list(solvers)}.")
    if len({float(delta) for delta in deltas}) != len(deltas):
        raise ConfigurationError(f"Duplicate delta values: {list(deltas)}.")


def generate_experiment_configs(
    problems: Sequence[str],
    solvers: Sequence[str],
    nrun: int,
    deltas: Sequence[float],
    common_options: CommonSolverOptions,
    *,
    catalog: ProblemCatalog | BenchmarkContext,
    solver_specific_options: Mapping[str, SolverSpecificOptions] | None = None,
    rng: RngLike = None,
    kinds: Registry[SolverKind] | None = None,
) -> list[ExperimentConfig]:
    """
    Expand problems x deltas x solvers x trials into experiment configs.

    Args:
        problems: Problem names registered in the catalog.
        solvers: Solver names registered as solver kinds.
        nrun: Number of trials (starting points) per problem.
        deltas: Perturbation levels.
        common_options: Options shared by every solver.
        catalog: Problem catalog, or a BenchmarkContext providing one.
        solver_specific_options: Per-solver overrides; missing solvers use defaults.
        rng: Seed or numpy Generator; a fixed seed gives identical configs.
        kinds: Solver-kind table (defaults to the context's or the global one).

    Returns:
        ``len(problems) * len(deltas) * len(solvers) * nrun`` configs, ordered by
        problem, delta, solver, then run_id.
    """
    problem_names = [str(p) for p in problems]
    solver_names = [str(s) for s in solvers]
    delta_values = [float(d) for d in deltas]
    _check_grid(problem_names, solver_names, nrun, delta_values)

    if isinstance(catalog, BenchmarkContext):
        kinds = kinds if kinds is not None else catalog.kinds
        problem_catalog = catalog.problems
    else:
        problem_catalog = catalog
    for solver in solver_names:
        resolve_solver_kind(solver, kinds)

    overrides = dict(solver_specific_options or {})
    unused = sorted(set(overrides) - set(solver_names))
    if unused:
        _logger().warning("Ignoring solver-specific options for solvers not in the run: %s", ", ".join(unused))

    gen = as_generator(rng)
    configs: list[ExperimentConfig] = []
    for problem_name in problem_names:
        problem = problem_catalog.create(problem_name)
        lower, upper = problem_bounds(problem)
        n, m = int(problem.nvar), int(problem.nobj)
        initial_points = random_starting_points(lower, upper, int(nrun), gen)

        for delta in delta_values:
            data_matrices = _shared_payload(datas(n, m, gen))

            for solver_name in solver_names:
                specific = overrides.get(solver_name, SolverSpecificOptions())
                solver_config = SolverConfiguration(common_options, specific)
                for run_id, x0 in enumerate(initial_points, start=1):
                    configs.append(
                        ExperimentConfig(
                            solver_name=solver_name,
                            problem_name=problem_name,
                            run_id=run_id,
                            delta=delta,
                            initial_point=x0.copy(),
                            solver_config=solver_config,
                            data_matrices=data_matrices,
                        )
                    )

        _logger().debug(
            "Generated %d configs for %s (nvar=%d, nobj=%d)",
            len(delta_values) * len(solver_names) * int(nrun),
            problem_name,
            n,
            m,
        )

    _logger().info("Generated %d experiment configs", len(configs))
    return configs


__all__ = ["generate_experiment_configs", "datas", "random_starting_points", "as_generator"]
