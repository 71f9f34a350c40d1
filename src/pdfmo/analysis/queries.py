"""
Read-side helpers for result stores.

These functions traverse the solver/problem/delta/run tree to feed analysis
and plotting scripts. They never modify a store.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import numpy as np

from pdfmo.foundation.exceptions import InvalidProblemError
from pdfmo.foundation.problem.catalog import ProblemCatalog
from pdfmo.store.files import STORE_SUFFIX, load_store
from pdfmo.store.layout import DELTA_PREFIX, RUN_PREFIX, delta_key, iter_leaves, parse_delta_key, parse_run_key, run_key

PERFORMANCE_METRICS = ("iter", "n_f_evals", "n_Jf_evals", "total_time")

InstanceKey = tuple[str, float, int]


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


def list_store_files(store_dir: str | Path) -> list[Path]:
    """Return the store files in `store_dir`, sorted by name. Temporary batch files are skipped."""
    base = Path(store_dir)
    if not base.is_dir():
        _logger().info("Store directory not found: %s", base)
        return []
    return sorted(
        path
        for path in base.glob(f"*{STORE_SUFFIX}")
        if path.is_file() and not path.name.startswith(("temp_batch_", "."))
    )


def get_file_metadata(path: str | Path) -> dict[str, Any]:
    """Summarise a store: solvers, problems, deltas and result counts."""
    tree = load_store(path)
    problems: set[str] = set()
    deltas: set[float] = set()
    total = 0
    successes = 0
    for (_, problem, dkey, _), leaf in iter_leaves(tree):
        problems.add(problem)
        deltas.add(parse_delta_key(dkey))
        total += 1
        successes += int(bool(leaf.get("success")))
    return {
        "path": str(path),
        "solvers": sorted(tree),
        "problems": sorted(problems),
        "deltas": sorted(deltas),
        "n_results": total,
        "n_successful": successes,
    }


def list_solvers_for_problem(path: str | Path, problem_name: str) -> list[str]:
    tree = load_store(path)
    return [solver for solver, problems in tree.items() if problem_name in problems]


def is_biobjective_problem(problem_name: str, catalog: ProblemCatalog) -> bool:
    """
    True when the problem has exactly two objectives.

    Problems missing from the catalog are reported as non-biobjective; any
    error raised while instantiating a known problem propagates.
    """
    try:
        factory = catalog.factory(problem_name)
    except InvalidProblemError:
        _logger().warning("Problem '%s' not found in catalog; treating as non-biobjective.", problem_name)
        return False
    try:
        problem = factory()
    except Exception:
        _logger().error("Failed to instantiate problem '%s' for biobjective check", problem_name, exc_info=True)
        raise
    return int(problem.nobj) == 2


def list_biobjective_problems(path: str | Path, catalog: ProblemCatalog) -> list[str]:
    tree = load_store(path)
    found: list[str] = []
    for problems in tree.values():
        for problem_name in problems:
            if problem_name not in found and is_biobjective_problem(problem_name, catalog):
                found.append(problem_name)
    _logger().info("Biobjective problems in %s: %s", Path(path).name, found)
    return found


def filter_solvers(available_solvers: Sequence[str], target_solvers: Sequence[str]) -> list[str]:
    """Keep the available solvers that were requested, in availability order."""
    selected = [solver for solver in available_solvers if solver in target_solvers]
    if not selected:
        _logger().warning(
            "None of the requested solvers were found. Available: %s; requested: %s",
            list(available_solvers),
            list(target_solvers),
        )
    return selected


def extract_performance_data(
    path: str | Path,
    metric: str,
    target_solvers: Sequence[str],
) -> tuple[np.ndarray, list[InstanceKey]]:
    """
    Build an (instances x solvers) matrix of `metric`.

    Rows are every (problem, delta, run_id) seen for any selected solver,
    sorted; columns follow the order of the selected solvers. Failed runs and
    missing entries are NaN.
    """
    if metric not in PERFORMANCE_METRICS:
        raise ValueError(f"Unknown metric '{metric}'. Available: {', '.join(PERFORMANCE_METRICS)}")
    tree = load_store(path)
    solvers = filter_solvers(list(tree), target_solvers)
    if not solvers:
        return np.empty((0, 0)), []

    instances: set[InstanceKey] = set()
    for solver in solvers:
        for problem, deltas in tree[solver].items():
            for dkey, runs in deltas.items():
                delta = parse_delta_key(dkey)
                for rkey in runs:
                    instances.add((problem, delta, parse_run_key(rkey)))
    rows = sorted(instances)
    if not rows:
        return np.empty((0, len(solvers))), []

    matrix = np.full((len(rows), len(solvers)), np.nan)
    for i, (problem, delta, run_id) in enumerate(rows):
        dkey, rkey = delta_key(delta), run_key(run_id)
        for j, solver in enumerate(solvers):
            leaf = tree[solver].get(problem, {}).get(dkey, {}).get(rkey)
            if leaf and leaf.get("success") and metric in leaf:
                matrix[i, j] = float(leaf[metric])
    return matrix, rows


def extract_problem_data(
    path: str | Path,
    problem_name: str,
    solver_name: str,
) -> tuple[list[float], dict[float, list[np.ndarray]]]:
    """Final objective vectors of successful runs, grouped by delta."""
    tree = load_store(path)
    points: dict[float, list[np.ndarray]] = {}
    if solver_name not in tree:
        _logger().warning("Solver '%s' not found in %s", solver_name, path)
        return [], points
    deltas = tree[solver_name].get(problem_name)
    if deltas is None:
        _logger().warning("Problem '%s' not found for solver '%s'", problem_name, solver_name)
        return [], points

    for dkey, runs in deltas.items():
        if not dkey.startswith(DELTA_PREFIX):
            continue
        delta = parse_delta_key(dkey)
        for rkey, leaf in runs.items():
            if rkey.startswith(RUN_PREFIX) and leaf.get("success"):
                points.setdefault(delta, []).append(np.asarray(leaf["final_objective_value"], dtype=float))
    return sorted(points), points


def get_successful_results_count(
    path: str | Path,
    *,
    solver: str | None = None,
    problem: str | None = None,
) -> int:
    tree = load_store(path)
    count = 0
    for (solver_name, problem_name, _, _), leaf in iter_leaves(tree):
        if solver is not None and solver_name != solver:
            continue
        if problem is not None and problem_name != problem:
            continue
        count += int(bool(leaf.get("success")))
    return count


def validate_biobjective_data(points: Sequence[Any]) -> bool:
    """True when `points` is non-empty and every point is a finite 2-vector."""
    if len(points) == 0:
        return False
    for point in points:
        arr = np.asarray(point, dtype=float)
        if arr.shape != (2,) or not np.all(np.isfinite(arr)):
            return False
    return True


__all__ = [
    "PERFORMANCE_METRICS",
    "list_store_files",
    "get_file_metadata",
    "list_solvers_for_problem",
    "is_biobjective_problem",
    "list_biobjective_problems",
    "filter_solvers",
    "extract_performance_data",
    "extract_problem_data",
    "get_successful_results_count",
    "validate_biobjective_data",
]
