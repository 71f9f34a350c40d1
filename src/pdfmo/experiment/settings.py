"""
Benchmark settings and benchmark spec loading (YAML or JSON).

A benchmark spec looks like:

    problems: [ZDT1, AP2]
    solvers: [PDFPM, ProxGrad, CondG]
    nrun: 200
    deltas: [0.0, 0.02, 0.05, 0.1]
    seed: 42
    batch_size: 50
    store_name: all_results
    common_options: {verbose: 1, max_iter: 100, opt_tol: 1.0e-4}
    solver_options:
      PDFPM: {max_subproblem_iter: 20, epsilon: 1.0e-4}
    problem_catalog: my_problems:CATALOG
    solver_catalog: my_solvers
"""

from __future__ import annotations

import importlib
import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from pdfmo.foundation.exceptions import ConfigurationError, InvalidBenchmarkSpecError
from pdfmo.foundation.problem.catalog import ProblemCatalog
from pdfmo.foundation.solver.kinds import SolverCatalog
from pdfmo.foundation.solver.options import CommonSolverOptions, SolverSpecificOptions

STORE_DIR_ENV = "PDFMO_STORE_DIR"
DEFAULT_STORE_DIR = os.path.join("data", "sims")


def default_store_dir() -> str:
    # Read at call time so tests and scripts can redirect the store via the environment.
    return os.environ.get(STORE_DIR_ENV, DEFAULT_STORE_DIR)


@dataclass
class BenchmarkSettings:
    store_dir: str = field(default_factory=default_store_dir)
    store_name: str = "results"
    batch_size: int = 50
    seed: int | None = 42


@dataclass
class BenchmarkPlan:
    """A validated benchmark spec, ready for generate_experiment_configs."""

    problems: list[str]
    solvers: list[str]
    nrun: int
    deltas: list[float]
    common_options: CommonSolverOptions
    solver_options: dict[str, SolverSpecificOptions]
    settings: BenchmarkSettings
    problem_catalog: str | None = None
    solver_catalog: str | None = None


_SPEC_KEYS = {
    "problems",
    "solvers",
    "nrun",
    "deltas",
    "seed",
    "batch_size",
    "store_name",
    "store_dir",
    "common_options",
    "solver_options",
    "problem_catalog",
    "solver_catalog",
}


def load_benchmark_spec(path: str | Path) -> dict[str, Any]:
    """
    Load a YAML or JSON benchmark specification.
    """
    spec_path = Path(path).expanduser().resolve()
    if not spec_path.exists():
        raise FileNotFoundError(f"Config file '{spec_path}' does not exist.")
    suffix = spec_path.suffix.lower()
    with spec_path.open("r", encoding="utf-8") as fh:
        if suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(fh) or {}
        else:
            data = json.load(fh)
    if not isinstance(data, dict):
        raise InvalidBenchmarkSpecError("Benchmark spec must be a mapping at the top level.", path=str(spec_path))
    return data


def _require_list(spec: dict[str, Any], key: str) -> list[Any]:
    value = spec.get(key)
    if not isinstance(value, list) or not value:
        raise InvalidBenchmarkSpecError(f"'{key}' must be a non-empty list.", key=key)
    return value


def _option_kwargs(raw: Any, allowed: set[str], key: str) -> dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise InvalidBenchmarkSpecError(f"'{key}' must be a mapping.", key=key)
    unknown = sorted(set(raw) - allowed)
    if unknown:
        raise InvalidBenchmarkSpecError(f"Unknown option(s) in '{key}': {', '.join(unknown)}.", key=key)
    return dict(raw)


def build_benchmark(spec: dict[str, Any], *, overrides: dict[str, Any] | None = None) -> BenchmarkPlan:
    """Validate a loaded spec; `overrides` (e.g. from the CLI) win over file values."""
    merged = dict(spec)
    merged.update({k: v for k, v in (overrides or {}).items() if v is not None})
    unknown = sorted(set(merged) - _SPEC_KEYS)
    if unknown:
        raise InvalidBenchmarkSpecError(f"Unknown benchmark spec key(s): {', '.join(unknown)}.")

    problems = [str(p) for p in _require_list(merged, "problems")]
    solvers = [str(s) for s in _require_list(merged, "solvers")]
    try:
        deltas = [float(d) for d in _require_list(merged, "deltas")]
    except (TypeError, ValueError) as exc:
        raise InvalidBenchmarkSpecError("'deltas' must contain numbers.", key="deltas") from exc
    nrun = merged.get("nrun")
    if isinstance(nrun, bool) or not isinstance(nrun, int) or nrun < 1:
        raise InvalidBenchmarkSpecError("'nrun' must be a positive integer.", key="nrun")

    common_kwargs = _option_kwargs(merged.get("common_options"), {f.name for f in fields(CommonSolverOptions)}, "common_options")
    try:
        common = CommonSolverOptions(**common_kwargs)
    except ConfigurationError as exc:
        raise InvalidBenchmarkSpecError(exc.message, key="common_options") from exc

    specific_fields = {f.name for f in fields(SolverSpecificOptions)}
    raw_solver_options = merged.get("solver_options") or {}
    if not isinstance(raw_solver_options, dict):
        raise InvalidBenchmarkSpecError("'solver_options' must map solver names to options.", key="solver_options")
    solver_options = {
        str(name): SolverSpecificOptions(**_option_kwargs(opts, specific_fields, f"solver_options.{name}"))
        for name, opts in raw_solver_options.items()
    }

    settings = BenchmarkSettings()
    if merged.get("store_dir") is not None:
        settings.store_dir = str(merged["store_dir"])
    if merged.get("store_name") is not None:
        settings.store_name = str(merged["store_name"])
    if merged.get("batch_size") is not None:
        settings.batch_size = int(merged["batch_size"])
    if "seed" in merged:
        settings.seed = None if merged["seed"] is None else int(merged["seed"])

    return BenchmarkPlan(
        problems=problems,
        solvers=solvers,
        nrun=nrun,
        deltas=deltas,
        common_options=common,
        solver_options=solver_options,
        settings=settings,
        problem_catalog=merged.get("problem_catalog"),
        solver_catalog=merged.get("solver_catalog"),
    )


def import_object(target: str) -> Any:
    """Import ``package.module`` or ``package.module:attribute``."""
    module_name, _, attr = target.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise InvalidBenchmarkSpecError(f"Cannot import '{module_name}': {exc}") from exc
    if not attr:
        return module
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise InvalidBenchmarkSpecError(f"Module '{module_name}' has no attribute '{attr}'.") from exc


def resolve_problem_catalog(target: str) -> ProblemCatalog:
    obj = import_object(target)
    if isinstance(obj, ProblemCatalog):
        return obj
    if isinstance(obj, dict):
        return ProblemCatalog(obj)
    return ProblemCatalog.from_module(obj)


def resolve_solver_catalog(target: str) -> SolverCatalog:
    obj = import_object(target)
    if isinstance(obj, SolverCatalog):
        return obj
    if isinstance(obj, dict):
        return SolverCatalog(obj)
    return SolverCatalog.from_module(obj)


__all__ = [
    "STORE_DIR_ENV",
    "DEFAULT_STORE_DIR",
    "BenchmarkSettings",
    "BenchmarkPlan",
    "default_store_dir",
    "load_benchmark_spec",
    "build_benchmark",
    "import_object",
    "resolve_problem_catalog",
    "resolve_solver_catalog",
]
