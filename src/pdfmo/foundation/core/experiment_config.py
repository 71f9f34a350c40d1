from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Sequence

import numpy as np

from pdfmo.foundation.exceptions import ConfigurationError
from pdfmo.foundation.solver.options import SolverConfiguration


def _readonly_vector(values: Any, *, name: str) -> np.ndarray:
    arr = np.array(values, dtype=float)
    if arr.ndim != 1:
        raise ConfigurationError(f"{name} must be a 1-D vector; got shape {arr.shape}.")
    arr.setflags(write=False)
    return arr


def _readonly_matrices(matrices: Sequence[Any]) -> tuple[np.ndarray, ...]:
    if isinstance(matrices, tuple) and all(
        isinstance(m, np.ndarray) and m.dtype == float and not m.flags.writeable for m in matrices
    ):
        # Already normalised: keep the shared payload by reference.
        return matrices
    out = []
    for m in matrices:
        arr = np.array(m, dtype=float)
        arr.setflags(write=False)
        out.append(arr)
    return tuple(out)


@dataclass(frozen=True, eq=False)
class ExperimentConfig:
    """
    Everything needed to reproduce one experiment instance.

    `data_matrices` is shared by reference between every config generated for
    the same (problem, delta) pair and must never be mutated.
    """

    solver_name: str
    problem_name: str
    run_id: int
    delta: float
    initial_point: np.ndarray
    solver_config: SolverConfiguration
    data_matrices: tuple[np.ndarray, ...] = ()

    def __post_init__(self) -> None:
        solver = str(self.solver_name)
        problem = str(self.problem_name)
        if not solver or not problem:
            raise ConfigurationError("solver_name and problem_name must be non-empty.")
        if isinstance(self.run_id, bool) or int(self.run_id) != self.run_id or int(self.run_id) < 1:
            raise ConfigurationError(f"run_id must be a positive integer; got {self.run_id!r}.")
        delta = float(self.delta)
        if not math.isfinite(delta) or delta < 0:
            raise ConfigurationError(f"delta must be a finite non-negative number; got {self.delta!r}.")
        point = _readonly_vector(self.initial_point, name="initial_point")
        if point.size == 0:
            raise ConfigurationError("initial_point must be non-empty.")
        matrices = _readonly_matrices(self.data_matrices)
        if matrices:
            ref_shape = matrices[0].shape
            for idx, mat in enumerate(matrices, start=1):
                if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
                    raise ConfigurationError(f"data_matrices must be square; matrix {idx} has shape {mat.shape}.")
                if mat.shape != ref_shape:
                    raise ConfigurationError(f"data_matrices must all have the same size; mismatch at index {idx}.")

        object.__setattr__(self, "solver_name", solver)
        object.__setattr__(self, "problem_name", problem)
        object.__setattr__(self, "run_id", int(self.run_id))
        object.__setattr__(self, "delta", delta)
        object.__setattr__(self, "initial_point", point)
        object.__setattr__(self, "data_matrices", matrices)

    @property
    def group_key(self) -> tuple[str, str, float]:
        return (self.problem_name, self.solver_name, self.delta)

    def describe(self) -> str:
        return f"{self.solver_name} | {self.problem_name} | delta={self.delta} | run_id={self.run_id}"


@dataclass(frozen=True, eq=False)
class ExperimentResult:
    """Outcome of one experiment instance. Failed runs keep a fixed shape."""

    solver_name: str
    problem_name: str
    run_id: int
    delta: float
    initial_point: np.ndarray
    success: bool
    iter: int
    n_f_evals: int
    n_Jf_evals: int
    total_time: float
    F_init: np.ndarray
    final_objective_value: np.ndarray
    message: str = field(default="")

    @classmethod
    def failed(cls, config: ExperimentConfig, n_obj: int, message: str = "") -> "ExperimentResult":
        return cls(
            solver_name=config.solver_name,
            problem_name=config.problem_name,
            run_id=config.run_id,
            delta=config.delta,
            initial_point=np.array(config.initial_point, dtype=float),
            success=False,
            iter=0,
            n_f_evals=0,
            n_Jf_evals=0,
            total_time=0.0,
            F_init=np.full(n_obj, np.nan),
            final_objective_value=np.full(n_obj, np.nan),
            message=message,
        )

    @property
    def n_obj(self) -> int:
        return int(self.final_objective_value.shape[0])

    def to_dict(self) -> dict[str, Any]:
        return {
            "solver_name": self.solver_name,
            "problem_name": self.problem_name,
            "run_id": int(self.run_id),
            "delta": float(self.delta),
            "initial_point": [float(v) for v in self.initial_point],
            "success": bool(self.success),
            "iter": int(self.iter),
            "n_f_evals": int(self.n_f_evals),
            "n_Jf_evals": int(self.n_Jf_evals),
            "total_time": float(self.total_time),
            "F_init": [float(v) for v in self.F_init],
            "final_objective_value": [float(v) for v in self.final_objective_value],
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExperimentResult":
        return cls(
            solver_name=str(data["solver_name"]),
            problem_name=str(data["problem_name"]),
            run_id=int(data["run_id"]),
            delta=float(data["delta"]),
            initial_point=np.asarray(data["initial_point"], dtype=float),
            success=bool(data["success"]),
            iter=int(data["iter"]),
            n_f_evals=int(data["n_f_evals"]),
            n_Jf_evals=int(data["n_Jf_evals"]),
            total_time=float(data["total_time"]),
            F_init=np.asarray(data["F_init"], dtype=float),
            final_objective_value=np.asarray(data["final_objective_value"], dtype=float),
            message=str(data.get("message", "")),
        )

    def to_row(self) -> dict[str, Any]:
        row = {
            "solver": self.solver_name,
            "problem": self.problem_name,
            "delta": self.delta,
            "run_id": self.run_id,
            "success": self.success,
            "iter": self.iter,
            "n_f_evals": self.n_f_evals,
            "n_Jf_evals": self.n_Jf_evals,
            "total_time": self.total_time,
            "message": self.message,
        }
        for idx, value in enumerate(self.F_init, start=1):
            row[f"F_init_{idx}"] = float(value)
        for idx, value in enumerate(self.final_objective_value, start=1):
            row[f"F_final_{idx}"] = float(value)
        return row


__all__ = ["ExperimentConfig", "ExperimentResult"]
