"""
Performance-profile data (Dolan & Moré, 2002).

For a cost matrix T with one row per instance and one column per solver,
the ratio r[p, s] = T[p, s] / min_s T[p, s] and the profile
rho_s(tau) = |{p : r[p, s] <= tau}| / n_p. Failed runs (NaN) never reach
any tau. Only the data is produced here; rendering is left to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Sequence

import numpy as np


@dataclass(frozen=True)
class PerformanceProfile:
    solvers: tuple[str, ...]
    taus: np.ndarray
    rho: np.ndarray  # shape (len(taus), len(solvers))
    ratios: np.ndarray  # shape (n_instances, len(solvers)); inf for failures
    n_instances: int

    def for_solver(self, solver: str) -> np.ndarray:
        return self.rho[:, self.solvers.index(solver)]


def performance_ratios(matrix: np.ndarray) -> np.ndarray:
    """
    Ratios to the best solver per row; rows where every solver failed are dropped.

    A row whose best cost is 0 gives ratio 1 to every solver with cost 0 and
    inf to the others.
    """
    T = np.asarray(matrix, dtype=float)
    if T.ndim != 2:
        raise ValueError(f"Performance matrix must be 2-D; got shape {T.shape}.")
    if np.any(T[np.isfinite(T)] < 0):
        raise ValueError("Performance costs must be non-negative.")
    valid = ~np.all(np.isnan(T), axis=1)
    T = T[valid]
    if T.shape[0] == 0:
        return np.empty((0, T.shape[1]))
    costs = np.where(np.isnan(T), np.inf, T)
    best = np.min(costs, axis=1, keepdims=True)
    with np.errstate(divide="ignore", invalid="ignore"):
        ratios = costs / best
    zero_best = np.broadcast_to(best == 0, costs.shape)
    ratios = np.where(zero_best, np.where(costs == 0, 1.0, np.inf), ratios)
    return ratios


def performance_profile(
    matrix: np.ndarray,
    solvers: Sequence[str],
    taus: Sequence[float] | None = None,
) -> PerformanceProfile:
    """
    Compute rho_s(tau) for each solver.

    When `taus` is None the grid is every distinct finite ratio, so the
    profile steps are exact.
    """
    solver_names = tuple(solvers)
    T = np.asarray(matrix, dtype=float)
    if T.ndim != 2 or T.shape[1] != len(solver_names):
        raise ValueError(f"Matrix must have one column per solver ({len(solver_names)}); got shape {T.shape}.")
    ratios = performance_ratios(T)
    n_instances = ratios.shape[0]
    if taus is None:
        finite = ratios[np.isfinite(ratios)]
        grid = np.unique(np.concatenate([[1.0], finite]))
    else:
        grid = np.sort(np.asarray(taus, dtype=float))
    if n_instances == 0:
        rho = np.zeros((grid.shape[0], len(solver_names)))
    else:
        rho = np.stack([(ratios <= tau).sum(axis=0) / n_instances for tau in grid])
    return PerformanceProfile(solvers=solver_names, taus=grid, rho=rho, ratios=ratios, n_instances=n_instances)


__all__ = ["PerformanceProfile", "performance_ratios", "performance_profile"]
