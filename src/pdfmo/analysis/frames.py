"""
Tabular views of experiment results.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import pandas as pd

from pdfmo.foundation.core.experiment_config import ExperimentResult
from pdfmo.store.files import load_results

KEY_COLUMNS = ["solver", "problem", "delta", "run_id"]


def results_to_frame(results: Iterable[ExperimentResult]) -> pd.DataFrame:
    """One row per result; objective vectors are spread over F_init_i / F_final_i columns."""
    rows = [result.to_row() for result in results]
    if not rows:
        return pd.DataFrame(columns=KEY_COLUMNS)
    frame = pd.DataFrame(rows)
    return frame.sort_values(KEY_COLUMNS, kind="stable").reset_index(drop=True)


def store_to_frame(path: str | Path) -> pd.DataFrame:
    return results_to_frame(load_results(path))


def success_rates(frame: pd.DataFrame) -> pd.DataFrame:
    """Fraction of successful runs per (solver, problem, delta)."""
    if frame.empty:
        return pd.DataFrame(columns=["solver", "problem", "delta", "runs", "successes", "success_rate"])
    grouped = frame.groupby(["solver", "problem", "delta"], sort=True)["success"]
    summary = grouped.agg(runs="size", successes="sum").reset_index()
    summary["success_rate"] = summary["successes"] / summary["runs"]
    return summary


__all__ = ["results_to_frame", "store_to_frame", "success_rates"]
