"""
Store tree layout.

Results live in a four-level tree:

    <solver_name>/<problem_name>/delta_<d>/run_<run_id> -> serialized ExperimentResult

`delta_<d>` is ``repr(float(delta))`` with the decimal point replaced by ``-``
(``0.1 -> delta_0-1``, ``1e-05 -> delta_1e-05``).
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Iterable, Iterator
from typing import Any

from pdfmo.foundation.core.experiment_config import ExperimentResult
from pdfmo.foundation.exceptions import StoreFormatError, StoreKeyCollisionWarning

DELTA_PREFIX = "delta_"
RUN_PREFIX = "run_"
LEAF_DEPTH = 4

Tree = dict[str, Any]
KeyPath = tuple[str, str, str, str]


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


def delta_key(delta: float) -> str:
    return DELTA_PREFIX + repr(float(delta)).replace(".", "-")


def parse_delta_key(key: str) -> float:
    if not key.startswith(DELTA_PREFIX):
        raise StoreFormatError(f"Not a delta key: '{key}'.")
    text = key[len(DELTA_PREFIX) :]
    mantissa, sep, exponent = text.partition("e")
    try:
        return float(mantissa.replace("-", ".") + sep + exponent)
    except ValueError as exc:
        raise StoreFormatError(f"Malformed delta key: '{key}'.") from exc


def run_key(run_id: int) -> str:
    return f"{RUN_PREFIX}{int(run_id)}"


def parse_run_key(key: str) -> int:
    if not key.startswith(RUN_PREFIX):
        raise StoreFormatError(f"Not a run key: '{key}'.")
    try:
        return int(key[len(RUN_PREFIX) :])
    except ValueError as exc:
        raise StoreFormatError(f"Malformed run key: '{key}'.") from exc


def result_path(result: ExperimentResult) -> KeyPath:
    return (result.solver_name, result.problem_name, delta_key(result.delta), run_key(result.run_id))


def results_to_tree(results: Iterable[ExperimentResult]) -> Tree:
    tree: Tree = {}
    for result in results:
        solver, problem, dkey, rkey = result_path(result)
        runs = tree.setdefault(solver, {}).setdefault(problem, {}).setdefault(dkey, {})
        if rkey in runs:
            warnings.warn(
                f"Duplicate result for {solver}/{problem}/{dkey}/{rkey}; keeping the later one.",
                StoreKeyCollisionWarning,
                stacklevel=2,
            )
        runs[rkey] = result.to_dict()
    return tree


def iter_leaves(tree: Tree) -> Iterator[tuple[KeyPath, dict[str, Any]]]:
    for solver, problems in tree.items():
        for problem, deltas in problems.items():
            for dkey, runs in deltas.items():
                for rkey, leaf in runs.items():
                    yield (solver, problem, dkey, rkey), leaf


def tree_to_results(tree: Tree) -> list[ExperimentResult]:
    results = []
    for path, leaf in iter_leaves(tree):
        try:
            results.append(ExperimentResult.from_dict(leaf))
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreFormatError(f"Malformed result at {'/'.join(path)}: {exc}") from exc
    return results


def count_leaves(tree: Tree) -> int:
    return sum(1 for _ in iter_leaves(tree))


def merge_trees(dest: Tree, src: Tree, *, _path: tuple[str, ...] = ()) -> int:
    """
    Recursively merge `src` into `dest` in place.

    Nested levels present in both trees are merged key by key. When the same
    leaf path exists in both, the `src` value wins and a
    StoreKeyCollisionWarning is emitted.

    Returns:
        Number of leaf collisions.
    """
    collisions = 0
    depth = len(_path) + 1
    for key, value in src.items():
        path = _path + (key,)
        if key not in dest:
            dest[key] = value
            continue
        if depth < LEAF_DEPTH:
            if not isinstance(dest[key], dict) or not isinstance(value, dict):
                raise StoreFormatError(f"Store level mismatch at '{'/'.join(path)}'.")
            collisions += merge_trees(dest[key], value, _path=path)
            continue
        joined = "/".join(path)
        _logger().warning("Overwriting existing store entry %s", joined)
        warnings.warn(f"Overwriting existing store entry {joined}", StoreKeyCollisionWarning, stacklevel=2)
        dest[key] = value
        collisions += 1
    return collisions


__all__ = [
    "DELTA_PREFIX",
    "RUN_PREFIX",
    "LEAF_DEPTH",
    "Tree",
    "KeyPath",
    "delta_key",
    "parse_delta_key",
    "run_key",
    "parse_run_key",
    "result_path",
    "results_to_tree",
    "tree_to_results",
    "iter_leaves",
    "count_leaves",
    "merge_trees",
]
