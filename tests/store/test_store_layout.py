from __future__ import annotations

import copy
import warnings

import numpy as np
import pytest

from pdfmo.foundation.core.experiment_config import ExperimentResult
from pdfmo.foundation.exceptions import StoreFormatError, StoreKeyCollisionWarning
from pdfmo.store.layout import (
    count_leaves,
    delta_key,
    iter_leaves,
    merge_trees,
    parse_delta_key,
    parse_run_key,
    result_path,
    results_to_tree,
    run_key,
    tree_to_results,
)


def _result(solver="PDFPM", problem="ZDT1", delta=0.0, run_id=1, value=1.0):
    return ExperimentResult(
        solver_name=solver,
        problem_name=problem,
        run_id=run_id,
        delta=delta,
        initial_point=np.array([0.1, 0.2]),
        success=True,
        iter=5,
        n_f_evals=10,
        n_Jf_evals=2,
        total_time=0.5,
        F_init=np.array([value, value]),
        final_objective_value=np.array([value / 2, value / 2]),
    )


@pytest.mark.parametrize(
    "delta, key",
    [(0.0, "delta_0-0"), (0.1, "delta_0-1"), (0.05, "delta_0-05"), (2.0, "delta_2-0"), (1e-05, "delta_1e-05")],
)
def test_delta_keys(delta, key):
    assert delta_key(delta) == key
    assert parse_delta_key(key) == delta


def test_run_keys():
    assert run_key(12) == "run_12"
    assert parse_run_key("run_12") == 12
    with pytest.raises(StoreFormatError):
        parse_run_key("trial_1")
    with pytest.raises(StoreFormatError):
        parse_run_key("run_x")
    with pytest.raises(StoreFormatError):
        parse_delta_key("0-1")


def test_tree_layout():
    results = [_result(run_id=1), _result(run_id=2), _result(solver="CondG", delta=0.1)]
    tree = results_to_tree(results)
    assert sorted(tree["PDFPM"]["ZDT1"]["delta_0-0"]) == ["run_1", "run_2"]
    assert result_path(results[2]) == ("CondG", "ZDT1", "delta_0-1", "run_1")
    assert count_leaves(tree) == 3
    restored = tree_to_results(tree)
    assert [(r.solver_name, r.run_id) for r in restored] == [("PDFPM", 1), ("PDFPM", 2), ("CondG", 1)]


def test_duplicate_results_warn():
    with pytest.warns(StoreKeyCollisionWarning):
        tree = results_to_tree([_result(value=1.0), _result(value=3.0)])
    (_, leaf), = list(iter_leaves(tree))
    assert leaf["F_init"] == [3.0, 3.0]


def test_merge_disjoint_keys_is_union():
    dest = results_to_tree([_result(run_id=1), _result(solver="CondG", run_id=1)])
    src = results_to_tree([_result(run_id=2), _result(delta=0.1), _result(problem="AP2")])
    dest_before = copy.deepcopy(dest)
    src_before = copy.deepcopy(src)

    with warnings.catch_warnings():
        warnings.simplefilter("error", StoreKeyCollisionWarning)
        collisions = merge_trees(dest, src)

    assert collisions == 0
    merged = dict(iter_leaves(dest))
    expected = dict(iter_leaves(dest_before))
    expected.update(dict(iter_leaves(src_before)))
    assert merged == expected


def test_merge_collision_overwrites_and_warns(caplog):
    dest = results_to_tree([_result(value=1.0)])
    src = results_to_tree([_result(value=4.0)])
    with pytest.warns(StoreKeyCollisionWarning, match="PDFPM/ZDT1/delta_0-0/run_1"):
        collisions = merge_trees(dest, src)
    assert collisions == 1
    assert dest["PDFPM"]["ZDT1"]["delta_0-0"]["run_1"]["F_init"] == [4.0, 4.0]
    assert "Overwriting" in caplog.text


def test_merge_level_mismatch():
    with pytest.raises(StoreFormatError):
        merge_trees({"PDFPM": {"ZDT1": 1}}, {"PDFPM": {"ZDT1": {"delta_0-0": {}}}})


def test_malformed_leaf():
    tree = {"PDFPM": {"ZDT1": {"delta_0-0": {"run_1": {"solver_name": "PDFPM"}}}}}
    with pytest.raises(StoreFormatError, match="PDFPM/ZDT1/delta_0-0/run_1"):
        tree_to_results(tree)
