from __future__ import annotations

import json

import numpy as np
import pytest

from pdfmo.foundation.core.experiment_config import ExperimentResult
from pdfmo.foundation.exceptions import StoreFormatError, StoreIOError
from pdfmo.store.files import (
    STORE_FORMAT,
    STORE_VERSION,
    append_store,
    load_results,
    load_store,
    save_results,
    store_path,
    write_tree,
)


def _result(solver="PDFPM", run_id=1, success=True):
    final = np.array([0.5, 0.25]) if success else np.full(2, np.nan)
    return ExperimentResult(
        solver_name=solver,
        problem_name="ZDT1",
        run_id=run_id,
        delta=0.05,
        initial_point=np.array([0.3, 0.7, 0.1]),
        success=success,
        iter=7 if success else 0,
        n_f_evals=20 if success else 0,
        n_Jf_evals=0,
        total_time=0.25 if success else 0.0,
        F_init=np.array([1.0, 0.5]) if success else np.full(2, np.nan),
        final_objective_value=final,
        message="" if success else "domain violation",
    )


def test_store_path_suffix(tmp_path):
    assert store_path(tmp_path, "all_results") == tmp_path / "all_results.json"
    assert store_path(tmp_path, "x.json") == tmp_path / "x.json"


def test_save_and_load(tmp_path):
    path = tmp_path / "store.json"
    save_results(path, [_result(run_id=1), _result(run_id=2, success=False)])
    document = json.loads(path.read_text(encoding="utf-8"))
    assert document["format"] == STORE_FORMAT
    assert document["version"] == STORE_VERSION

    ok, failed = load_results(path)
    assert ok.success and ok.iter == 7
    np.testing.assert_allclose(ok.final_objective_value, [0.5, 0.25])
    np.testing.assert_allclose(ok.initial_point, [0.3, 0.7, 0.1])
    assert not failed.success
    assert np.isnan(failed.final_objective_value).all()
    assert failed.message == "domain violation"


def test_write_replaces_atomically(tmp_path):
    path = tmp_path / "store.json"
    write_tree(path, {"PDFPM": {}})
    write_tree(path, {"CondG": {}})
    assert list(load_store(path)) == ["CondG"]
    assert [p.name for p in tmp_path.iterdir()] == ["store.json"]


def test_write_into_missing_parent(tmp_path):
    path = tmp_path / "a" / "b" / "store.json"
    write_tree(path, {})
    assert load_store(path) == {}


def test_write_failure_raises_store_io_error(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(StoreIOError):
        write_tree(blocker / "store.json", {})


def test_append_creates_then_merges(tmp_path):
    final = tmp_path / "results.json"
    temp = tmp_path / "temp_batch_1.json"
    save_results(temp, [_result(run_id=1)])
    assert append_store(final, temp) == 1
    save_results(temp, [_result(run_id=2), _result(solver="CondG")])
    assert append_store(final, temp) == 2
    results = load_results(final)
    assert sorted((r.solver_name, r.run_id) for r in results) == [("CondG", 1), ("PDFPM", 1), ("PDFPM", 2)]


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        json.dumps({"format": "other", "version": 1, "results": {}}),
        json.dumps({"format": STORE_FORMAT, "version": 99, "results": {}}),
        json.dumps({"format": STORE_FORMAT, "version": STORE_VERSION, "results": []}),
        json.dumps([1, 2, 3]),
    ],
)
def test_load_rejects_malformed_files(tmp_path, content):
    path = tmp_path / "bad.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(StoreFormatError):
        load_store(path)


def test_load_missing_file(tmp_path):
    with pytest.raises(StoreIOError):
        load_store(tmp_path / "missing.json")


@pytest.mark.parametrize(
    "existing",
    [
        "{not json",
        json.dumps({"format": STORE_FORMAT, "version": STORE_VERSION, "results": {"PDFPM": {"ZDT1": "x"}}}),
    ],
)
def test_append_into_unreadable_store(tmp_path, existing):
    final = tmp_path / "results.json"
    final.write_text(existing, encoding="utf-8")
    temp = tmp_path / "temp_batch_1.json"
    save_results(temp, [_result(run_id=1)])
    with pytest.raises(StoreIOError) as info:
        append_store(final, temp)
    assert isinstance(info.value.__cause__, StoreFormatError)
    assert final.read_text(encoding="utf-8") == existing
