from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import numpy as np
import pytest

from pdfmo.experiment.batch import JSONStorePersister, run_experiment_with_batch_saving
from pdfmo.experiment.context import BenchmarkContext
from pdfmo.experiment.runner import run_experiment
from pdfmo.experiment.settings import STORE_DIR_ENV
from pdfmo.foundation.exceptions import ConfigurationError, StoreIOError
from pdfmo.foundation.solver.kinds import SolverCatalog
from pdfmo.store.files import load_results, load_store, save_results, write_tree


class RecordingPersister:
    def __init__(self, path: Path):
        self.path = path
        self.batches: list[list] = []

    def flush(self, results):
        self.batches.append(list(results))
        return self.path


def _configs(make_config, n, solver="PDFPM"):
    return [make_config(solver, "ZDT1", run_id=i) for i in range(1, n + 1)]


def _leftovers(directory: Path) -> list[str]:
    return sorted(p.name for p in directory.iterdir() if p.name.startswith(("temp_batch_", ".")))


def test_five_configs_flush_two_two_one(context, make_config, tmp_path):
    persister = RecordingPersister(tmp_path / "unused.json")
    configs = _configs(make_config, 5)
    results = run_experiment_with_batch_saving(configs, context=context, batch_size=2, persister=persister)
    assert [len(batch) for batch in persister.batches] == [2, 2, 1]
    assert [r.run_id for r in results] == [1, 2, 3, 4, 5]
    flushed = [r.run_id for batch in persister.batches for r in batch]
    assert flushed == [1, 2, 3, 4, 5]


def test_flushed_batches_are_not_reused(context, make_config, tmp_path):
    persister = RecordingPersister(tmp_path / "unused.json")
    run_experiment_with_batch_saving(_configs(make_config, 4), context=context, batch_size=2, persister=persister)
    first, second = persister.batches
    assert [r.run_id for r in first] == [1, 2]
    assert [r.run_id for r in second] == [3, 4]


def test_small_run_flushes_once(context, make_config, tmp_path):
    persister = RecordingPersister(tmp_path / "unused.json")
    run_experiment_with_batch_saving(_configs(make_config, 3), context=context, batch_size=50, persister=persister)
    assert [len(batch) for batch in persister.batches] == [3]


def test_empty_run_writes_nothing(context, tmp_path):
    results = run_experiment_with_batch_saving([], context=context, store_dir=tmp_path)
    assert results == []
    assert list(tmp_path.iterdir()) == []


def test_store_holds_every_result(context, make_config, tmp_path):
    configs = _configs(make_config, 5) + [make_config("CondG", "ZDT1", run_id=1, delta=0.1)]
    results = run_experiment_with_batch_saving(
        configs, context=context, batch_size=2, store_dir=tmp_path, store_name="all_results"
    )
    store = tmp_path / "all_results.json"
    tree = load_store(store)
    assert sorted(tree["PDFPM"]["ZDT1"]["delta_0-0"]) == ["run_1", "run_2", "run_3", "run_4", "run_5"]
    assert list(tree["CondG"]["ZDT1"]) == ["delta_0-1"]
    assert len(load_results(store)) == len(results) == 6
    assert _leftovers(tmp_path) == []


def test_interrupt_keeps_completed_batches(context, make_config, tmp_path):
    calls = {"n": 0}

    def interrupted(evalf, data_matrices, delta, x0, options, *, lb, ub, evalJf=None):
        calls["n"] += 1
        if calls["n"] == 5:
            raise KeyboardInterrupt
        F = evalf(x0)
        return SimpleNamespace(success=True, iter=1, n_f_evals=1, n_Jf_evals=0, total_time=0.0, F_init=F, Fval=F)

    ctx = BenchmarkContext(problems=context.problems, solvers=SolverCatalog({"PDFPM": interrupted}))
    with pytest.raises(KeyboardInterrupt):
        run_experiment_with_batch_saving(_configs(make_config, 6), context=ctx, batch_size=2, store_dir=tmp_path)

    persisted = load_results(tmp_path / "results.json")
    assert sorted(r.run_id for r in persisted) == [1, 2, 3, 4]
    assert all(r.success for r in persisted)
    assert _leftovers(tmp_path) == []


def test_appends_to_existing_store(context, make_config, tmp_path):
    run_experiment_with_batch_saving(_configs(make_config, 2), context=context, store_dir=tmp_path)
    run_experiment_with_batch_saving(_configs(make_config, 2, solver="CondG"), context=context, store_dir=tmp_path)
    tree = load_store(tmp_path / "results.json")
    assert sorted(tree) == ["CondG", "PDFPM"]


def test_fresh_discards_existing_store(context, make_config, tmp_path):
    run_experiment_with_batch_saving(_configs(make_config, 2), context=context, store_dir=tmp_path)
    run_experiment_with_batch_saving(
        _configs(make_config, 1, solver="CondG"), context=context, store_dir=tmp_path, fresh=True
    )
    assert list(load_store(tmp_path / "results.json")) == ["CondG"]


def test_store_dir_from_environment(context, make_config, tmp_path, monkeypatch):
    monkeypatch.setenv(STORE_DIR_ENV, str(tmp_path / "sims"))
    run_experiment_with_batch_saving(_configs(make_config, 1), context=context)
    assert (tmp_path / "sims" / "results.json").is_file()


def test_temp_file_removed_when_merge_fails(context, make_config, tmp_path, monkeypatch):
    def failing_append(final_path, temp_path):
        assert Path(temp_path).is_file()
        raise StoreIOError(str(final_path), "disk full")

    monkeypatch.setattr("pdfmo.experiment.batch.append_store", failing_append)
    with pytest.raises(StoreIOError):
        run_experiment_with_batch_saving(_configs(make_config, 3), context=context, batch_size=2, store_dir=tmp_path)
    assert _leftovers(tmp_path) == []
    assert not (tmp_path / "results.json").exists()


def test_malformed_existing_store_raises_store_io_error(context, make_config, tmp_path):
    final = tmp_path / "results.json"
    write_tree(final, {"PDFPM": {"ZDT1": "not-a-dict"}})
    before = final.read_text(encoding="utf-8")
    with pytest.raises(StoreIOError):
        run_experiment_with_batch_saving(_configs(make_config, 3), context=context, batch_size=2, store_dir=tmp_path)
    assert _leftovers(tmp_path) == []
    assert final.read_text(encoding="utf-8") == before


def test_persister_counts_flushes(make_config, context, tmp_path):
    persister = JSONStorePersister(tmp_path / "nested" / "store.json")
    batch = run_experiment(_configs(make_config, 2), context=context)
    assert persister.flush(batch) == tmp_path / "nested" / "store.json"
    assert persister.flush_count == 1
    assert len(load_results(persister.final_path)) == 2


@pytest.mark.parametrize("batch_size", [0, -3, 1.5, True])
def test_invalid_batch_size(context, make_config, tmp_path, batch_size):
    with pytest.raises(ConfigurationError):
        run_experiment_with_batch_saving(
            _configs(make_config, 1), context=context, batch_size=batch_size, store_dir=tmp_path
        )


def test_returned_results_independent_of_persistence(context, make_config, tmp_path):
    save_results(tmp_path / "results.json", [])
    results = run_experiment_with_batch_saving(_configs(make_config, 3), context=context, batch_size=1, store_dir=tmp_path)
    assert len(results) == 3
    assert all(np.isfinite(r.final_objective_value).all() for r in results)
