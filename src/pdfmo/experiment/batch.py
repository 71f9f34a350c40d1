"""
Batched execution with resilient persistence.

Results are buffered in memory and flushed every `batch_size` runs: the batch
is written to a uniquely named temporary store, merged into the final store,
and the temporary file is removed on every exit path. A crash therefore loses
at most the results of the batch in progress.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from pdfmo.experiment.context import BenchmarkContext
from pdfmo.experiment.runner import run_single_experiment
from pdfmo.experiment.settings import default_store_dir
from pdfmo.foundation.core.experiment_config import ExperimentConfig, ExperimentResult
from pdfmo.foundation.exceptions import ConfigurationError, StoreIOError
from pdfmo.store.files import STORE_SUFFIX, append_store, save_results, store_path


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


class ResultPersister(Protocol):
    """
    Protocol for components that persist a batch of results.
    """

    def flush(self, results: Sequence[ExperimentResult]) -> Path:
        """
        Persist `results` durably and return the final store path.
        """
        ...


class JSONStorePersister:
    """
    Appends batches to a JSON store via a temporary store file.
    """

    def __init__(self, final_path: str | Path) -> None:
        self.final_path = Path(final_path)
        self.flush_count = 0

    def _temp_path(self) -> Path:
        try:
            self.final_path.parent.mkdir(parents=True, exist_ok=True)
            fd, name = tempfile.mkstemp(prefix="temp_batch_", suffix=STORE_SUFFIX, dir=self.final_path.parent)
        except OSError as exc:
            raise StoreIOError(str(self.final_path.parent), str(exc)) from exc
        os.close(fd)
        return Path(name)

    def flush(self, results: Sequence[ExperimentResult]) -> Path:
        temp_path = self._temp_path()
        try:
            save_results(temp_path, results)
            append_store(self.final_path, temp_path)
        finally:
            if temp_path.exists():
                temp_path.unlink()
        self.flush_count += 1
        _logger().info("Flushed %d results into %s", len(results), self.final_path)
        return self.final_path


def run_experiment_with_batch_saving(
    configs: Sequence[ExperimentConfig],
    *,
    context: BenchmarkContext,
    batch_size: int = 50,
    store_name: str = "results",
    store_dir: str | Path | None = None,
    fresh: bool = False,
    persister: ResultPersister | None = None,
) -> list[ExperimentResult]:
    """
    Run `configs` in order, persisting results every `batch_size` runs.

    Args:
        configs: Experiment instances to execute.
        context: Problem and solver collaborators.
        batch_size: Number of results buffered between flushes.
        store_name: File name (without suffix) of the final store.
        store_dir: Directory holding the store; defaults to the settings store dir.
        fresh: Delete an existing final store before running.
        persister: Custom persistence backend; defaults to a JSONStorePersister.

    Returns:
        Every result in input order, independent of what was persisted.
    """
    if isinstance(batch_size, bool) or int(batch_size) != batch_size or batch_size < 1:
        raise ConfigurationError(f"batch_size must be a positive integer; got {batch_size!r}.")

    if persister is None:
        final_path = store_path(store_dir if store_dir is not None else default_store_dir(), store_name)
        if fresh and final_path.exists():
            _logger().info("Starting fresh store: removing %s", final_path)
            final_path.unlink()
        persister = JSONStorePersister(final_path)

    total = len(configs)
    all_results: list[ExperimentResult] = []

    if total <= batch_size:
        _logger().info("Running %d experiments (not above batch size %d); saving once at the end", total, batch_size)
        for config in configs:
            all_results.append(run_single_experiment(config, context=context))
        if all_results:
            persister.flush(all_results)
        return all_results

    _logger().info("Batch saving enabled: %d experiments, batch size %d", total, batch_size)
    current_batch: list[ExperimentResult] = []
    for idx, config in enumerate(configs, start=1):
        _logger().debug("[Experiment] (%d/%d) %s", idx, total, config.describe())
        result = run_single_experiment(config, context=context)
        all_results.append(result)
        current_batch.append(result)

        if len(current_batch) >= batch_size or idx == total:
            persister.flush(current_batch)
            current_batch = []

    _logger().info("Batch execution finished: %d results", len(all_results))
    return all_results


__all__ = ["ResultPersister", "JSONStorePersister", "run_experiment_with_batch_saving"]
