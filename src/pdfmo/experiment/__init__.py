"""
Experiment layer: configuration generation, execution and batched persistence.
"""

from pdfmo.foundation.core.experiment_config import ExperimentConfig, ExperimentResult
from .context import BenchmarkContext
from .generator import datas, generate_experiment_configs, random_starting_points
from .runner import create_failed_result, run_experiment, run_single_experiment
from .settings import BenchmarkPlan, BenchmarkSettings, build_benchmark, load_benchmark_spec
from .batch import JSONStorePersister, ResultPersister, run_experiment_with_batch_saving

__all__ = [
    "ExperimentConfig",
    "ExperimentResult",
    "BenchmarkContext",
    "datas",
    "generate_experiment_configs",
    "random_starting_points",
    "create_failed_result",
    "run_experiment",
    "run_single_experiment",
    "BenchmarkPlan",
    "BenchmarkSettings",
    "build_benchmark",
    "load_benchmark_spec",
    "JSONStorePersister",
    "ResultPersister",
    "run_experiment_with_batch_saving",
]
