"""
pdfmo: experiment orchestration for multiobjective solver benchmarks.

Typical use:

    from pdfmo import (
        BenchmarkContext,
        CommonSolverOptions,
        generate_experiment_configs,
        run_experiment_with_batch_saving,
    )

    context = BenchmarkContext.build(problems={"ZDT1": ZDT1}, solvers={"PDFPM": PDFPM})
    configs = generate_experiment_configs(
        ["ZDT1"], ["PDFPM"], 10, [0.0, 0.05], CommonSolverOptions(), catalog=context, rng=42
    )
    results = run_experiment_with_batch_saving(configs, context=context, store_dir="data/sims")
"""

from pdfmo.experiment import (
    BenchmarkContext,
    BenchmarkPlan,
    BenchmarkSettings,
    ExperimentConfig,
    ExperimentResult,
    JSONStorePersister,
    ResultPersister,
    build_benchmark,
    create_failed_result,
    datas,
    generate_experiment_configs,
    load_benchmark_spec,
    run_experiment,
    run_experiment_with_batch_saving,
    run_single_experiment,
)
from pdfmo.foundation.exceptions import (
    ConfigurationError,
    DomainViolationError,
    PDFMOError,
    StoreError,
    UnknownSolverError,
    UnsupportedSolverError,
)
from pdfmo.foundation.logging import configure_pdfmo_logging
from pdfmo.foundation.problem import ProblemCatalog
from pdfmo.foundation.solver import (
    CommonSolverOptions,
    SolverCatalog,
    SolverConfiguration,
    SolverSpecificOptions,
    get_solver_options,
)

__version__ = "0.1.0"

__all__ = [
    "BenchmarkContext",
    "BenchmarkPlan",
    "BenchmarkSettings",
    "ExperimentConfig",
    "ExperimentResult",
    "JSONStorePersister",
    "ResultPersister",
    "build_benchmark",
    "create_failed_result",
    "datas",
    "generate_experiment_configs",
    "load_benchmark_spec",
    "run_experiment",
    "run_experiment_with_batch_saving",
    "run_single_experiment",
    "ConfigurationError",
    "DomainViolationError",
    "PDFMOError",
    "StoreError",
    "UnknownSolverError",
    "UnsupportedSolverError",
    "configure_pdfmo_logging",
    "ProblemCatalog",
    "CommonSolverOptions",
    "SolverCatalog",
    "SolverConfiguration",
    "SolverSpecificOptions",
    "get_solver_options",
]
