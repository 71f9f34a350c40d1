"""
Analysis helpers built on the result store.
"""

from .frames import results_to_frame, store_to_frame, success_rates
from .profiles import PerformanceProfile, performance_profile, performance_ratios
from .queries import (
    PERFORMANCE_METRICS,
    extract_performance_data,
    extract_problem_data,
    filter_solvers,
    get_file_metadata,
    get_successful_results_count,
    is_biobjective_problem,
    list_biobjective_problems,
    list_solvers_for_problem,
    list_store_files,
    validate_biobjective_data,
)

__all__ = [
    "results_to_frame",
    "store_to_frame",
    "success_rates",
    "PerformanceProfile",
    "performance_profile",
    "performance_ratios",
    "PERFORMANCE_METRICS",
    "extract_performance_data",
    "extract_problem_data",
    "filter_solvers",
    "get_file_metadata",
    "get_successful_results_count",
    "is_biobjective_problem",
    "list_biobjective_problems",
    "list_solvers_for_problem",
    "list_store_files",
    "validate_biobjective_data",
]
