"""
Hierarchical result store: solver / problem / delta / run.
"""

from .files import (
    STORE_FORMAT,
    STORE_SUFFIX,
    STORE_VERSION,
    append_store,
    load_results,
    load_store,
    save_results,
    store_path,
    write_tree,
)
from .layout import (
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

__all__ = [
    "STORE_FORMAT",
    "STORE_SUFFIX",
    "STORE_VERSION",
    "append_store",
    "load_results",
    "load_store",
    "save_results",
    "store_path",
    "write_tree",
    "delta_key",
    "iter_leaves",
    "merge_trees",
    "parse_delta_key",
    "parse_run_key",
    "result_path",
    "results_to_tree",
    "run_key",
    "tree_to_results",
]
