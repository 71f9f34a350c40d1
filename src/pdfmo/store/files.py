"""
JSON store files.

A store file holds one header plus the result tree:

    {"format": "pdfmo-store", "version": 1, "results": {...}}

Writes go to a sibling temporary file that is then moved over the target with
`os.replace`, so a crash mid-write never leaves a truncated store behind.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pdfmo.foundation.core.experiment_config import ExperimentResult
from pdfmo.foundation.exceptions import StoreFormatError, StoreIOError
from pdfmo.store.layout import Tree, count_leaves, merge_trees, results_to_tree, tree_to_results

STORE_FORMAT = "pdfmo-store"
STORE_VERSION = 1
STORE_SUFFIX = ".json"


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


def store_path(store_dir: str | Path, store_name: str) -> Path:
    name = store_name if store_name.endswith(STORE_SUFFIX) else f"{store_name}{STORE_SUFFIX}"
    return Path(store_dir) / name


def _document(tree: Tree) -> dict[str, Any]:
    return {"format": STORE_FORMAT, "version": STORE_VERSION, "results": tree}


def write_tree(path: str | Path, tree: Tree) -> Path:
    """Atomically write `tree` to `path`, replacing any existing file."""
    path = Path(path)
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.stem}.",
            suffix=".tmp",
            delete=False,
        ) as fh:
            tmp_name = fh.name
            json.dump(_document(tree), fh)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as exc:
        raise StoreIOError(str(path), str(exc)) from exc
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.remove(tmp_name)
    return path


def load_store(path: str | Path) -> Tree:
    """Read the result tree of a store file."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as fh:
            document = json.load(fh)
    except json.JSONDecodeError as exc:
        raise StoreFormatError(f"Store file is not valid JSON: {exc}", path=str(path)) from exc
    except OSError as exc:
        raise StoreIOError(str(path), str(exc)) from exc

    if not isinstance(document, dict) or document.get("format") != STORE_FORMAT:
        raise StoreFormatError("File is not a pdfmo store.", path=str(path))
    version = document.get("version")
    if version != STORE_VERSION:
        raise StoreFormatError(f"Unsupported store version: {version}", path=str(path))
    tree = document.get("results")
    if not isinstance(tree, dict):
        raise StoreFormatError("Store has no result tree.", path=str(path))
    return tree


def load_results(path: str | Path) -> list[ExperimentResult]:
    return tree_to_results(load_store(path))


def save_results(path: str | Path, results: Iterable[ExperimentResult]) -> Path:
    """Write `results` as a fresh store, overwriting `path` if it exists."""
    tree = results_to_tree(results)
    written = write_tree(path, tree)
    _logger().debug("Saved %d results to %s", count_leaves(tree), written)
    return written


def append_store(final_path: str | Path, temp_path: str | Path) -> int:
    """
    Merge the store at `temp_path` into the store at `final_path`.

    The final store is created when absent. Returns the number of results
    merged from the temporary store. A final store that cannot be read or
    merged raises StoreIOError and is left untouched.
    """
    final_path = Path(final_path)
    incoming = load_store(temp_path)
    if final_path.exists():
        try:
            merged = load_store(final_path)
            merge_trees(merged, incoming)
        except StoreFormatError as exc:
            raise StoreIOError(str(final_path), exc.message) from exc
    else:
        merged = incoming
    write_tree(final_path, merged)
    added = count_leaves(incoming)
    _logger().debug("Appended %d results from %s into %s", added, temp_path, final_path)
    return added


__all__ = [
    "STORE_FORMAT",
    "STORE_VERSION",
    "STORE_SUFFIX",
    "store_path",
    "write_tree",
    "load_store",
    "load_results",
    "save_results",
    "append_store",
]
