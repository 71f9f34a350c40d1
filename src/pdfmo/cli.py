from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence

from pdfmo.analysis.queries import get_file_metadata
from pdfmo.experiment.batch import run_experiment_with_batch_saving
from pdfmo.experiment.context import BenchmarkContext
from pdfmo.experiment.generator import generate_experiment_configs
from pdfmo.experiment.settings import (
    BenchmarkPlan,
    build_benchmark,
    load_benchmark_spec,
    resolve_problem_catalog,
    resolve_solver_catalog,
)
from pdfmo.foundation.exceptions import InvalidBenchmarkSpecError, PDFMOError
from pdfmo.foundation.logging import configure_pdfmo_logging
from pdfmo.store.files import store_path


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pdfmo", description="Multiobjective solver benchmark harness.")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Generate and run a benchmark from a YAML/JSON spec.")
    run.add_argument("spec", help="Path to the benchmark spec file.")
    run.add_argument("--store-dir", help="Directory for the result store (default: $PDFMO_STORE_DIR or data/sims).")
    run.add_argument("--store-name", help="Store file name without suffix.")
    run.add_argument("--batch-size", type=int, help="Results buffered between store flushes.")
    run.add_argument("--seed", type=int, help="Seed for starting points and perturbation matrices.")
    run.add_argument("--fresh", action="store_true", help="Delete an existing store before running.")
    run.add_argument("-v", "--verbose", action="store_true", help="Log every experiment.")

    inspect = sub.add_parser("inspect", help="Summarise a result store.")
    inspect.add_argument("store", help="Path to a store file.")
    inspect.add_argument("--format", choices=("text", "json"), default="text", help="Output format (default: text).")
    return parser


def _context_for(plan: BenchmarkPlan) -> BenchmarkContext:
    if not plan.problem_catalog:
        raise InvalidBenchmarkSpecError("'problem_catalog' is required to run a benchmark.", key="problem_catalog")
    if not plan.solver_catalog:
        raise InvalidBenchmarkSpecError("'solver_catalog' is required to run a benchmark.", key="solver_catalog")
    return BenchmarkContext(
        problems=resolve_problem_catalog(plan.problem_catalog),
        solvers=resolve_solver_catalog(plan.solver_catalog),
    )


def run_benchmark(args: argparse.Namespace) -> int:
    spec = load_benchmark_spec(args.spec)
    plan = build_benchmark(
        spec,
        overrides={
            "store_dir": args.store_dir,
            "store_name": args.store_name,
            "batch_size": args.batch_size,
            "seed": args.seed,
        },
    )
    context = _context_for(plan)
    configs = generate_experiment_configs(
        plan.problems,
        plan.solvers,
        plan.nrun,
        plan.deltas,
        plan.common_options,
        catalog=context,
        solver_specific_options=plan.solver_options,
        rng=plan.settings.seed,
    )
    results = run_experiment_with_batch_saving(
        configs,
        context=context,
        batch_size=plan.settings.batch_size,
        store_name=plan.settings.store_name,
        store_dir=plan.settings.store_dir,
        fresh=args.fresh,
    )
    successes = sum(1 for result in results if result.success)
    final = store_path(plan.settings.store_dir, plan.settings.store_name)
    print(f"{len(results)} experiments, {successes} successful. Results in {final}")
    return 0


def inspect_store(args: argparse.Namespace) -> int:
    metadata = get_file_metadata(args.store)
    if args.format == "json":
        print(json.dumps(metadata, indent=2))
        return 0
    print(f"Store:      {metadata['path']}")
    print(f"Solvers:    {', '.join(metadata['solvers']) or '-'}")
    print(f"Problems:   {', '.join(metadata['problems']) or '-'}")
    print(f"Deltas:     {', '.join(str(d) for d in metadata['deltas']) or '-'}")
    print(f"Results:    {metadata['n_results']} ({metadata['n_successful']} successful)")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    verbose = getattr(args, "verbose", False)
    configure_pdfmo_logging(level=logging.DEBUG if verbose else logging.INFO, stream=sys.stderr)
    handlers = {"run": run_benchmark, "inspect": inspect_store}
    try:
        return handlers[args.command](args)
    except FileNotFoundError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except PDFMOError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
