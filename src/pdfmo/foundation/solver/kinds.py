"""
Solver-kind registry and solver catalog.

A solver kind records how a solver is called (its calling convention) and
which option shape it consumes. Several kinds may share an option shape
(e.g. DFreeMO reuses the PDFPM options). The catalog binds kind names to the
actual callables provided by an external solver library.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pdfmo.foundation.exceptions import UnknownSolverError, UnsupportedSolverError
from pdfmo.foundation.registry import Registry
from pdfmo.foundation.solver.options import OPTION_SHAPES, OptionMapper, SolverConfiguration


class CallingConvention(str, Enum):
    # solver(evalf, data_matrices, delta, x0, options, *, lb, ub[, evalJf])
    OBJECTIVE_ONLY = "objective_only"
    # solver(evalf, evalJf, data_matrices, delta, x0, options, *, lb, ub)
    WITH_JACOBIAN = "with_jacobian"


@dataclass(frozen=True)
class SolverKind:
    name: str
    convention: CallingConvention
    option_shape: str
    optional_jacobian: bool = False

    @property
    def requires_jacobian(self) -> bool:
        return self.convention is CallingConvention.WITH_JACOBIAN


SOLVER_KINDS: Registry[SolverKind] = Registry("solver_kinds")

# Kinds a solver library may expose under the PDFPM entry point instead.
SOLVER_ALIASES: dict[str, str] = {"DFreeMO": "PDFPM", "Dfree": "PDFPM"}


def register_solver_kind(
    name: str,
    convention: CallingConvention | str,
    option_shape: str,
    *,
    optional_jacobian: bool = False,
    registry: Registry[SolverKind] | None = None,
    override: bool = False,
) -> SolverKind:
    """Add a solver kind; the option shape must already be registered."""
    if option_shape not in OPTION_SHAPES:
        raise ValueError(f"Unknown option shape '{option_shape}'. Registered: {', '.join(OPTION_SHAPES.list())}")
    kind = SolverKind(name, CallingConvention(convention), option_shape, optional_jacobian)
    target = SOLVER_KINDS if registry is None else registry
    target.register(name, kind, override=override)
    return kind


register_solver_kind("PDFPM", CallingConvention.OBJECTIVE_ONLY, "pdfpm", optional_jacobian=True)
register_solver_kind("DFreeMO", CallingConvention.OBJECTIVE_ONLY, "pdfpm")
register_solver_kind("Dfree", CallingConvention.OBJECTIVE_ONLY, "pdfpm")
register_solver_kind("ProxGrad", CallingConvention.WITH_JACOBIAN, "proxgrad")
register_solver_kind("CondG", CallingConvention.WITH_JACOBIAN, "condg")


def resolve_solver_kind(solver_name: str, kinds: Registry[SolverKind] | None = None) -> SolverKind:
    registry = SOLVER_KINDS if kinds is None else kinds
    if solver_name not in registry:
        raise UnknownSolverError(solver_name, registry.list())
    return registry[solver_name]


def get_solver_options(
    solver_name: str,
    config: SolverConfiguration,
    *,
    kinds: Registry[SolverKind] | None = None,
) -> Any:
    """
    Convert a generic SolverConfiguration into the option shape required by
    `solver_name`, filling unset solver-specific fields with that solver's
    defaults.

    Raises:
        UnknownSolverError: if `solver_name` is not a registered solver kind.
    """
    kind = resolve_solver_kind(solver_name, kinds)
    mapper: OptionMapper = OPTION_SHAPES[kind.option_shape]
    return mapper(config)


SolverFunction = Callable[..., Any]


class SolverCatalog:
    """Binds solver names to the callables implementing them."""

    def __init__(self, functions: Mapping[str, SolverFunction] | None = None) -> None:
        self._functions: dict[str, SolverFunction] = {}
        for name, fn in (functions or {}).items():
            self.bind(name, fn)

    @classmethod
    def from_module(cls, module: object, names: list[str] | None = None) -> "SolverCatalog":
        """
        Bind every registered solver kind the module exposes.

        A kind missing from the module falls back to its entry in
        SOLVER_ALIASES, so a library that only ships PDFPM also serves
        DFreeMO and Dfree.
        """
        candidates = names if names is not None else SOLVER_KINDS.list()
        functions: dict[str, SolverFunction] = {}
        for name in candidates:
            for attr in (name, SOLVER_ALIASES.get(name)):
                fn = getattr(module, attr, None) if attr else None
                if callable(fn):
                    functions[name] = fn
                    break
        return cls(functions)

    def bind(self, name: str, function: SolverFunction) -> SolverFunction:
        if not callable(function):
            raise TypeError(f"Solver '{name}' must be callable; got {type(function).__name__}.")
        self._functions[name] = function
        return function

    def function(self, name: str) -> SolverFunction:
        try:
            return self._functions[name]
        except KeyError:
            raise UnsupportedSolverError(name, "No implementation is bound for it.") from None

    def names(self) -> list[str]:
        return sorted(self._functions)

    def __contains__(self, name: object) -> bool:
        return name in self._functions


__all__ = [
    "CallingConvention",
    "SolverKind",
    "SOLVER_KINDS",
    "SOLVER_ALIASES",
    "register_solver_kind",
    "resolve_solver_kind",
    "get_solver_options",
    "SolverCatalog",
    "SolverFunction",
]
