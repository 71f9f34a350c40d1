from .kinds import (
    SOLVER_KINDS,
    CallingConvention,
    SolverCatalog,
    SolverFunction,
    SolverKind,
    get_solver_options,
    register_solver_kind,
    resolve_solver_kind,
)
from .options import (
    OPTION_SHAPES,
    CommonSolverOptions,
    CondGOptions,
    PDFPMOptions,
    ProxGradOptions,
    SolverConfiguration,
    SolverSpecificOptions,
)

__all__ = [
    "SOLVER_KINDS",
    "OPTION_SHAPES",
    "CallingConvention",
    "SolverCatalog",
    "SolverFunction",
    "SolverKind",
    "get_solver_options",
    "register_solver_kind",
    "resolve_solver_kind",
    "CommonSolverOptions",
    "SolverSpecificOptions",
    "SolverConfiguration",
    "ProxGradOptions",
    "PDFPMOptions",
    "CondGOptions",
]
