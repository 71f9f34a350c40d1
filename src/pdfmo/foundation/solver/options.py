"""
Solver configuration value objects and the per-solver option shapes.

A `SolverConfiguration` is solver-agnostic: common options plus optional
solver-specific fields where `None` means "use the solver's own default".
The mapper functions below resolve those defaults into the concrete option
shape each solver family expects.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Callable

from pdfmo.foundation.exceptions import ConfigurationError
from pdfmo.foundation.registry import Registry

DEFAULT_MU = 1.0
DEFAULT_EPSILON = 1e-10
DEFAULT_SIGMA = 1.0
DEFAULT_ALPHA = 0.1
DEFAULT_MAX_SUBPROBLEM_ITER = 50


@dataclass(frozen=True)
class CommonSolverOptions:
    """Options shared by every solver."""

    verbose: int = 0
    max_iter: int = 100
    opt_tol: float = 1e-6
    ftol: float = 1e-4
    max_time: float = 3600.0
    print_interval: int = 10
    store_trace: bool = False
    stop_criteria: str = "proxgrad"

    def __post_init__(self) -> None:
        if self.max_iter <= 0:
            raise ConfigurationError(f"max_iter must be positive; got {self.max_iter}.")
        if self.print_interval <= 0:
            raise ConfigurationError(f"print_interval must be positive; got {self.print_interval}.")
        if not self.max_time > 0:
            raise ConfigurationError(f"max_time must be positive; got {self.max_time}.")
        for name in ("opt_tol", "ftol"):
            value = getattr(self, name)
            if not (math.isfinite(value) and value >= 0):
                raise ConfigurationError(f"{name} must be a finite non-negative number; got {value}.")
        # Normalise numeric types so option shapes always carry floats/ints.
        object.__setattr__(self, "opt_tol", float(self.opt_tol))
        object.__setattr__(self, "ftol", float(self.ftol))
        object.__setattr__(self, "max_time", float(self.max_time))
        object.__setattr__(self, "stop_criteria", str(self.stop_criteria))

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SolverSpecificOptions:
    """Optional per-solver parameters; None means unset."""

    mu: float | None = None
    epsilon: float | None = None
    sigma: float | None = None
    alpha: float | None = None
    max_subproblem_iter: int | None = None

    def is_set(self, name: str) -> bool:
        return getattr(self, name) is not None

    def as_dict(self, *, only_set: bool = False) -> dict[str, Any]:
        data = asdict(self)
        if only_set:
            return {key: value for key, value in data.items() if value is not None}
        return data


@dataclass(frozen=True)
class SolverConfiguration:
    common_options: CommonSolverOptions = field(default_factory=CommonSolverOptions)
    specific_options: SolverSpecificOptions = field(default_factory=SolverSpecificOptions)

    @classmethod
    def build(cls, common: CommonSolverOptions, **specific: Any) -> "SolverConfiguration":
        return cls(common, SolverSpecificOptions(**specific))


# =============================================================================
# Solver option shapes
# =============================================================================


@dataclass(frozen=True)
class _BaseSolverOptions:
    verbose: int
    max_iter: int
    opt_tol: float
    ftol: float
    max_time: float
    print_interval: int
    store_trace: bool
    stop_criteria: str

    def as_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class ProxGradOptions(_BaseSolverOptions):
    mu: float = DEFAULT_MU


@dataclass(frozen=True)
class PDFPMOptions(_BaseSolverOptions):
    epsilon: float = DEFAULT_EPSILON
    sigma: float = DEFAULT_SIGMA
    alpha: float = DEFAULT_ALPHA
    max_subproblem_iter: int = DEFAULT_MAX_SUBPROBLEM_ITER


@dataclass(frozen=True)
class CondGOptions(_BaseSolverOptions):
    pass


def _or_default(value: Any, default: Any) -> Any:
    return default if value is None else value


def to_proxgrad_options(config: SolverConfiguration) -> ProxGradOptions:
    specific = config.specific_options
    return ProxGradOptions(
        **config.common_options.as_dict(),
        mu=_or_default(specific.mu, DEFAULT_MU),
    )


def to_pdfpm_options(config: SolverConfiguration) -> PDFPMOptions:
    specific = config.specific_options
    return PDFPMOptions(
        **config.common_options.as_dict(),
        epsilon=_or_default(specific.epsilon, DEFAULT_EPSILON),
        sigma=_or_default(specific.sigma, DEFAULT_SIGMA),
        alpha=_or_default(specific.alpha, DEFAULT_ALPHA),
        max_subproblem_iter=_or_default(specific.max_subproblem_iter, DEFAULT_MAX_SUBPROBLEM_ITER),
    )


def to_condg_options(config: SolverConfiguration) -> CondGOptions:
    return CondGOptions(**config.common_options.as_dict())


OptionMapper = Callable[[SolverConfiguration], Any]

OPTION_SHAPES: Registry[OptionMapper] = Registry("option_shapes")
OPTION_SHAPES.register("proxgrad", to_proxgrad_options)
OPTION_SHAPES.register("pdfpm", to_pdfpm_options)
OPTION_SHAPES.register("condg", to_condg_options)


__all__ = [
    "CommonSolverOptions",
    "SolverSpecificOptions",
    "SolverConfiguration",
    "ProxGradOptions",
    "PDFPMOptions",
    "CondGOptions",
    "OptionMapper",
    "OPTION_SHAPES",
    "to_proxgrad_options",
    "to_pdfpm_options",
    "to_condg_options",
]
