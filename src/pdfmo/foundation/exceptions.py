"""
pdfmo exception hierarchy.

All pdfmo-specific exceptions inherit from PDFMOError, which carries an
optional suggestion and a details dict for logging context.

Example:
    try:
        options = get_solver_options("NSGA", config)
    except PDFMOError as e:
        logger.error("Configuration rejected: %s", e)
        logger.error("Details: %s", e.details)
"""

from __future__ import annotations

from typing import Any


class PDFMOError(Exception):
    """
    Base exception for all pdfmo errors.

    Attributes:
        message: Human-readable error description
        suggestion: Optional suggestion for fixing the error
        details: Optional dict with additional context
    """

    def __init__(
        self,
        message: str,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = self.message
        if self.suggestion:
            msg += f"\n\nSuggestion: {self.suggestion}"
        return msg


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(PDFMOError):
    """Raised when a benchmark or solver configuration is invalid."""

    pass


class UnknownSolverError(ConfigurationError):
    """Raised when a solver name is outside the registered solver kinds."""

    def __init__(self, solver: str, available: list[str] | None = None) -> None:
        available = list(available or [])
        message = f"Unknown solver '{solver}'."
        suggestion = f"Available solvers: {', '.join(available)}" if available else None
        super().__init__(message, suggestion, {"solver": solver, "available": available})


class UnsupportedSolverError(ConfigurationError):
    """Raised when a known solver kind has no callable bound in the catalog."""

    def __init__(self, solver: str, reason: str | None = None) -> None:
        message = f"Solver '{solver}' is not supported by this benchmark context."
        if reason:
            message += f" {reason}"
        suggestion = "Bind an implementation with SolverCatalog.bind(name, function)."
        super().__init__(message, suggestion, {"solver": solver})


class InvalidBenchmarkSpecError(ConfigurationError):
    """Raised when a benchmark spec file is malformed."""

    def __init__(self, message: str, *, path: str | None = None, key: str | None = None) -> None:
        details: dict[str, Any] = {}
        if path:
            details["path"] = path
        if key:
            details["key"] = key
        super().__init__(message, "Check the benchmark spec against the documented keys.", details)


# =============================================================================
# Problem Errors
# =============================================================================


class ProblemError(PDFMOError):
    """Base class for problem-related errors."""

    pass


class InvalidProblemError(ProblemError):
    """Raised when an unknown problem is requested."""

    def __init__(
        self,
        problem: str,
        available: list[str] | None = None,
        suggestions: list[str] | None = None,
    ) -> None:
        message = f"Unknown problem '{problem}'."
        if suggestions:
            suggestion = "Did you mean: " + ", ".join(f"'{name}'" for name in suggestions) + "?"
        elif available:
            examples = available[:5]
            suggestion = f"Examples: {', '.join(examples)}. Use ProblemCatalog.list() for the full list."
        else:
            suggestion = "Register problem constructors in the ProblemCatalog first."
        super().__init__(message, suggestion, {"problem": problem})


class ProblemDefinitionError(ProblemError):
    """Raised when a problem instance violates the collaborator contract."""

    def __init__(self, problem: str, reason: str) -> None:
        super().__init__(
            f"Problem '{problem}' is malformed: {reason}",
            "Problems must expose positive nvar/nobj and bounds of length nvar.",
            {"problem": problem},
        )


class DomainViolationError(PDFMOError):
    """
    Raised when an objective or Jacobian is evaluated outside the problem's
    valid input region.

    This is an expected failure mode: the runner records the run as failed
    instead of treating it as a bug.
    """

    def __init__(self, message: str = "Evaluation outside the problem domain.", *, problem: str | None = None) -> None:
        details = {"problem": problem} if problem else {}
        super().__init__(message, None, details)


# =============================================================================
# Solver Errors
# =============================================================================


class SolverInternalError(PDFMOError):
    """Wraps an unexpected exception raised inside a solver call."""

    def __init__(
        self,
        solver: str,
        problem: str,
        run_id: int,
        delta: float,
        cause: BaseException,
    ) -> None:
        message = (
            f"{solver} raised {type(cause).__name__} on {problem} "
            f"(run_id={run_id}, delta={delta}): {cause}"
        )
        super().__init__(
            message,
            None,
            {"solver": solver, "problem": problem, "run_id": run_id, "delta": delta},
        )


# =============================================================================
# Store Errors
# =============================================================================


class StoreError(PDFMOError):
    """Base class for result-store errors."""

    pass


class StoreIOError(StoreError):
    """Raised when reading or writing a store file fails."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            f"Store I/O failed for '{path}': {reason}",
            "Check that the store directory exists and is writable.",
            {"path": path},
        )


class StoreFormatError(StoreError):
    """Raised when a store file or tree does not follow the store layout."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        details = {"path": path} if path else {}
        super().__init__(message, None, details)


class StoreKeyCollisionWarning(UserWarning):
    """Emitted when a merge overwrites an existing result leaf."""


__all__ = [
    "PDFMOError",
    "ConfigurationError",
    "UnknownSolverError",
    "UnsupportedSolverError",
    "InvalidBenchmarkSpecError",
    "ProblemError",
    "InvalidProblemError",
    "ProblemDefinitionError",
    "DomainViolationError",
    "SolverInternalError",
    "StoreError",
    "StoreIOError",
    "StoreFormatError",
    "StoreKeyCollisionWarning",
]
