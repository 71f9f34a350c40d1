from .catalog import ProblemCatalog, ProblemFactory, problem_bounds, validate_problem
from .types import JacobianProblemProtocol, ProblemProtocol, has_jacobian

__all__ = [
    "ProblemCatalog",
    "ProblemFactory",
    "ProblemProtocol",
    "JacobianProblemProtocol",
    "has_jacobian",
    "problem_bounds",
    "validate_problem",
]
