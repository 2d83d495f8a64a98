"""
Calculation Errors

Typed failures raised by the TVM engine. All of them are ValueErrors so
callers that only care about "the calculation failed" can keep catching
ValueError.
"""


class TVMError(ValueError):
    """Base class for every calculation failure."""

    kind = "tvm_error"


class InvalidConfiguration(TVMError):
    """Settings or inputs make the problem ill-posed (bad C/Y, P/Y, unknowns)."""

    kind = "invalid_configuration"


class NoSolution(TVMError):
    """The problem is well-posed but has no finite real answer."""

    kind = "no_solution"


class DivergentSearch(TVMError):
    """A root search finished without meeting its acceptance tolerance.

    Never raised by the solvers themselves; they return a best-effort result
    flagged ``converged=False``. Callers that want to treat that as a hard
    failure call ``SolveResult.require_converged()``.
    """

    kind = "divergent_search"

    def __init__(self, message: str, best_estimate: float, residual: float):
        super().__init__(message)
        self.best_estimate = best_estimate
        self.residual = residual
