"""
TVM Problems

Immutable description of a time-value-of-money problem and the solve()
entry point that finds its single missing variable.
"""

import enum
import logging
import math
from dataclasses import dataclass, fields, replace
from typing import Optional, Tuple

from tvmcalc.calculations.errors import DivergentSearch, InvalidConfiguration, NoSolution
from tvmcalc.calculations.rates import periodic_rate
from tvmcalc.calculations.solvers import search_periods, solve_iy
from tvmcalc.calculations.tvm import (
    DEGENERATE_EPS,
    ZERO_RATE_EPS,
    solve_fv,
    solve_n,
    solve_pmt,
    solve_pv,
    tvm_residual,
)

logger = logging.getLogger(__name__)

TVM_VARIABLES: Tuple[str, ...] = ("n", "iy", "pv", "pmt", "fv")


class Timing(str, enum.Enum):
    """When each period's payment occurs."""

    END = "end"  # ordinary annuity
    BEGIN = "begin"  # annuity due


@dataclass(frozen=True)
class TVMProblem:
    """
    The five TVM registers plus calculator settings.

    Attributes:
        n: Number of payment periods
        iy: Nominal annual interest rate in percent
        pv: Present value
        pmt: Payment per period
        fv: Future value
        cy: Compounding periods per year (C/Y)
        py: Payments per year (P/Y)
        timing: END (ordinary annuity) or BEGIN (annuity due)
    """

    n: Optional[float] = None
    iy: Optional[float] = None
    pv: Optional[float] = None
    pmt: Optional[float] = None
    fv: Optional[float] = None
    cy: float = 12
    py: float = 12
    timing: Timing = Timing.END

    @property
    def begin(self) -> bool:
        return self.timing == Timing.BEGIN

    def unknowns(self) -> Tuple[str, ...]:
        """Names of the unset TVM variables, in register order."""
        return tuple(name for name in TVM_VARIABLES if getattr(self, name) is None)

    def check_settings(self) -> None:
        """Raise InvalidConfiguration unless C/Y and P/Y are positive."""
        for name in ("cy", "py"):
            value = getattr(self, name)
            if value is None or not value > 0:
                raise InvalidConfiguration(f"{name.upper()} must be set and positive, got {value!r}")

    def periodic_rate(self) -> float:
        """Rate per payment period, recomputed from I/Y, C/Y and P/Y."""
        if self.iy is None:
            raise InvalidConfiguration("I/Y is not set")
        self.check_settings()
        return periodic_rate(self.iy, self.cy, self.py)

    def with_values(self, **values: Optional[float]) -> "TVMProblem":
        """Copy of the problem with some registers replaced."""
        unknown = set(values) - {f.name for f in fields(self)}
        if unknown:
            raise InvalidConfiguration(f"Unknown TVM fields: {sorted(unknown)}")
        return replace(self, **values)


@dataclass(frozen=True)
class SolveResult:
    """
    Solved variable and its value.

    converged is False when a numeric search ended on a best-effort estimate
    whose residual is above tolerance; residual is the magnitude of the
    equation solved (the TVM equation or NPV) at the answer, 0 for exact
    closed forms.
    """

    variable: str
    value: float
    converged: bool = True
    residual: float = 0.0
    method: str = "closed_form"

    def require_converged(self) -> "SolveResult":
        """Return self, or raise DivergentSearch for a low-confidence result."""
        if not self.converged:
            raise DivergentSearch(
                f"Search for {self.variable} did not converge",
                best_estimate=self.value,
                residual=self.residual,
            )
        return self


def _finite(variable: str, value: float) -> float:
    if not math.isfinite(value):
        raise NoSolution(f"No finite solution for {variable}")
    return value


def _solve_missing(problem: TVMProblem, variable: str) -> SolveResult:
    begin = problem.begin
    n, pv, pmt, fv = problem.n, problem.pv, problem.pmt, problem.fv

    if variable == "iy":
        result = solve_iy(n, pv, pmt, fv, begin, problem.cy, problem.py)
        return SolveResult(
            variable, _finite(variable, result.root), result.converged, result.residual, result.method
        )

    i = problem.periodic_rate()

    if variable == "fv":
        return SolveResult(variable, _finite(variable, solve_fv(n, i, pv, pmt, begin)))
    if variable == "pv":
        return SolveResult(variable, _finite(variable, solve_pv(n, i, pmt, fv, begin)))
    if variable == "pmt":
        return SolveResult(variable, _finite(variable, solve_pmt(n, i, pv, fv, begin)))

    # n: closed form unless both the rate and payment are non-zero
    if abs(i) < ZERO_RATE_EPS or abs(pmt) < DEGENERATE_EPS:
        return SolveResult(variable, _finite(variable, solve_n(i, pv, pmt, fv, begin)))

    result = search_periods(i, pv, pmt, fv, begin)
    return SolveResult(
        variable, _finite(variable, result.root), result.converged, result.residual, result.method
    )


def solve(problem: TVMProblem) -> SolveResult:
    """
    Solve for the single unset TVM variable.

    Raises:
        InvalidConfiguration: C/Y or P/Y not positive, or not exactly one
            variable unset
        NoSolution: The answer is not a finite number
    """
    problem.check_settings()

    unknowns = problem.unknowns()
    if len(unknowns) != 1:
        raise InvalidConfiguration(
            f"Exactly one TVM variable must be unset, found {len(unknowns)}: {list(unknowns)}"
        )

    variable = unknowns[0]
    result = _solve_missing(problem, variable)

    if result.converged:
        logger.debug(f"Solved {variable} = {result.value!r} ({result.method})")
    else:
        logger.warning(
            f"{variable} = {result.value!r} is a best-effort estimate "
            f"(residual {result.residual:.3e})"
        )
    return result


def solve_for(problem: TVMProblem, variable: str) -> SolveResult:
    """
    Recompute one named variable from the other four.

    The variable's current value, if any, is ignored. All four remaining
    variables must be set.
    """
    if variable not in TVM_VARIABLES:
        raise InvalidConfiguration(f"Unknown TVM variable {variable!r}; expected one of {list(TVM_VARIABLES)}")
    return solve(problem.with_values(**{variable: None}))


def residual(problem: TVMProblem) -> float:
    """|FV - PV*(1+i)^N - PMT*AF| for a fully specified problem."""
    missing = problem.unknowns()
    if missing:
        raise InvalidConfiguration(f"All TVM variables must be set, missing {list(missing)}")
    return abs(
        tvm_residual(problem.periodic_rate(), problem.n, problem.pv, problem.pmt, problem.fv, problem.begin)
    )
