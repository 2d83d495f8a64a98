"""
Numeric Root Finding

Newton-Raphson with a bisection fallback, used wherever the TVM equation has
no closed form: the number of periods in the general case, the interest
rate, and the IRR of a cash-flow series.

Searches run as an ordered sequence of strategies sharing one SearchBudget.
The first strategy whose residual meets the acceptance tolerance wins;
otherwise the attempt with the smallest residual is returned flagged
converged=False. Every loop is bounded by an iteration count.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple

from tvmcalc.calculations.rates import nominal_from_periodic
from tvmcalc.calculations.tvm import tvm_residual, tvm_residual_derivative

logger = logging.getLogger(__name__)

# Rate search domain (periodic rates)
RATE_FLOOR = -0.99
RATE_CEILING = 10.0
RATE_GUESS = 0.05
RATE_BRACKET = (-0.99, 2.0)
RATE_PROBES = (-0.5, 0.0, 0.01, 0.1, 0.5, 1.0, 1.5)

# Period search domain
PERIODS_BRACKET = (0.01, 1000.0)
PERIODS_PROBES = (1.0, 10.0, 100.0, 1000.0, 10000.0)


@dataclass(frozen=True)
class SearchBudget:
    """Tolerances and iteration limits shared by every strategy of a search."""

    tolerance: float = 1e-10  # |f| at which an iteration stops early
    accept_tolerance: float = 1e-6  # |f| a final answer must meet
    step_tolerance: float = 1e-12  # Newton stops when the step is smaller
    derivative_floor: float = 1e-15  # Newton gives up on a flatter slope
    newton_iterations: int = 50
    bisection_iterations: int = 100


@dataclass(frozen=True)
class RootResult:
    """Outcome of a root search."""

    root: float
    residual: float
    converged: bool
    method: str
    iterations: int


Strategy = Callable[[SearchBudget], RootResult]


def _magnitude(value: float) -> float:
    return math.inf if math.isnan(value) else abs(value)


def newton(
    f: Callable[[float], float],
    df: Callable[[float], float],
    guess: float,
    budget: SearchBudget,
    clamp: Optional[Callable[[float, float], float]] = None,
) -> RootResult:
    """
    Newton-Raphson iteration tracking the best iterate seen.

    Args:
        f: Residual function
        df: Derivative of f
        guess: Starting point
        budget: Tolerances and iteration limit
        clamp: Optional (current, proposed) -> accepted step filter used to
            keep the iterate inside the function's domain

    Returns:
        RootResult for the lowest-|f| iterate
    """
    x = guess
    best_x = x
    best_f = _magnitude(f(x))
    iterations = 0

    for iterations in range(1, budget.newton_iterations + 1):
        fx = f(x)
        if _magnitude(fx) < budget.tolerance:
            best_x, best_f = x, abs(fx)
            break

        if _magnitude(fx) < best_f:
            best_x, best_f = x, abs(fx)

        dfx = df(x)
        if not math.isfinite(dfx) or abs(dfx) < budget.derivative_floor:
            break

        new_x = x - fx / dfx
        if clamp is not None:
            new_x = clamp(x, new_x)

        if abs(new_x - x) < budget.step_tolerance:
            f_new = _magnitude(f(new_x))
            if f_new < best_f:
                best_x, best_f = new_x, f_new
            break

        x = new_x

    return RootResult(
        root=best_x,
        residual=best_f,
        converged=best_f <= budget.accept_tolerance,
        method="newton",
        iterations=iterations,
    )


def bisection(
    f: Callable[[float], float],
    lo: float,
    hi: float,
    budget: SearchBudget,
    probes: Sequence[float] = (),
) -> RootResult:
    """
    Bisection over [lo, hi].

    When f(lo) and f(hi) share a sign, the probe points are tried in order
    and the first one whose residual has the opposite sign of f(lo) becomes
    the new upper bound. Without any sign change the search still runs and
    returns the final midpoint as a best effort.
    """
    f_lo = f(lo)
    f_hi = f(hi)

    if f_lo * f_hi > 0:
        for probe in probes:
            f_probe = f(probe)
            if f_probe * f_lo < 0:
                hi, f_hi = probe, f_probe
                break

    iterations = 0
    for iterations in range(1, budget.bisection_iterations + 1):
        mid = (lo + hi) / 2
        f_mid = f(mid)

        if _magnitude(f_mid) < budget.tolerance:
            return RootResult(mid, abs(f_mid), True, "bisection", iterations)

        if f_lo * f_mid < 0:
            hi, f_hi = mid, f_mid
        else:
            lo, f_lo = mid, f_mid

    mid = (lo + hi) / 2
    residual = _magnitude(f(mid))
    return RootResult(
        root=mid,
        residual=residual,
        converged=residual <= budget.accept_tolerance,
        method="bisection",
        iterations=iterations,
    )


def run_strategies(
    strategies: Sequence[Tuple[str, Strategy]], budget: SearchBudget
) -> RootResult:
    """
    Run search strategies in order until one is accepted.

    Returns:
        The first converged result, or the attempt with the smallest
        residual flagged converged=False.
    """
    attempts: List[RootResult] = []

    for name, strategy in strategies:
        result = strategy(budget)
        logger.debug(
            f"{name}: root={result.root!r} residual={result.residual:.3e} "
            f"iterations={result.iterations}"
        )
        if result.converged:
            return result
        attempts.append(result)

    best = min(attempts, key=lambda r: r.residual)
    logger.warning(
        f"Root search did not converge; best estimate {best.root!r} "
        f"({best.method}) leaves residual {best.residual:.3e}"
    )
    return best


def _clamp_rate(current: float, proposed: float) -> float:
    """Keep a Newton step on the periodic rate inside (-0.99, 10]."""
    if proposed <= RATE_FLOOR:
        proposed = current / 2
    if proposed > RATE_CEILING:
        proposed = (current + RATE_CEILING) / 2
    return proposed


def search_periods(
    i: float,
    pv: float,
    pmt: float,
    fv: float,
    begin: bool = False,
    budget: Optional[SearchBudget] = None,
) -> RootResult:
    """
    Solve the TVM equation for N by bisection.

    Used when both the rate and the payment are non-zero, where no closed
    form exists. N <= 0 is outside the domain; the residual there is pinned
    to FV - PV.
    """
    budget = budget or SearchBudget()

    def f(n: float) -> float:
        if n <= 0:
            return fv - pv
        return tvm_residual(i, n, pv, pmt, fv, begin)

    lo, hi = PERIODS_BRACKET
    return run_strategies(
        [("bisection", lambda b: bisection(f, lo, hi, b, PERIODS_PROBES))],
        budget,
    )


def search_rate(
    n: float,
    pv: float,
    pmt: float,
    fv: float,
    begin: bool = False,
    budget: Optional[SearchBudget] = None,
) -> RootResult:
    """
    Solve the TVM equation for the periodic rate.

    Newton-Raphson from 5% using the analytic derivative, then bisection
    over [-0.99, 2] if Newton's best iterate misses the acceptance
    tolerance.
    """
    budget = budget or SearchBudget()

    def f(i: float) -> float:
        return tvm_residual(i, n, pv, pmt, fv, begin)

    def df(i: float) -> float:
        return tvm_residual_derivative(i, n, pv, pmt, begin)

    lo, hi = RATE_BRACKET
    return run_strategies(
        [
            ("newton", lambda b: newton(f, df, RATE_GUESS, b, _clamp_rate)),
            ("bisection", lambda b: bisection(f, lo, hi, b, RATE_PROBES)),
        ],
        budget,
    )


def solve_iy(
    n: float,
    pv: float,
    pmt: float,
    fv: float,
    begin: bool,
    cy: float,
    py: float,
    budget: Optional[SearchBudget] = None,
) -> RootResult:
    """
    Solve for the nominal annual rate in percent.

    The search runs on the periodic rate; the returned root is converted
    back through the C/Y and P/Y settings.
    """
    result = search_rate(n, pv, pmt, fv, begin, budget)
    return replace(result, root=nominal_from_periodic(result.root, cy, py))
