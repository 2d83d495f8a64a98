"""
NPV and IRR Calculations

Discounted cash-flow analysis over an ordered series CF0..CFk at uniform
payment periods. IRR uses Newton-Raphson with a bisection fallback, the
same strategy sequence as the TVM rate search.
"""

import logging
from typing import Iterable, Iterator, List, Sequence

import numpy as np

from tvmcalc.calculations.errors import InvalidConfiguration, NoSolution
from tvmcalc.calculations.problem import SolveResult
from tvmcalc.calculations.solvers import (
    RATE_BRACKET,
    SearchBudget,
    bisection,
    newton,
    run_strategies,
)

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 100
DEFAULT_GUESS = 0.1
IRR_PROBES = (-0.5, 0.0, 0.01, 0.1, 0.5, 1.0)


class CashFlowSeries:
    """
    Ordered cash flows CF0..CFk.

    CF0 is the initial outlay. It can be reset but never removed, so a
    series always holds at least one entry.
    """

    def __init__(self, flows: Iterable[float] = (0.0,)):
        self._flows: List[float] = [float(cf) for cf in flows]
        if not self._flows:
            self._flows = [0.0]

    def __len__(self) -> int:
        return len(self._flows)

    def __getitem__(self, index: int) -> float:
        return self._flows[index]

    def __iter__(self) -> Iterator[float]:
        return iter(self._flows)

    def __repr__(self) -> str:
        return f"CashFlowSeries({self._flows!r})"

    def update(self, index: int, value: float) -> None:
        """Set CF[index]."""
        self._check_index(index)
        self._flows[index] = float(value)

    def append(self, value: float = 0.0) -> int:
        """Add a flow after the last one and return its index."""
        self._flows.append(float(value))
        return len(self._flows) - 1

    def insert(self, index: int, value: float = 0.0) -> None:
        """Insert a flow before CF[index]; CF0 cannot be displaced."""
        if not 1 <= index <= len(self._flows):
            raise InvalidConfiguration(f"Cash flows can be inserted at 1..{len(self._flows)}, got {index}")
        self._flows.insert(index, float(value))

    def delete(self, index: int) -> None:
        """Remove CF[index]; deleting CF0 resets it to 0 instead."""
        self._check_index(index)
        if index == 0:
            self._flows[0] = 0.0
        else:
            del self._flows[index]

    def to_list(self) -> List[float]:
        return list(self._flows)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._flows):
            raise InvalidConfiguration(f"No cash flow CF{index}; series has CF0..CF{len(self._flows) - 1}")


def calculate_npv(cash_flows: Sequence[float], rate: float) -> float:
    """
    Calculate NPV of cash flows at a periodic rate.

    Args:
        cash_flows: Cash flows CF0..CFk (negative = outflow, positive = inflow)
        rate: Discount rate per period as decimal

    Returns:
        NPV value (inf/NaN when the discount factors overflow)
    """
    flows = np.asarray(cash_flows, dtype=float)
    periods = np.arange(flows.size)
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        return float(np.sum(flows / (1 + rate) ** periods))


def _npv_derivative(cash_flows: Sequence[float], rate: float) -> float:
    """Calculate derivative of NPV with respect to rate (for Newton-Raphson)."""
    flows = np.asarray(cash_flows, dtype=float)
    periods = np.arange(flows.size)
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        return float(np.sum(-periods * flows / (1 + rate) ** (periods + 1)))


def _clamp_irr(current: float, proposed: float) -> float:
    if proposed <= -0.99:
        proposed = (current - 0.99) / 2
    if proposed > 10:
        proposed = (current + 10) / 2
    return proposed


def _check_flows(cash_flows: Sequence[float], py: float) -> List[float]:
    flows = [float(cf) for cf in cash_flows]
    if len(flows) < 2:
        raise InvalidConfiguration("At least 2 cash flows required")
    if py is None or not py > 0:
        raise InvalidConfiguration(f"P/Y must be set and positive, got {py!r}")
    return flows


def npv(cash_flows: Sequence[float], annual_rate: float, py: float) -> float:
    """
    NPV at a nominal annual discount rate.

    Args:
        cash_flows: Cash flows CF0..CFk, one per payment period
        annual_rate: Annual discount rate in percent (e.g., 10 for 10%)
        py: Payment periods per year

    Returns:
        Net present value

    Raises:
        InvalidConfiguration: Fewer than 2 flows or P/Y not positive
        NoSolution: Discounting overflows
    """
    flows = _check_flows(cash_flows, py)
    value = calculate_npv(flows, annual_rate / 100 / py)
    if not np.isfinite(value):
        raise NoSolution("NPV is not a finite number at this rate")
    return value


def calculate_irr(
    cash_flows: Sequence[float],
    guess: float = DEFAULT_GUESS,
    budget: SearchBudget = SearchBudget(newton_iterations=MAX_ITERATIONS),
):
    """
    Periodic IRR of a cash-flow series.

    Newton-Raphson from the guess, bisection over [-0.99, 2] if Newton's
    best iterate leaves NPV above the acceptance tolerance.

    Returns:
        RootResult whose root is the periodic rate as decimal

    Raises:
        InvalidConfiguration: Fewer than 2 cash flows
        NoSolution: Cash flows do not change sign
    """
    flows = [float(cf) for cf in cash_flows]
    if len(flows) < 2:
        raise InvalidConfiguration("At least 2 cash flows required")

    has_positive = any(cf > 0 for cf in flows)
    has_negative = any(cf < 0 for cf in flows)

    if not has_positive or not has_negative:
        raise NoSolution("Cash flows must contain both positive and negative values")

    def f(rate: float) -> float:
        return calculate_npv(flows, rate)

    def df(rate: float) -> float:
        return _npv_derivative(flows, rate)

    lo, hi = RATE_BRACKET
    return run_strategies(
        [
            ("newton", lambda b: newton(f, df, guess, b, _clamp_irr)),
            ("bisection", lambda b: bisection(f, lo, hi, b, IRR_PROBES)),
        ],
        budget,
    )


def irr(cash_flows: Sequence[float], py: float) -> SolveResult:
    """
    IRR annualized as a nominal rate in percent (periodic IRR * P/Y * 100).

    A search that misses the acceptance tolerance still returns its best
    estimate, flagged converged=False with the NPV left at that rate as the
    residual. Call require_converged() on the result to treat that as an
    error.

    Raises:
        InvalidConfiguration: Fewer than 2 cash flows or P/Y not positive
        NoSolution: Cash flows do not change sign, or no finite IRR
    """
    flows = _check_flows(cash_flows, py)
    result = calculate_irr(flows)
    if not np.isfinite(result.root):
        raise NoSolution("IRR is not a finite number")

    value = result.root * py * 100
    if not result.converged:
        logger.warning(f"IRR = {value!r} is a best-effort estimate (NPV {result.residual:.3e} at that rate)")

    return SolveResult(
        variable="irr",
        value=value,
        converged=result.converged,
        residual=result.residual,
        method=result.method,
    )
