"""
Amortization Calculations

Period-by-period split of each payment into interest and principal,
matching the AMORT worksheet of a financial calculator (P1/P2 range,
PRN/INT totals, ending BAL).

The balance is always walked from period 1 with no closed-form shortcut,
so the totals agree with the per-period decomposition exactly.
"""

import math
from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

from tvmcalc.calculations.errors import InvalidConfiguration
from tvmcalc.calculations.problem import TVMProblem


@dataclass(frozen=True)
class AmortizationResult:
    """Totals over an amortization window."""

    principal: float
    interest: float
    balance: float


def _walk(
    i: float, pv: float, pmt: float, periods: int, begin: bool
) -> Iterator[Tuple[int, float, float, float]]:
    """Yield (period, principal, interest, balance) for periods 1..periods."""
    balance = pv
    for period in range(1, periods + 1):
        if begin:
            # Payment first, then interest on the reduced balance
            principal = -pmt
            balance -= principal
            interest = balance * i
            balance += interest
        else:
            # Interest accrues, then the payment is applied
            interest = balance * i
            principal = -pmt - interest
            balance += interest + pmt

        yield period, principal, interest, balance


def amortize(
    n: float,
    i: float,
    pv: float,
    pmt: float,
    p1: int,
    p2: int,
    begin: bool = False,
) -> AmortizationResult:
    """
    Principal and interest paid over periods p1..p2.

    Args:
        n: Total number of periods (bounds the range)
        i: Periodic interest rate as decimal
        pv: Present value (opening balance)
        pmt: Payment per period
        p1: First period of the window (1-based)
        p2: Last period of the window, 1 <= p1 <= p2 <= floor(n)
        begin: Payments at the beginning of each period

    Returns:
        AmortizationResult with window totals and the balance after p2
    """
    _check_range(n, p1, p2)

    total_principal = 0.0
    total_interest = 0.0
    balance = pv

    for period, principal, interest, balance in _walk(i, pv, pmt, p2, begin):
        if period >= p1:
            total_principal += principal
            total_interest += interest

    return AmortizationResult(
        principal=total_principal,
        interest=total_interest,
        balance=balance,
    )


def amortization_schedule(
    n: float,
    i: float,
    pv: float,
    pmt: float,
    begin: bool = False,
) -> List[Dict]:
    """
    Full schedule, one row per whole period.

    Returns:
        List of rows with period, payment, interest, principal and balance
    """
    periods = _whole_periods(n)
    return [
        {
            "period": period,
            "payment": pmt,
            "interest": interest,
            "principal": principal,
            "balance": balance,
        }
        for period, principal, interest, balance in _walk(i, pv, pmt, periods, begin)
    ]


def amortize_problem(problem: TVMProblem, p1: int, p2: int) -> AmortizationResult:
    """Amortize the loan described by a TVM problem over periods p1..p2."""
    _check_inputs(problem)
    return amortize(
        problem.n,
        problem.periodic_rate(),
        problem.pv,
        problem.pmt,
        p1,
        p2,
        problem.begin,
    )


def schedule_for_problem(problem: TVMProblem) -> List[Dict]:
    """Full amortization schedule for the loan described by a TVM problem."""
    _check_inputs(problem)
    return amortization_schedule(
        problem.n,
        problem.periodic_rate(),
        problem.pv,
        problem.pmt,
        problem.begin,
    )


def _check_inputs(problem: TVMProblem) -> None:
    missing = [name for name in ("n", "iy", "pv", "pmt") if getattr(problem, name) is None]
    if missing:
        raise InvalidConfiguration(f"Amortization needs N, I/Y, PV and PMT; missing {missing}")
    problem.check_settings()


def _whole_periods(n: float) -> int:
    if n is None or not math.isfinite(n) or n < 1:
        raise InvalidConfiguration(f"N must be at least 1 to amortize, got {n!r}")
    return math.floor(n)


def _check_range(n: float, p1: int, p2: int) -> None:
    last = _whole_periods(n)
    if not 1 <= p1 <= p2 <= last:
        raise InvalidConfiguration(f"Period range must satisfy 1 <= P1 <= P2 <= {last}, got P1={p1}, P2={p2}")
