"""
Time Value of Money - Closed-Form Solutions

All solvers work on the calculator sign convention used throughout this
package:

    FV = PV * (1+i)^N + PMT * AF(i, N)

where i is the periodic rate and AF the annuity factor. Money paid out and
the resulting balance carry the same sign (a -10,000 deposit grows to a
-16,470 balance).

Closed-form functions return NaN when the algebra is degenerate; the
problem layer turns that into a NoSolution error.
"""

import math

# Below this |i| the rate is treated as exactly zero
ZERO_RATE_EPS = 1e-10

# Below this magnitude a divisor (annuity factor, payment, PV) is zero
DEGENERATE_EPS = 1e-15


def compound_factor(i: float, n: float) -> float:
    """
    (1+i)^n without raising.

    Returns inf on overflow and NaN where the power is undefined
    (1+i <= 0 with a fractional exponent).
    """
    try:
        return math.pow(1 + i, n)
    except OverflowError:
        return math.inf
    except ValueError:
        return math.nan


def annuity_factor(i: float, n: float, begin: bool = False) -> float:
    """
    Accumulated value of N unit payments.

    ((1+i)^N - 1) / i, multiplied by (1+i) for payments at the beginning
    of each period. At a zero rate the factor is simply N.
    """
    if abs(i) < ZERO_RATE_EPS:
        return n

    factor = (compound_factor(i, n) - 1) / i
    return factor * (1 + i) if begin else factor


def solve_fv(n: float, i: float, pv: float, pmt: float, begin: bool = False) -> float:
    """FV = PV*(1+i)^N + PMT*AF"""
    return pv * compound_factor(i, n) + pmt * annuity_factor(i, n, begin)


def solve_pv(n: float, i: float, pmt: float, fv: float, begin: bool = False) -> float:
    """PV = (FV - PMT*AF) / (1+i)^N"""
    return (fv - pmt * annuity_factor(i, n, begin)) / compound_factor(i, n)


def solve_pmt(n: float, i: float, pv: float, fv: float, begin: bool = False) -> float:
    """
    PMT = (FV - PV*(1+i)^N) / AF

    NaN when the annuity factor vanishes (zero periods, or a rate that
    annihilates the factor).
    """
    af = annuity_factor(i, n, begin)
    if abs(af) < DEGENERATE_EPS:
        return math.nan
    return (fv - pv * compound_factor(i, n)) / af


def solve_n(i: float, pv: float, pmt: float, fv: float, begin: bool = False) -> float:
    """
    Number of periods.

    Closed form for the zero-rate and lump-sum cases, otherwise a bisection
    search on the TVM residual. Only the closed-form cases can yield NaN;
    use search_periods() directly to also get the search diagnostics.
    """
    if abs(i) < ZERO_RATE_EPS:
        # FV = PV + PMT*N
        if abs(pmt) < DEGENERATE_EPS:
            return math.nan
        return (fv - pv) / pmt

    if abs(pmt) < DEGENERATE_EPS:
        # FV = PV*(1+i)^N
        if abs(pv) < DEGENERATE_EPS:
            return math.nan
        ratio = fv / pv
        if ratio <= 0 or 1 + i <= 0:
            return math.nan
        return math.log(ratio) / math.log(1 + i)

    from tvmcalc.calculations.solvers import search_periods

    return search_periods(i, pv, pmt, fv, begin).root


def tvm_residual(i: float, n: float, pv: float, pmt: float, fv: float, begin: bool = False) -> float:
    """FV - PV*(1+i)^N - PMT*AF; zero when the five values are consistent."""
    return fv - pv * compound_factor(i, n) - pmt * annuity_factor(i, n, begin)


def tvm_residual_derivative(
    i: float, n: float, pv: float, pmt: float, begin: bool = False
) -> float:
    """
    d/di of tvm_residual().

    The exact derivative of the annuity factor is singular at i = 0, so near
    zero the second-order Taylor value -PV*N - PMT*N(N+1)/2 is used instead.
    """
    if abs(i) < ZERO_RATE_EPS:
        return -pv * n - pmt * n * (n + 1) / 2

    growth = compound_factor(i, n)
    d_compound = n * compound_factor(i, n - 1)

    af = (growth - 1) / i
    d_af = (d_compound * i - (growth - 1)) / (i * i)
    if begin:
        d_af = d_af * (1 + i) + af

    return -pv * d_compound - pmt * d_af
