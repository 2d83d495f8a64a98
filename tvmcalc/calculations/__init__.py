"""
Time Value of Money Calculation Engine

Pure calculation modules: rate conversion, closed-form TVM solutions,
numeric root finding, amortization and cash-flow analysis.
All functions take explicit inputs and keep no state between calls.
"""

from tvmcalc.calculations import amortization, irr, problem, rates, solvers, tvm
from tvmcalc.calculations.amortization import AmortizationResult, amortize, amortize_problem
from tvmcalc.calculations.errors import DivergentSearch, InvalidConfiguration, NoSolution, TVMError
from tvmcalc.calculations.irr import CashFlowSeries, npv
from tvmcalc.calculations.irr import irr as internal_rate_of_return
from tvmcalc.calculations.problem import SolveResult, Timing, TVMProblem, solve, solve_for

__all__ = [
    "amortization",
    "irr",
    "problem",
    "rates",
    "solvers",
    "tvm",
    "AmortizationResult",
    "CashFlowSeries",
    "DivergentSearch",
    "InvalidConfiguration",
    "NoSolution",
    "SolveResult",
    "TVMError",
    "TVMProblem",
    "Timing",
    "amortize",
    "amortize_problem",
    "internal_rate_of_return",
    "npv",
    "solve",
    "solve_for",
]
