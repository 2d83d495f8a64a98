"""
Financial calculation API endpoints.

These endpoints accept calculator inputs and return calculated results.
The presentation layer owns input parsing and display formatting.
"""

import logging
from typing import Dict, List, Literal, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from tvmcalc.calculations import amortization, irr, rates
from tvmcalc.calculations.errors import TVMError
from tvmcalc.calculations.problem import Timing, TVMProblem, solve, solve_for
from tvmcalc.config import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


def _bad_request(error: TVMError) -> HTTPException:
    logger.info(f"Calculation rejected ({error.kind}): {error}")
    return HTTPException(status_code=400, detail={"error": error.kind, "message": str(error)})


class SettingsInput(BaseModel):
    """Calculator settings; omitted values fall back to the configured defaults."""

    cy: Optional[float] = Field(default=None, description="Compounding periods per year (C/Y)")
    py: Optional[float] = Field(default=None, description="Payments per year (P/Y)")
    timing: Optional[Literal["end", "begin"]] = None

    def build_problem(self, **registers: Optional[float]) -> TVMProblem:
        settings = get_settings()
        return TVMProblem(
            cy=self.cy if self.cy is not None else settings.default_cy,
            py=self.py if self.py is not None else settings.default_py,
            timing=Timing(self.timing or settings.default_timing),
            **registers,
        )


class TVMInput(SettingsInput):
    """Input for a TVM solve. Leave exactly one register empty."""

    n: Optional[float] = None
    iy: Optional[float] = Field(default=None, description="Nominal annual rate in percent")
    pv: Optional[float] = None
    pmt: Optional[float] = None
    fv: Optional[float] = None

    # Recompute this register even if all five are set
    solve_for: Optional[Literal["n", "iy", "pv", "pmt", "fv"]] = None


class TVMResponse(BaseModel):
    """Solved register."""

    variable: str
    value: float
    converged: bool
    residual: float
    method: str


@router.post("/tvm", response_model=TVMResponse)
async def calculate_tvm(inputs: TVMInput):
    """Solve for the missing TVM register."""
    problem = inputs.build_problem(
        n=inputs.n, iy=inputs.iy, pv=inputs.pv, pmt=inputs.pmt, fv=inputs.fv
    )
    try:
        if inputs.solve_for:
            result = solve_for(problem, inputs.solve_for)
        else:
            result = solve(problem)
    except TVMError as e:
        raise _bad_request(e)

    return TVMResponse(
        variable=result.variable,
        value=result.value,
        converged=result.converged,
        residual=result.residual,
        method=result.method,
    )


class AmortizationInput(SettingsInput):
    """Input for amortization calculation."""

    n: float
    iy: float
    pv: float
    pmt: float
    p1: int = 1
    p2: int = 1


class AmortizationResponse(BaseModel):
    """Totals over periods P1..P2."""

    p1: int
    p2: int
    principal: float
    interest: float
    balance: float


@router.post("/amortization", response_model=AmortizationResponse)
async def calculate_amortization(inputs: AmortizationInput):
    """Principal, interest and ending balance over periods P1..P2."""
    problem = inputs.build_problem(n=inputs.n, iy=inputs.iy, pv=inputs.pv, pmt=inputs.pmt)
    try:
        result = amortization.amortize_problem(problem, inputs.p1, inputs.p2)
    except TVMError as e:
        raise _bad_request(e)

    return AmortizationResponse(
        p1=inputs.p1,
        p2=inputs.p2,
        principal=result.principal,
        interest=result.interest,
        balance=result.balance,
    )


class ScheduleInput(SettingsInput):
    """Input for a full amortization schedule."""

    n: float
    iy: float
    pv: float
    pmt: float


@router.post("/amortization/schedule")
async def calculate_amortization_schedule(inputs: ScheduleInput):
    """Generate the period-by-period amortization schedule."""
    problem = inputs.build_problem(n=inputs.n, iy=inputs.iy, pv=inputs.pv, pmt=inputs.pmt)
    try:
        schedule = amortization.schedule_for_problem(problem)
    except TVMError as e:
        raise _bad_request(e)

    return {
        "schedule": schedule,
        "total_interest": sum(row["interest"] for row in schedule),
        "total_principal": sum(row["principal"] for row in schedule),
    }


class NPVInput(BaseModel):
    """Input for NPV calculation."""

    cash_flows: List[float]
    annual_rate: float = Field(description="Annual discount rate in percent")
    py: Optional[float] = Field(default=None, description="Payments per year (P/Y)")


class NPVResponse(BaseModel):
    npv: float


def _payments_per_year(py: Optional[float]) -> float:
    return py if py is not None else get_settings().default_py


@router.post("/npv", response_model=NPVResponse)
async def calculate_npv_endpoint(inputs: NPVInput):
    """Net present value of CF0..CFk at the given annual rate."""
    try:
        value = irr.npv(inputs.cash_flows, inputs.annual_rate, _payments_per_year(inputs.py))
    except TVMError as e:
        raise _bad_request(e)
    return NPVResponse(npv=value)


class IRRInput(BaseModel):
    """Input for IRR calculation."""

    cash_flows: List[float]
    py: Optional[float] = Field(default=None, description="Payments per year (P/Y)")


class IRRResponse(BaseModel):
    """Response with IRR calculation."""

    irr: float
    converged: bool
    residual: float
    npv_at_irr: float


@router.post("/irr", response_model=IRRResponse)
async def calculate_irr_endpoint(inputs: IRRInput):
    """Calculate IRR for given cash flows, annualized in percent."""
    py = _payments_per_year(inputs.py)
    try:
        result = irr.irr(inputs.cash_flows, py)
    except TVMError as e:
        raise _bad_request(e)

    return IRRResponse(
        irr=result.value,
        converged=result.converged,
        residual=result.residual,
        npv_at_irr=irr.calculate_npv(inputs.cash_flows, result.value / 100 / py),
    )


class RateInput(BaseModel):
    """Input for rate conversion."""

    nominal_rate: float = Field(description="Nominal annual rate in percent")
    cy: float = Field(gt=0)
    py: float = Field(gt=0)


@router.post("/rates/convert")
async def convert_rate(inputs: RateInput) -> Dict[str, float]:
    """Periodic and effective annual equivalents of a nominal rate."""
    return {
        "periodic_rate": rates.periodic_rate(inputs.nominal_rate, inputs.cy, inputs.py),
        "effective_annual_rate": rates.effective_annual_rate(inputs.nominal_rate, inputs.cy),
    }
