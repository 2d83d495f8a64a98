"""
Interest Rate Conversions

Converts nominal annual rates (percent) into per-payment-period rates and
back, matching the compounding conventions of a financial calculator.
C/Y is the number of compounding periods per year, P/Y the number of
payments per year.
"""


def periodic_rate(nominal_percent: float, cy: float, py: float) -> float:
    """
    Convert a nominal annual rate to the effective rate per payment period.

    Args:
        nominal_percent: Nominal annual rate in percent (e.g., 6 for 6%)
        cy: Compounding periods per year
        py: Payments per year

    Returns:
        Periodic rate as decimal (e.g., 0.005 for 0.5% per month)
    """
    r = nominal_percent / 100
    if cy == py:
        return r / py
    return (1 + r / cy) ** (cy / py) - 1


def nominal_from_periodic(periodic: float, cy: float, py: float) -> float:
    """
    Convert a per-payment-period rate back to a nominal annual rate.

    Inverse of periodic_rate().

    Returns:
        Nominal annual rate in percent
    """
    if cy == py:
        nominal = periodic * py
    else:
        nominal = cy * ((1 + periodic) ** (py / cy) - 1)
    return nominal * 100


def effective_annual_rate(nominal_percent: float, cy: float) -> float:
    """Effective annual rate (percent) for a nominal rate compounded C/Y times."""
    return ((1 + nominal_percent / 100 / cy) ** cy - 1) * 100


def nominal_from_effective(effective_percent: float, cy: float) -> float:
    """Nominal annual rate (percent) that yields the given effective annual rate."""
    return cy * ((1 + effective_percent / 100) ** (1 / cy) - 1) * 100
