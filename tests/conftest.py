"""
Pytest configuration and shared fixtures.
"""

import pytest

from tvmcalc.calculations.problem import Timing, TVMProblem
from tvmcalc.config import get_settings


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture(scope="session")
def anyio_backend():
    """Backend for async tests."""
    return "asyncio"


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Let tests that patch the environment see fresh settings."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mortgage():
    """$200,000 over 30 years at 6.5%, monthly, payment unknown."""
    return TVMProblem(n=360, iy=6.5, pv=200000, fv=0, cy=12, py=12, timing=Timing.END)


@pytest.fixture
def investment_flows():
    """Outlay followed by four growing annual inflows."""
    return [-100000, 30000, 35000, 40000, 45000]
