"""
Pytest configuration shared by the tidepool unit tests.
"""

import matplotlib

matplotlib.use("Agg")

import pytest

from tidepool.common.config import load_interest_rulebook, load_reporting


@pytest.fixture(scope="session")
def rulebook():
    """Interest rulebook from the packaged YAML."""
    return load_interest_rulebook()


@pytest.fixture(scope="session")
def reporting():
    """Reporting config from the packaged YAML."""
    return load_reporting()


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
