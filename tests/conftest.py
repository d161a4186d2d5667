import pytest
import sys
from datetime import date, timedelta
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from nse_scanner.data.models import PricePoint


# Pytest configuration
def pytest_configure(config):
    """Configure pytest markers and other settings."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )


def make_series(closes, start: date = date(2024, 1, 1)) -> list:
    """Build consecutive daily price points from a list of closing prices."""
    return [
        PricePoint(
            date=(start + timedelta(days=i)).isoformat(),
            open=close * 0.999,
            high=close * 1.005,
            low=close * 0.995,
            close=close,
            volume=1000000 + i * 10000
        )
        for i, close in enumerate(closes)
    ]


class FakeClock:
    """Controllable replacement for time.time."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def advance(self, seconds: float):
        self.now += seconds

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()
