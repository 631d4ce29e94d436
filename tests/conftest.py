"""Pytest configuration and shared fixtures."""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.audit import AuditRecorder  # noqa: E402
from src.tariffs import (  # noqa: E402
    ConsumptionTier,
    CustomerCategory,
    LateFeePolicy,
    TariffConfiguration,
)

R = CustomerCategory.RESIDENTIAL
C = CustomerCategory.COMMERCIAL
I = CustomerCategory.INDUSTRIAL  # noqa: E741
S = CustomerCategory.SENIOR


@pytest.fixture(autouse=True)
def reset_audit_recorder():
    """Give each test a fresh shared audit recorder."""
    AuditRecorder.reset_instance()
    yield
    AuditRecorder.reset_instance()


class FixedClock:
    """Settable clock for store tests."""

    def __init__(self, now: datetime):
        self.current = now

    def __call__(self) -> datetime:
        return self.current


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc))


def make_configuration(**overrides) -> TariffConfiguration:
    """Basic three-tier schedule with no discounts, surcharge or tax."""
    values = dict(
        name="Test Tariff",
        effective_from=datetime(2025, 1, 1, tzinfo=timezone.utc),
        fixed_charge={R: 12500.0, C: 25000.0, I: 50000.0, S: 8000.0},
        tiers=(
            ConsumptionTier(0, 10, {R: 800.0, C: 1000.0, I: 1200.0, S: 600.0}),
            ConsumptionTier(11, 20, {R: 1200.0, C: 1500.0, I: 1800.0, S: 900.0}),
            ConsumptionTier(21, None, {R: 1800.0, C: 2200.0, I: 2500.0, S: 1400.0}),
        ),
        late_fee_policy=LateFeePolicy(
            grace_days=10, daily_penalty_percent=0.5, max_penalty_percent=50.0
        ),
    )
    values.update(overrides)
    return TariffConfiguration(**values)


@pytest.fixture
def configuration():
    return make_configuration()
