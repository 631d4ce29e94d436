"""Reference rate schedule of the water cooperative.

Amounts are in whole Chilean pesos; consumption bands are in m³.
"""

from datetime import datetime, timezone
from typing import Optional

from .config import CustomerCategory, DiscountKind
from .models import (
    ComputationSettings,
    ConsumptionTier,
    DiscountConditions,
    DiscountRule,
    LateFeePolicy,
    StateSubsidy,
    TariffConfiguration,
)

R = CustomerCategory.RESIDENTIAL
C = CustomerCategory.COMMERCIAL
I = CustomerCategory.INDUSTRIAL  # noqa: E741
S = CustomerCategory.SENIOR


def default_tariff_configuration(
    effective_from: Optional[datetime] = None,
    expires_at: Optional[datetime] = None,
) -> TariffConfiguration:
    """Build the basic schedule used to seed a fresh installation."""
    return TariffConfiguration(
        name="APR Basic Tariff",
        description="Initial tariff configuration for the APR system",
        effective_from=effective_from or datetime(2025, 2, 1, tzinfo=timezone.utc),
        expires_at=expires_at,
        fixed_charge={R: 12500.0, C: 25000.0, I: 50000.0, S: 8000.0},
        tiers=(
            ConsumptionTier(0, 10, {R: 800.0, C: 1000.0, I: 1200.0, S: 600.0}),
            ConsumptionTier(11, 20, {R: 1200.0, C: 1500.0, I: 1800.0, S: 900.0}),
            ConsumptionTier(21, None, {R: 1800.0, C: 2200.0, I: 2500.0, S: 1400.0}),
        ),
        discount_rules=(
            DiscountRule(
                kind=DiscountKind.PERCENTAGE,
                name="Early payment",
                description="Discount for paying before the due date",
                value=5.0,
                conditions=DiscountConditions(requires_early_payment=True),
            ),
        ),
        late_fee_policy=LateFeePolicy(
            grace_days=10,
            daily_penalty_percent=0.5,
            max_penalty_percent=50.0,
            reconnection_fee=15000.0,
        ),
        computation_settings=ComputationSettings(
            rounding_decimals=0,
            apply_tax=False,
            tax_percent=19.0,
            state_subsidy=StateSubsidy(enabled=False, percent=20.0, max_consumption=15.0),
        ),
    )
