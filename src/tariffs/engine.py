"""Billing calculation orchestration.

Composes tier pricing, seasonal adjustment, discounts, late fees, tax and
rounding into one result. The orchestrator is a pure function of its inputs:
it never mutates the configuration, performs no I/O and never consults the
store, so the same call serves real invoicing and what-if previews.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional, Tuple

from .config import DEFAULT_ENGINE_CONFIG, CustomerCategory, TariffEngineConfig
from .discounts import AppliedDiscount, DiscountEngine
from .finalizer import TaxAndRoundingFinalizer
from .models import TariffConfiguration
from .seasonal import AppliedSeasonalAdjustment, SeasonalAdjuster
from .surcharges import AppliedSurcharge, SurchargeEngine
from .tiers import ConsumptionTierCalculator, TierCharge


@dataclass(frozen=True)
class CalculationBreakdown:
    """Line-level detail of a calculation."""

    tiers: Tuple[TierCharge, ...] = ()
    discounts: Tuple[AppliedDiscount, ...] = ()
    surcharge: Optional[AppliedSurcharge] = None
    seasonal_adjustment: Optional[AppliedSeasonalAdjustment] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tiers": [t.to_dict() for t in self.tiers],
            "discounts": [d.to_dict() for d in self.discounts],
            "surcharge": self.surcharge.to_dict() if self.surcharge else None,
            "seasonal_adjustment": (
                self.seasonal_adjustment.to_dict() if self.seasonal_adjustment else None
            ),
        }


@dataclass(frozen=True)
class BillingCalculationResult:
    """Amounts owed for one metered period.

    Owned by the caller; nothing in the engine persists it.
    """

    fixed_charge: float
    consumption_cost: float
    subtotal: float
    discounts_total: float
    surcharges_total: float
    tax: float
    total_amount: float
    breakdown: CalculationBreakdown = field(default_factory=CalculationBreakdown)
    configuration_id: str = ""
    category: Optional[CustomerCategory] = None
    consumption_m3: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize result to dictionary."""
        return {
            "configuration_id": self.configuration_id,
            "category": self.category.value if self.category else None,
            "consumption_m3": self.consumption_m3,
            "fixed_charge": self.fixed_charge,
            "consumption_cost": self.consumption_cost,
            "subtotal": self.subtotal,
            "discounts_total": self.discounts_total,
            "surcharges_total": self.surcharges_total,
            "tax": self.tax,
            "total_amount": self.total_amount,
            "breakdown": self.breakdown.to_dict(),
        }


class BillingCalculationOrchestrator:
    """Turns a resolved configuration and a consumption figure into a bill."""

    def __init__(self, engine_config: Optional[TariffEngineConfig] = None) -> None:
        self._engine_config = engine_config or DEFAULT_ENGINE_CONFIG
        self._tiers = ConsumptionTierCalculator()
        self._seasons = SeasonalAdjuster()
        self._discounts = DiscountEngine(self._engine_config)
        self._surcharges = SurchargeEngine()
        self._finalizer = TaxAndRoundingFinalizer(self._engine_config)

    @property
    def engine_config(self) -> TariffEngineConfig:
        return self._engine_config

    def calculate(
        self,
        config: TariffConfiguration,
        category: Any,
        consumption_m3: float,
        billing_period: date,
        days_overdue: int = 0,
        early_payment: bool = False,
    ) -> BillingCalculationResult:
        """Compute the bill for one customer and period.

        Args:
            config: Already-resolved configuration snapshot.
            category: Customer category (enum or name).
            consumption_m3: Validated, non-negative metered consumption.
            billing_period: Date whose month selects the seasonal window.
            days_overdue: Days past the due date, for late fees.
            early_payment: Whether the customer paid early.

        Returns:
            BillingCalculationResult with amounts and line detail.
        """
        category = CustomerCategory.parse(category)
        fixed_charge = config.fixed_charge_for(category)

        consumption_cost, tier_breakdown = self._tiers.price(
            config.tiers, category, consumption_m3
        )
        consumption_cost, seasonal = self._seasons.adjust(
            consumption_cost, config.seasonal_adjustments, billing_period.month
        )
        subtotal = fixed_charge + consumption_cost

        discounts_total, applied_discounts = self._discounts.apply(
            config.discount_rules, category, consumption_m3, subtotal, early_payment
        )
        surcharge, applied_surcharge = self._surcharges.late_fee(
            config.late_fee_policy, subtotal - discounts_total, days_overdue
        )
        tax, total = self._finalizer.finalize(
            subtotal - discounts_total + surcharge, config.computation_settings
        )

        return BillingCalculationResult(
            fixed_charge=fixed_charge,
            consumption_cost=consumption_cost,
            subtotal=subtotal,
            discounts_total=discounts_total,
            surcharges_total=surcharge,
            tax=tax,
            total_amount=total,
            breakdown=CalculationBreakdown(
                tiers=tuple(tier_breakdown),
                discounts=tuple(applied_discounts),
                surcharge=applied_surcharge,
                seasonal_adjustment=seasonal,
            ),
            configuration_id=config.id,
            category=category,
            consumption_m3=consumption_m3,
        )


def calculate(
    config: TariffConfiguration,
    category: Any,
    consumption_m3: float,
    billing_period: date,
    days_overdue: int = 0,
    early_payment: bool = False,
    engine_config: Optional[TariffEngineConfig] = None,
) -> BillingCalculationResult:
    """Module-level convenience wrapper around the orchestrator."""
    return BillingCalculationOrchestrator(engine_config).calculate(
        config, category, consumption_m3, billing_period, days_overdue, early_payment
    )
