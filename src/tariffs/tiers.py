"""Tiered consumption pricing."""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .config import CustomerCategory
from .models import ConsumptionTier


@dataclass(frozen=True)
class TierCharge:
    """Consumption priced inside one tier."""

    lower_bound: float
    upper_bound: Optional[float]
    consumed_m3: float
    unit_rate: float
    subtotal: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lower_bound": self.lower_bound,
            "upper_bound": self.upper_bound,
            "consumed_m3": self.consumed_m3,
            "unit_rate": self.unit_rate,
            "subtotal": self.subtotal,
        }


def tier_capacity(tier: ConsumptionTier) -> float:
    """Cubic metres a bounded tier can hold.

    Bands count whole metres starting at the first one, so ``0-10`` and
    ``11-20`` each hold ten.
    """
    return tier.upper_bound - max(tier.lower_bound, 1) + 1


class ConsumptionTierCalculator:
    """Prices metered consumption against ascending tiers.

    Consumption is filled into each tier in turn until it is exhausted; the
    unbounded last tier absorbs whatever remains. Consumption must already be
    validated as non-negative.
    """

    def price(
        self,
        tiers: Iterable[ConsumptionTier],
        category: CustomerCategory,
        consumption_m3: float,
    ) -> Tuple[float, List[TierCharge]]:
        cost = 0.0
        breakdown: List[TierCharge] = []
        remaining = consumption_m3

        for tier in sorted(tiers, key=lambda t: t.lower_bound):
            if remaining <= 0:
                break
            capacity = remaining if tier.is_unbounded else tier_capacity(tier)
            consumed = min(remaining, capacity)
            if consumed <= 0:
                continue
            rate = tier.rate_for(category)
            subtotal = consumed * rate
            cost += subtotal
            remaining -= consumed
            breakdown.append(
                TierCharge(
                    lower_bound=tier.lower_bound,
                    upper_bound=tier.upper_bound,
                    consumed_m3=consumed,
                    unit_rate=rate,
                    subtotal=subtotal,
                )
            )

        return cost, breakdown
