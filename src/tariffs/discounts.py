"""Conditional discounts."""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

from .config import DEFAULT_ENGINE_CONFIG, CustomerCategory, DiscountKind, TariffEngineConfig
from .models import DiscountConditions, DiscountRule


@dataclass(frozen=True)
class AppliedDiscount:
    """A discount rule that matched and the amount it took off."""

    name: str
    kind: DiscountKind
    value: float
    amount: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "value": self.value,
            "amount": self.amount,
        }


class DiscountEngine:
    """Evaluates enabled discount rules and sums every match.

    Matching rules are additive: there is no precedence, no mutual exclusion
    and no cap against the subtotal, so the total may exceed it.
    """

    def __init__(self, engine_config: TariffEngineConfig = DEFAULT_ENGINE_CONFIG):
        self._engine_config = engine_config

    def apply(
        self,
        rules: Iterable[DiscountRule],
        category: CustomerCategory,
        consumption_m3: float,
        subtotal: float,
        early_payment: bool,
    ) -> Tuple[float, List[AppliedDiscount]]:
        total = 0.0
        applied: List[AppliedDiscount] = []

        for rule in rules:
            if not rule.enabled:
                continue
            if not self.conditions_met(rule.conditions, category, consumption_m3, early_payment):
                continue
            amount = self.amount_for(rule, consumption_m3, subtotal)
            total += amount
            applied.append(AppliedDiscount(rule.name, rule.kind, rule.value, amount))

        return total, applied

    @staticmethod
    def conditions_met(
        conditions: DiscountConditions,
        category: CustomerCategory,
        consumption_m3: float,
        early_payment: bool,
    ) -> bool:
        """Check consumption bounds, category and early payment.

        A bound of 0 is a real bound, not "unset": ``max_consumption=0``
        admits only zero consumption. An empty ``eligible_categories``
        admits every category, the same as ``None``; the legacy portal
        treated both 0 and an empty list as falsy and excluded everyone for
        the empty list. ``consecutive_months`` is not evaluated here.
        """
        if conditions.min_consumption is not None and consumption_m3 < conditions.min_consumption:
            return False
        if conditions.max_consumption is not None and consumption_m3 > conditions.max_consumption:
            return False
        if conditions.eligible_categories and category not in conditions.eligible_categories:
            return False
        if conditions.requires_early_payment and not early_payment:
            return False
        return True

    def amount_for(self, rule: DiscountRule, consumption_m3: float, subtotal: float) -> float:
        if rule.kind is DiscountKind.PERCENTAGE:
            return subtotal * rule.value / 100
        if rule.kind is DiscountKind.FIXED_AMOUNT:
            return rule.value
        if rule.kind is DiscountKind.MIN_CONSUMPTION_THRESHOLD:
            # The rule value is the consumption threshold; the percentage is
            # fixed by the engine config rather than taken from the rule.
            if consumption_m3 <= rule.value:
                return subtotal * self._engine_config.low_consumption_discount_percent / 100
            return 0.0
        raise ValueError(f"Unsupported discount kind: {rule.kind!r}")
