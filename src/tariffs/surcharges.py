"""Late-payment surcharges."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .models import LateFeePolicy

LATE_PAYMENT_CONCEPT = "Late payment surcharge"


@dataclass(frozen=True)
class AppliedSurcharge:
    """Late-payment penalty charged on a bill."""

    concept: str
    days_late: int
    penalty_percent: float
    amount: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "concept": self.concept,
            "days_late": self.days_late,
            "penalty_percent": self.penalty_percent,
            "amount": self.amount,
        }


class SurchargeEngine:
    """Computes the daily-accruing late fee after the grace period.

    The penalty percentage grows by ``daily_penalty_percent`` per day past
    ``grace_days`` and is capped at ``max_penalty_percent``.
    """

    def late_fee(
        self,
        policy: LateFeePolicy,
        base_after_discount: float,
        days_overdue: int,
    ) -> Tuple[float, Optional[AppliedSurcharge]]:
        if days_overdue <= policy.grace_days:
            return 0.0, None

        days_late = days_overdue - policy.grace_days
        penalty_percent = min(
            days_late * policy.daily_penalty_percent,
            policy.max_penalty_percent,
        )
        amount = base_after_discount * penalty_percent / 100
        return amount, AppliedSurcharge(
            concept=LATE_PAYMENT_CONCEPT,
            days_late=days_late,
            penalty_percent=penalty_percent,
            amount=amount,
        )

    @staticmethod
    def reconnection_fee(policy: LateFeePolicy) -> float:
        """Fee the reconnection workflow charges; never added to a bill here."""
        return policy.reconnection_fee
