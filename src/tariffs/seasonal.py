"""Seasonal consumption-cost multipliers."""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from .models import SeasonalAdjustment


@dataclass(frozen=True)
class AppliedSeasonalAdjustment:
    """The seasonal window that priced a bill."""

    name: str
    multiplier: float

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "multiplier": self.multiplier}


class SeasonalAdjuster:
    """Applies the first seasonal window containing the billing month.

    Windows are checked in configured order and the first match wins, even
    when a later window would also contain the month.
    """

    def adjust(
        self,
        consumption_cost: float,
        adjustments: Iterable[SeasonalAdjustment],
        billing_month: int,
    ) -> Tuple[float, Optional[AppliedSeasonalAdjustment]]:
        for season in adjustments:
            if season.contains(billing_month):
                return (
                    consumption_cost * season.multiplier,
                    AppliedSeasonalAdjustment(season.name, season.multiplier),
                )
        return consumption_cost, None
