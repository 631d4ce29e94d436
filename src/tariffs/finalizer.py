"""Tax and currency rounding."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Tuple

from .config import DEFAULT_ENGINE_CONFIG, TariffEngineConfig
from .models import ComputationSettings


def round_half_up(amount: float, decimals: int) -> float:
    """Round to ``decimals`` places, halves away from zero.

    Negative halves also round away from zero (-2.5 gives -3), which only
    matters when discounts push the base below zero.
    """
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(repr(amount)).quantize(quantum, rounding=ROUND_HALF_UP))


class TaxAndRoundingFinalizer:
    """Adds tax to the post-discount, post-surcharge base and rounds the total."""

    def __init__(self, engine_config: TariffEngineConfig = DEFAULT_ENGINE_CONFIG):
        self._engine_config = engine_config

    def finalize(self, base: float, settings: ComputationSettings) -> Tuple[float, float]:
        tax = 0.0
        if settings.apply_tax:
            percent = settings.tax_percent
            if percent is None:
                percent = self._engine_config.default_tax_percent
            tax = base * percent / 100
        total = round_half_up(base + tax, settings.rounding_decimals)
        return tax, total
