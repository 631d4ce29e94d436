"""Billing service: resolve once, then calculate."""

import logging
from datetime import date, datetime
from typing import Any, Optional, Union

from .config import TariffEngineConfig
from .engine import BillingCalculationOrchestrator, BillingCalculationResult
from .resolver import TariffResolver
from .store import TariffConfigurationStore

logger = logging.getLogger(__name__)


class TariffService:
    """Facade used by invoicing and by the simulation preview.

    Both paths resolve the applicable configuration exactly once and run the
    same pure orchestrator, so a preview matches the invoice for identical
    inputs.
    """

    def __init__(
        self,
        store: TariffConfigurationStore,
        engine_config: Optional[TariffEngineConfig] = None,
    ) -> None:
        self._store = store
        self._resolver = TariffResolver(store)
        self._orchestrator = BillingCalculationOrchestrator(engine_config)

    @property
    def store(self) -> TariffConfigurationStore:
        return self._store

    @property
    def resolver(self) -> TariffResolver:
        return self._resolver

    def calculate(
        self,
        category: Any,
        consumption_m3: float,
        billing_period: date,
        days_overdue: int = 0,
        early_payment: bool = False,
        evaluation_date: Optional[Union[date, datetime]] = None,
    ) -> BillingCalculationResult:
        """Bill one customer for one period against the applicable schedule.

        Raises:
            NoActiveConfiguration: when no schedule applies; the caller must
                not fall back to a default bill.
        """
        config = self._resolver.resolve(evaluation_date)
        result = self._orchestrator.calculate(
            config, category, consumption_m3, billing_period, days_overdue, early_payment
        )
        logger.info(
            "Calculated bill: config=%s category=%s consumption=%s total=%s",
            config.id, result.category.value, consumption_m3, result.total_amount,
        )
        return result

    def simulate(
        self,
        category: Any,
        consumption_m3: float,
        early_payment: bool = False,
        billing_period: Optional[date] = None,
    ) -> BillingCalculationResult:
        """Preview a bill with no late fee, using today's schedule by default."""
        now = self._store.now()
        return self.calculate(
            category,
            consumption_m3,
            billing_period or now.date(),
            days_overdue=0,
            early_payment=early_payment,
            evaluation_date=now,
        )
