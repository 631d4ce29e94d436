"""Selection of the rate schedule applicable on a billing date."""

import logging
from datetime import date, datetime
from typing import Optional, Union

from .exceptions import NoActiveConfiguration
from .models import TariffConfiguration, as_utc
from .store import TariffConfigurationStore

logger = logging.getLogger(__name__)


class TariffResolver:
    """Finds the Active configuration whose effective window covers a date.

    The store hands back an immutable snapshot, so a calculation that holds
    the resolved configuration is unaffected by activations that happen
    while it runs.
    """

    def __init__(self, store: TariffConfigurationStore) -> None:
        self._store = store

    def resolve(
        self, evaluation_date: Optional[Union[date, datetime]] = None
    ) -> TariffConfiguration:
        moment = as_utc(evaluation_date) if evaluation_date is not None else self._store.now()
        active = self._store.get_active()
        if active is None or not active.is_effective_at(moment):
            logger.warning(
                "No applicable tariff configuration at %s (active=%s)",
                moment.isoformat(),
                active.id if active is not None else None,
            )
            raise NoActiveConfiguration(moment)
        return active
