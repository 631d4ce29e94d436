"""Seed the reference tariff schedule.

Creates and activates the cooperative's basic schedule in the configured
database unless an Active configuration is already stored.

Usage:
    python -m scripts.seed_tariffs
"""

import logging

from src.audit import AuditConfig, AuditRecorder
from src.db import get_session_factory, init_db
from src.logging_config import BillingContext, LoggingConfig, configure_logging
from src.settings import get_settings
from src.tariffs import TariffConfigurationStore, default_tariff_configuration
from src.tariffs.repository import TariffRepository

logger = logging.getLogger(__name__)


def seed(session_factory=None, operator: str = "seed") -> str:
    """Ensure an Active configuration exists and return its id."""
    settings = get_settings()
    if session_factory is None:
        init_db()
        session_factory = get_session_factory()

    store = TariffConfigurationStore.from_repository(
        TariffRepository(session_factory),
        audit=AuditRecorder.get_instance(AuditConfig.from_settings(settings)),
    )
    active = store.get_active()
    if active is not None:
        logger.info("Active tariff already present: %s (%s)", active.id, active.name)
        return active.id

    with BillingContext(operator_id=operator):
        config = store.create(
            default_tariff_configuration(),
            created_by=operator,
            activate_immediately=True,
        )
        logger.info("Seeded tariff %s (%s)", config.id, config.name)
    return config.id


if __name__ == "__main__":
    configure_logging(LoggingConfig.from_settings(get_settings()))
    seed()
