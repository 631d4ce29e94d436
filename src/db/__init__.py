"""Database package for the APR billing engine."""

from src.db.base import Base
from src.db.engine import get_engine, get_session_factory, init_db
from src.db.models import ConfigurationStateType, TariffConfigurationRecord

__all__ = [
    "Base",
    "get_engine",
    "get_session_factory",
    "init_db",
    "ConfigurationStateType",
    "TariffConfigurationRecord",
]
