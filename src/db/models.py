"""SQLAlchemy ORM models for the APR billing engine.

Tables:
- tariff_configurations: rate-schedule versions and their lifecycle state
"""

import enum

from sqlalchemy import Column, DateTime, Enum, Index, String, Text

from src.db.base import Base


class ConfigurationStateType(enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    FINALIZED = "finalized"


class TariffConfigurationRecord(Base):
    """One persisted rate-schedule version."""

    __tablename__ = "tariff_configurations"

    id = Column(String(64), primary_key=True)
    name = Column(String(100), nullable=False)
    description = Column(Text)
    state = Column(Enum(ConfigurationStateType), nullable=False,
                   default=ConfigurationStateType.DRAFT)
    effective_from = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True))
    paused_at = Column(DateTime(timezone=True))

    # JSON: fixed_charge, tiers, seasonal_adjustments, discount_rules,
    # late_fee_policy, computation_settings
    schedule = Column(Text, nullable=False)

    created_by = Column(String(64), nullable=False, default="system")
    created_at = Column(DateTime(timezone=True))
    modified_by = Column(String(64))
    modified_at = Column(DateTime(timezone=True))

    __table_args__ = (
        Index("ix_tariff_configurations_state_effective", "state", "effective_from"),
        Index("ix_tariff_configurations_window", "effective_from", "expires_at"),
    )
