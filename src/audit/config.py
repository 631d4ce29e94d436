"""Configuration for the tariff audit trail."""

from dataclasses import dataclass
from enum import Enum


class EventCategory(str, Enum):
    """Categories for audit events."""

    TARIFF = "tariff"
    SYSTEM = "system"


class EventOutcome(str, Enum):
    """Possible outcomes for audited actions."""

    SUCCESS = "success"
    DENIED = "denied"


@dataclass
class AuditConfig:
    """Audit trail settings."""

    enabled: bool = True
    buffer_size: int = 100
    genesis_hash: str = "genesis"

    @classmethod
    def from_settings(cls, settings) -> "AuditConfig":
        return cls(
            enabled=settings.audit_enabled,
            buffer_size=settings.audit_buffer_size,
        )
