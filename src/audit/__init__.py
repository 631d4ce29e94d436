"""Audit trail for tariff configuration changes."""

from .config import (
    AuditConfig,
    EventCategory,
    EventOutcome,
)
from .events import (
    Actor,
    AuditEvent,
    Resource,
)
from .recorder import AuditRecorder

__all__ = [
    # Config
    "AuditConfig",
    "EventCategory",
    "EventOutcome",
    # Events
    "Actor",
    "AuditEvent",
    "Resource",
    # Core
    "AuditRecorder",
]
