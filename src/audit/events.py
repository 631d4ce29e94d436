"""Audit event models."""

import hashlib
import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config import EventCategory, EventOutcome


@dataclass(frozen=True)
class Actor:
    """Operator or process that changed a configuration."""

    actor_id: str
    actor_type: str = "user"

    @classmethod
    def system(cls) -> "Actor":
        return cls(actor_id="system", actor_type="system")

    def to_dict(self) -> Dict[str, Any]:
        return {"actor_id": self.actor_id, "actor_type": self.actor_type}


@dataclass(frozen=True)
class Resource:
    """The configuration an action touched."""

    resource_type: str
    resource_id: str
    name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "name": self.name,
        }


@dataclass
class AuditEvent:
    """One recorded store operation, linked into a hash chain."""

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    actor: Optional[Actor] = None
    action: str = ""
    resource: Optional[Resource] = None
    category: EventCategory = EventCategory.TARIFF
    details: Dict[str, Any] = field(default_factory=dict)
    outcome: EventOutcome = EventOutcome.SUCCESS
    event_hash: str = ""
    previous_hash: str = ""

    def compute_hash(self, previous_hash: str) -> str:
        """SHA-256 over the previous hash and this event's content."""
        payload = json.dumps(
            {
                "previous": previous_hash,
                "event_id": self.event_id,
                "timestamp": self.timestamp.isoformat(),
                "action": self.action,
                "resource": self.resource.resource_id if self.resource else None,
                "outcome": self.outcome.value,
                "details": self.details,
            },
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "actor": self.actor.to_dict() if self.actor else None,
            "action": self.action,
            "resource": self.resource.to_dict() if self.resource else None,
            "category": self.category.value,
            "details": self.details,
            "outcome": self.outcome.value,
            "event_hash": self.event_hash,
            "previous_hash": self.previous_hash,
        }
