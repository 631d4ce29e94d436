"""Audit event recorder with hash chain integrity."""

import logging
import threading
from typing import Any, Dict, List, Optional

from .config import AuditConfig, EventCategory, EventOutcome
from .events import Actor, AuditEvent, Resource

logger = logging.getLogger(__name__)

_recorder_instance: Optional["AuditRecorder"] = None
_recorder_lock = threading.Lock()


class AuditRecorder:
    """Thread-safe audit event recorder with hash chain integrity.

    Events are buffered in memory and committed once the buffer fills or
    ``flush`` is called.
    """

    def __init__(self, config: Optional[AuditConfig] = None) -> None:
        self._config = config or AuditConfig()
        self._events: List[AuditEvent] = []
        self._buffer: List[AuditEvent] = []
        self._last_hash: str = self._config.genesis_hash
        self._lock = threading.Lock()

    @classmethod
    def get_instance(cls, config: Optional[AuditConfig] = None) -> "AuditRecorder":
        """Get or create the shared recorder instance."""
        global _recorder_instance
        with _recorder_lock:
            if _recorder_instance is None:
                _recorder_instance = cls(config)
            return _recorder_instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the shared instance (for testing)."""
        global _recorder_instance
        with _recorder_lock:
            _recorder_instance = None

    @property
    def config(self) -> AuditConfig:
        return self._config

    @property
    def event_count(self) -> int:
        """Total number of events (committed + buffered)."""
        with self._lock:
            return len(self._events) + len(self._buffer)

    @property
    def last_hash(self) -> str:
        with self._lock:
            return self._last_hash

    def record(
        self,
        action: str,
        actor: Optional[Actor] = None,
        resource: Optional[Resource] = None,
        category: EventCategory = EventCategory.TARIFF,
        details: Optional[Dict[str, Any]] = None,
        outcome: EventOutcome = EventOutcome.SUCCESS,
    ) -> Optional[AuditEvent]:
        """Record an event and link it into the hash chain.

        Args:
            action: The action performed (e.g., "tariff.activate").
            actor: Who performed the action.
            resource: The configuration acted upon.
            category: Event category.
            details: Additional event details.
            outcome: SUCCESS, or DENIED for a rejected operation.

        Returns:
            The recorded event, or None when auditing is disabled.
        """
        if not self._config.enabled:
            return None

        with self._lock:
            event = AuditEvent(
                action=action,
                actor=actor or Actor.system(),
                resource=resource,
                category=category,
                details=dict(details or {}),
                outcome=outcome,
            )
            event.previous_hash = self._last_hash
            event.event_hash = event.compute_hash(self._last_hash)
            self._last_hash = event.event_hash
            self._buffer.append(event)

            logger.debug(
                "Recorded audit event: %s [%s] hash=%s",
                event.action,
                event.outcome.value,
                event.event_hash[:12],
            )

            if len(self._buffer) >= self._config.buffer_size:
                self._flush_unlocked()

            return event

    def flush(self) -> int:
        """Move buffered events to committed storage; returns the count moved."""
        with self._lock:
            return self._flush_unlocked()

    def _flush_unlocked(self) -> int:
        count = len(self._buffer)
        if count > 0:
            self._events.extend(self._buffer)
            self._buffer.clear()
            logger.debug("Flushed %d audit events", count)
        return count

    def get_all_events(self) -> List[AuditEvent]:
        """Return all events (committed + buffered) in recording order."""
        with self._lock:
            return list(self._events) + list(self._buffer)

    def events_for(self, resource_id: str) -> List[AuditEvent]:
        """Return every event recorded against one configuration."""
        return [
            e for e in self.get_all_events()
            if e.resource is not None and e.resource.resource_id == resource_id
        ]

    def verify_integrity(self) -> bool:
        """Check that no recorded event was altered or removed."""
        previous_hash = self._config.genesis_hash
        for event in self.get_all_events():
            if event.previous_hash != previous_hash:
                logger.error("Previous hash mismatch at event %s", event.event_id)
                return False
            expected_hash = event.compute_hash(previous_hash)
            if event.event_hash != expected_hash:
                logger.error(
                    "Hash chain broken at event %s: expected=%s, got=%s",
                    event.event_id,
                    expected_hash[:12],
                    event.event_hash[:12],
                )
                return False
            previous_hash = event.event_hash
        return True

    def clear(self) -> None:
        """Clear all events (for testing)."""
        with self._lock:
            self._events.clear()
            self._buffer.clear()
            self._last_hash = self._config.genesis_hash
