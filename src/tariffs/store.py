"""Rate-schedule store and lifecycle state machine.

Lifecycle::

    Draft --activate--> Active <--pause/resume--> Paused
    Active --finalize--> Finalized <--finalize-- Paused

At most one configuration is Active at any instant. Every write happens under
one re-entrant lock, and the activate swap (demote the previous Active, promote
the target) is applied in a single step so readers never observe two Active
configurations or none mid-swap. Stored configurations are frozen snapshots;
each transition replaces the snapshot rather than mutating it.
"""

import logging
import threading
import uuid
from dataclasses import fields, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from src.audit import Actor, AuditRecorder, EventCategory, EventOutcome, Resource

from .config import ConfigurationState
from .exceptions import (
    ActivationConflict,
    ConfigurationNotFound,
    InvalidStateTransition,
    TariffError,
    ValidationError,
)
from .models import TariffConfiguration, as_utc
from .validators import TariffValidator

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

PROTECTED_FIELDS = frozenset({
    "id",
    "state",
    "paused_at",
    "created_by",
    "created_at",
    "modified_by",
    "modified_at",
})


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TariffConfigurationStore:
    """Thread-safe owner of rate-schedule versions and their lifecycle.

    Args:
        validator: Validator run on create and update.
        audit: Recorder receiving one event per operation.
        repository: Optional persistence written through on every change.
        clock: Source of "now" for expiry checks and audit stamps.
    """

    def __init__(
        self,
        validator: Optional[TariffValidator] = None,
        audit: Optional[AuditRecorder] = None,
        repository: Optional[Any] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._validator = validator or TariffValidator()
        self._audit = audit
        self._repository = repository
        self._clock = clock or utc_now
        self._configs: Dict[str, TariffConfiguration] = {}
        self._lock = threading.RLock()

    @classmethod
    def from_repository(cls, repository: Any, **kwargs: Any) -> "TariffConfigurationStore":
        """Build a store holding every configuration the repository has."""
        store = cls(repository=repository, **kwargs)
        configs = repository.load_all()
        active = [c.id for c in configs if c.state is ConfigurationState.ACTIVE]
        if len(active) > 1:
            raise ValidationError(
                f"Repository holds {len(active)} active configurations",
                details=[{"configuration_id": cid} for cid in active],
            )
        store._configs = {c.id: c for c in configs}
        logger.info("Loaded %d tariff configurations", len(configs))
        return store

    def now(self) -> datetime:
        return self._clock()

    # ── Queries ───────────────────────────────────────────────────────

    def get(self, configuration_id: str) -> TariffConfiguration:
        with self._lock:
            return self._require(configuration_id)

    def list_configurations(
        self, state: Optional[ConfigurationState] = None
    ) -> List[TariffConfiguration]:
        """List configurations newest first, optionally filtered by state."""
        with self._lock:
            configs = list(self._configs.values())
        if state is not None:
            configs = [c for c in configs if c.state is state]
        return sorted(
            configs,
            key=lambda c: c.created_at or datetime.min.replace(tzinfo=timezone.utc),
            reverse=True,
        )

    def get_active(self) -> Optional[TariffConfiguration]:
        """Return the Active configuration, if any."""
        with self._lock:
            return self._find_active_unlocked()

    def count(self) -> int:
        with self._lock:
            return len(self._configs)

    # ── Editing ───────────────────────────────────────────────────────

    def create(
        self,
        draft: Union[TariffConfiguration, Mapping[str, Any]],
        created_by: str = "system",
        activate_immediately: bool = False,
    ) -> TariffConfiguration:
        """Validate and store a new configuration in Draft state."""
        if not isinstance(draft, TariffConfiguration):
            draft = self._build(draft)

        try:
            effective_from = as_utc(draft.effective_from)
            expires_at = as_utc(draft.expires_at)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Malformed effective window: {exc}") from exc

        now = self.now()
        config = replace(
            draft,
            id=draft.id or uuid.uuid4().hex,
            state=ConfigurationState.DRAFT,
            effective_from=effective_from,
            expires_at=expires_at,
            tiers=draft.sorted_tiers(),
            paused_at=None,
            created_by=created_by,
            created_at=now,
            modified_by=None,
            modified_at=None,
        )
        self._validate(config, "create", created_by)

        with self._lock:
            if config.id in self._configs:
                raise ValidationError(
                    f"Tariff configuration already exists: {config.id}", field="id"
                )
            self._commit(config)
            self._record("create", config, created_by, {"effective_from": config.effective_from})
            logger.info("Tariff configuration created: %s (%s)", config.id, config.name)

            if activate_immediately:
                return self.activate(config.id, operator=created_by)
            return config

    def update(
        self,
        configuration_id: str,
        patch: Mapping[str, Any],
        modified_by: str = "system",
    ) -> TariffConfiguration:
        """Apply a partial change to a Draft or Paused configuration."""
        known = {f.name for f in fields(TariffConfiguration)}
        unknown = sorted(set(patch) - known)
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(unknown)}", field=unknown[0])
        protected = sorted(set(patch) & PROTECTED_FIELDS)
        if protected:
            raise ValidationError(
                f"Fields cannot be patched: {', '.join(protected)}", field=protected[0]
            )

        with self._lock:
            current = self._require(configuration_id)
            if not current.state.is_editable:
                self._deny(current, "update", modified_by, InvalidStateTransition(
                    configuration_id, current.state, "update",
                    message=(
                        f"Configuration {configuration_id} is {current.state.value}; "
                        "only draft or paused configurations can be edited"
                    ),
                ))

            merged = self._build({**current.to_dict(), **patch})
            updated = replace(
                merged,
                id=current.id,
                state=current.state,
                tiers=merged.sorted_tiers(),
                paused_at=current.paused_at,
                created_by=current.created_by,
                created_at=current.created_at,
                modified_by=modified_by,
                modified_at=self.now(),
            )
            self._validate(updated, "update", modified_by)
            self._commit(updated)
            self._record("update", updated, modified_by, {"fields": sorted(patch)})
            logger.info(
                "Tariff configuration updated: %s fields=%s",
                configuration_id, sorted(patch),
            )
            return updated

    def delete(self, configuration_id: str, operator: str = "system") -> None:
        """Permanently remove a configuration that is not Active."""
        with self._lock:
            current = self._require(configuration_id)
            if current.state is ConfigurationState.ACTIVE:
                self._deny(current, "delete", operator, InvalidStateTransition(
                    configuration_id, current.state, "delete",
                    message=(
                        f"Configuration {configuration_id} is active; "
                        "pause or finalize it before deleting"
                    ),
                ))
            if self._repository is not None:
                self._repository.delete(configuration_id)
            del self._configs[configuration_id]
            self._record("delete", current, operator)
            logger.info("Tariff configuration deleted: %s", configuration_id)

    # ── Lifecycle ─────────────────────────────────────────────────────

    def activate(self, configuration_id: str, operator: str = "system") -> TariffConfiguration:
        """Make a configuration the Active one, pausing the previous Active.

        Future-dated activation is allowed; an already expired configuration
        cannot be activated.
        """
        with self._lock:
            target = self._require(configuration_id)
            if target.state is ConfigurationState.ACTIVE:
                return target
            if target.state is ConfigurationState.FINALIZED:
                self._deny(target, "activate", operator, InvalidStateTransition(
                    configuration_id, target.state, "activate",
                ))

            now = self.now()
            if target.expires_at is not None and target.expires_at < now:
                self._deny(target, "activate", operator, InvalidStateTransition(
                    configuration_id, target.state, "activate",
                    message=f"Configuration {configuration_id} expired at "
                            f"{target.expires_at.isoformat()}",
                ))

            changes = []
            previous = self._find_active_unlocked()
            if previous is not None:
                changes.append(replace(
                    previous,
                    state=ConfigurationState.PAUSED,
                    paused_at=now,
                    modified_by=operator,
                    modified_at=now,
                ))
            activated = replace(
                target,
                state=ConfigurationState.ACTIVE,
                paused_at=None,
                modified_by=operator,
                modified_at=now,
            )
            changes.append(activated)
            self._commit(*changes)

            details = {"displaced": previous.id if previous is not None else None}
            self._record("activate", activated, operator, details)
            logger.info(
                "Tariff configuration activated: %s (displaced %s)",
                configuration_id, details["displaced"],
            )
            return activated

    def pause(self, configuration_id: str, operator: str = "system") -> TariffConfiguration:
        """Take the Active configuration out of service."""
        with self._lock:
            current = self._require(configuration_id)
            if current.state is not ConfigurationState.ACTIVE:
                self._deny(current, "pause", operator, InvalidStateTransition(
                    configuration_id, current.state, "pause",
                ))
            now = self.now()
            paused = replace(
                current,
                state=ConfigurationState.PAUSED,
                paused_at=now,
                modified_by=operator,
                modified_at=now,
            )
            self._commit(paused)
            self._record("pause", paused, operator)
            logger.info("Tariff configuration paused: %s", configuration_id)
            return paused

    def resume(self, configuration_id: str, operator: str = "system") -> TariffConfiguration:
        """Return a Paused configuration to service when the slot is free."""
        with self._lock:
            current = self._require(configuration_id)
            if current.state is not ConfigurationState.PAUSED:
                self._deny(current, "resume", operator, InvalidStateTransition(
                    configuration_id, current.state, "resume",
                ))
            active = self._find_active_unlocked()
            if active is not None:
                self._deny(current, "resume", operator, ActivationConflict(
                    configuration_id, current.state, "resume", active.id,
                ))
            resumed = replace(
                current,
                state=ConfigurationState.ACTIVE,
                paused_at=None,
                modified_by=operator,
                modified_at=self.now(),
            )
            self._commit(resumed)
            self._record("resume", resumed, operator)
            logger.info("Tariff configuration resumed: %s", configuration_id)
            return resumed

    def finalize(self, configuration_id: str, operator: str = "system") -> TariffConfiguration:
        """End a configuration's validity now. Irreversible.

        A configuration finalized before its effective date expires at that
        date, so the effective window never ends before it starts.
        """
        with self._lock:
            current = self._require(configuration_id)
            if current.state not in (ConfigurationState.ACTIVE, ConfigurationState.PAUSED):
                self._deny(current, "finalize", operator, InvalidStateTransition(
                    configuration_id, current.state, "finalize",
                ))
            now = self.now()
            expires_at = max(now, current.effective_from)
            finalized = replace(
                current,
                state=ConfigurationState.FINALIZED,
                expires_at=expires_at,
                modified_by=operator,
                modified_at=now,
            )
            self._commit(finalized)
            self._record("finalize", finalized, operator, {"expires_at": expires_at})
            logger.info("Tariff configuration finalized: %s", configuration_id)
            return finalized

    # ── Internals ─────────────────────────────────────────────────────

    def _require(self, configuration_id: str) -> TariffConfiguration:
        config = self._configs.get(configuration_id)
        if config is None:
            raise ConfigurationNotFound(configuration_id)
        return config

    def _find_active_unlocked(self) -> Optional[TariffConfiguration]:
        for config in self._configs.values():
            if config.state is ConfigurationState.ACTIVE:
                return config
        return None

    def _build(self, data: Mapping[str, Any]) -> TariffConfiguration:
        try:
            return TariffConfiguration.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise ValidationError(f"Malformed tariff configuration: {exc}") from exc

    def _validate(self, config: TariffConfiguration, operation: str, operator: str) -> None:
        report = self._validator.validate(config)
        if not report.is_valid:
            logger.warning(
                "Rejected tariff %s for %s: %s",
                operation, config.id, "; ".join(str(i) for i in report.errors),
            )
            report.raise_for_errors()

    def _commit(self, *configs: TariffConfiguration) -> None:
        """Write through to the repository, then swap the snapshots in."""
        if self._repository is not None:
            self._repository.save_many(configs)
        for config in configs:
            self._configs[config.id] = config

    def _deny(self, config: TariffConfiguration, operation: str,
              operator: str, error: TariffError) -> None:
        logger.warning("Rejected tariff %s for %s: %s", operation, config.id, error.message)
        self._record(operation, config, operator, {"reason": error.message},
                     outcome=EventOutcome.DENIED)
        raise error

    def _record(self, operation: str, config: TariffConfiguration, operator: str,
                details: Optional[Dict[str, Any]] = None,
                outcome: EventOutcome = EventOutcome.SUCCESS) -> None:
        if self._audit is None:
            return
        payload = {"state": config.state.value}
        payload.update(details or {})
        self._audit.record(
            action=f"tariff.{operation}",
            actor=Actor(actor_id=operator),
            resource=Resource(
                resource_type="tariff_configuration",
                resource_id=config.id,
                name=config.name,
            ),
            category=EventCategory.TARIFF,
            details=payload,
            outcome=outcome,
        )
