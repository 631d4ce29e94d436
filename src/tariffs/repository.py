"""SQLAlchemy persistence for tariff configurations."""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from src.db.models import ConfigurationStateType, TariffConfigurationRecord

from .models import TariffConfiguration, as_utc

logger = logging.getLogger(__name__)

_SCHEDULE_FIELDS = (
    "fixed_charge",
    "tiers",
    "seasonal_adjustments",
    "discount_rules",
    "late_fee_policy",
    "computation_settings",
)


class TariffRepository:
    """Writes configuration snapshots to the ``tariff_configurations`` table.

    The store calls ``save``/``delete`` inside its write lock, so each call
    commits in its own short session.
    """

    def __init__(self, session_factory: Any) -> None:
        self._session_factory = session_factory

    def save(self, config: TariffConfiguration) -> None:
        self.save_many([config])

    def save_many(self, configs: Iterable[TariffConfiguration]) -> None:
        """Upsert several configurations in one transaction."""
        configs = list(configs)
        with self._session_factory() as session:
            for config in configs:
                record = session.get(TariffConfigurationRecord, config.id)
                if record is None:
                    record = TariffConfigurationRecord(id=config.id)
                    session.add(record)
                self._apply(record, config)
            session.commit()
        logger.debug("Persisted tariff configurations %s", [c.id for c in configs])

    @staticmethod
    def _apply(record: TariffConfigurationRecord, config: TariffConfiguration) -> None:
        data = config.to_dict()
        record.name = config.name
        record.description = config.description
        record.state = ConfigurationStateType(config.state.value)
        record.effective_from = config.effective_from
        record.expires_at = config.expires_at
        record.paused_at = config.paused_at
        record.schedule = json.dumps({k: data[k] for k in _SCHEDULE_FIELDS})
        record.created_by = config.created_by
        record.created_at = config.created_at
        record.modified_by = config.modified_by
        record.modified_at = config.modified_at

    def delete(self, configuration_id: str) -> bool:
        with self._session_factory() as session:
            record = session.get(TariffConfigurationRecord, configuration_id)
            if record is None:
                return False
            session.delete(record)
            session.commit()
        logger.debug("Deleted tariff configuration %s", configuration_id)
        return True

    def get(self, configuration_id: str) -> Optional[TariffConfiguration]:
        with self._session_factory() as session:
            record = session.get(TariffConfigurationRecord, configuration_id)
            return self._to_model(record) if record is not None else None

    def load_all(self) -> List[TariffConfiguration]:
        with self._session_factory() as session:
            records = session.query(TariffConfigurationRecord).all()
            return [self._to_model(r) for r in records]

    @staticmethod
    def _to_model(record: TariffConfigurationRecord) -> TariffConfiguration:
        data: Dict[str, Any] = json.loads(record.schedule)
        data.update(
            id=record.id,
            name=record.name,
            description=record.description or "",
            state=record.state.value,
            effective_from=as_utc(record.effective_from),
            expires_at=as_utc(record.expires_at),
            paused_at=as_utc(record.paused_at),
            created_by=record.created_by,
            created_at=as_utc(record.created_at),
            modified_by=record.modified_by,
            modified_at=as_utc(record.modified_at),
        )
        return TariffConfiguration.from_dict(data)
