"""Tests for SQLAlchemy persistence of tariff configurations."""

import json
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from src.db import ConfigurationStateType, TariffConfigurationRecord, get_session_factory, init_db
from src.tariffs.config import ConfigurationState, DiscountKind
from src.tariffs.models import DiscountConditions, DiscountRule, SeasonalAdjustment
from src.tariffs.repository import TariffRepository
from src.tariffs.store import TariffConfigurationStore

from conftest import S, make_configuration


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield get_session_factory(engine)
    engine.dispose()


@pytest.fixture
def repository(session_factory):
    return TariffRepository(session_factory)


def rich_configuration(**overrides):
    values = dict(
        id="cfg-1",
        created_at=datetime(2025, 1, 2, tzinfo=timezone.utc),
        seasonal_adjustments=(SeasonalAdjustment("summer", 12, 2, 1.25),),
        discount_rules=(
            DiscountRule(
                DiscountKind.FIXED_AMOUNT, "Senior", 1500.0,
                DiscountConditions(eligible_categories=(S,), consecutive_months=6),
            ),
        ),
    )
    values.update(overrides)
    return make_configuration(**values)


class TestTariffRepository:
    """Tests for TariffRepository."""

    def test_save_and_get(self, repository):
        config = rich_configuration()
        repository.save(config)
        assert repository.get("cfg-1") == config

    def test_get_missing(self, repository):
        assert repository.get("nope") is None

    def test_schedule_stored_as_json(self, repository, session_factory):
        repository.save(rich_configuration())
        with session_factory() as session:
            record = session.get(TariffConfigurationRecord, "cfg-1")
            schedule = json.loads(record.schedule)
            assert record.state is ConfigurationStateType.DRAFT
        assert set(schedule) == {
            "fixed_charge", "tiers", "seasonal_adjustments",
            "discount_rules", "late_fee_policy", "computation_settings",
        }
        assert schedule["tiers"][2]["upper_bound"] is None

    def test_save_updates_existing_row(self, repository):
        repository.save(rich_configuration())
        repository.save(rich_configuration(name="Renamed", state=ConfigurationState.PAUSED))
        loaded = repository.load_all()
        assert len(loaded) == 1
        assert loaded[0].name == "Renamed"
        assert loaded[0].state is ConfigurationState.PAUSED

    def test_save_many_single_transaction(self, repository):
        repository.save_many([
            rich_configuration(id="a", state=ConfigurationState.PAUSED),
            rich_configuration(id="b", state=ConfigurationState.ACTIVE),
        ])
        states = {c.id: c.state for c in repository.load_all()}
        assert states == {"a": ConfigurationState.PAUSED, "b": ConfigurationState.ACTIVE}

    def test_delete(self, repository):
        repository.save(rich_configuration())
        assert repository.delete("cfg-1") is True
        assert repository.delete("cfg-1") is False
        assert repository.load_all() == []

    def test_datetimes_come_back_utc(self, repository):
        repository.save(rich_configuration())
        loaded = repository.get("cfg-1")
        assert loaded.effective_from.tzinfo is not None
        assert loaded.created_at == datetime(2025, 1, 2, tzinfo=timezone.utc)


class TestStorePersistence:
    """Tests for a store backed by the database."""

    def test_lifecycle_survives_reload(self, repository):
        store = TariffConfigurationStore.from_repository(repository)
        a = store.create(make_configuration(name="Tariff A"), activate_immediately=True)
        b = store.create(make_configuration(name="Tariff B"))
        store.activate(b.id)

        reloaded = TariffConfigurationStore.from_repository(repository)
        assert reloaded.count() == 2
        assert reloaded.get_active().id == b.id
        assert reloaded.get(a.id).state is ConfigurationState.PAUSED
        assert reloaded.get(a.id).paused_at is not None

    def test_delete_removes_row(self, repository):
        store = TariffConfigurationStore.from_repository(repository)
        config = store.create(make_configuration())
        store.delete(config.id)
        assert repository.get(config.id) is None
