"""Tests for the billing service facade."""

from datetime import date, datetime, timezone

import pytest

from src.tariffs import (
    NoActiveConfiguration,
    TariffConfigurationStore,
    TariffEngineConfig,
    TariffService,
    default_tariff_configuration,
)
from src.tariffs.models import ComputationSettings

from conftest import make_configuration


@pytest.fixture
def store(clock):
    return TariffConfigurationStore(clock=clock)


@pytest.fixture
def service(store):
    store.create(default_tariff_configuration(), activate_immediately=True)
    return TariffService(store)


class TestTariffService:
    """Tests for calculate and simulate."""

    def test_calculate_against_reference_schedule(self, service):
        result = service.calculate("residential", 15, date(2025, 7, 1))
        assert result.total_amount == 26500
        assert result.configuration_id == service.store.get_active().id

    def test_calculate_with_early_payment(self, service):
        result = service.calculate("residential", 15, date(2025, 7, 1), early_payment=True)
        assert result.discounts_total == pytest.approx(1325)
        assert result.total_amount == 25175

    def test_calculate_late(self, service):
        result = service.calculate("commercial", 5, date(2025, 7, 1), days_overdue=30)
        base = 25000 + 5 * 1000
        assert result.surcharges_total == pytest.approx(base * 0.10)
        assert result.total_amount == 33000

    def test_no_active_configuration_is_an_error(self, clock):
        service = TariffService(TariffConfigurationStore(clock=clock))
        with pytest.raises(NoActiveConfiguration):
            service.calculate("residential", 15, date(2025, 7, 1))

    def test_evaluation_date_outside_window(self, service):
        with pytest.raises(NoActiveConfiguration):
            service.calculate(
                "residential", 15, date(2025, 1, 1),
                evaluation_date=datetime(2025, 1, 15, tzinfo=timezone.utc),
            )

    def test_simulate_matches_calculate(self, service):
        period = date(2025, 7, 1)
        preview = service.simulate("senior", 23.5, early_payment=True, billing_period=period)
        invoice = service.calculate("senior", 23.5, period, early_payment=True)
        assert preview == invoice
        assert preview.surcharges_total == 0

    def test_simulate_defaults_to_today(self, service, clock):
        result = service.simulate("industrial", 0)
        assert result.total_amount == 50000

    def test_engine_config_default_tax(self, store):
        store.create(
            make_configuration(computation_settings=ComputationSettings(apply_tax=True)),
            activate_immediately=True,
        )
        service = TariffService(store, TariffEngineConfig(default_tax_percent=10.0))
        result = service.calculate("residential", 0, date(2025, 7, 1))
        assert result.tax == pytest.approx(1250)
        assert result.total_amount == 13750

    def test_resolver_exposed(self, service):
        assert service.resolver.resolve().name == "APR Basic Tariff"
