"""Tests for the bill preview CLI and the seed script."""

import json

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

import main
from scripts.seed_tariffs import seed
from src.db import get_session_factory, init_db
from src.tariffs.config import ConfigurationState
from src.tariffs.repository import TariffRepository


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(main, "configure_logging", lambda config: None)


class TestPreviewCli:
    """Tests for main.py."""

    def test_json_output(self, capsys):
        code = main.main(["--category", "residential", "--consumption", "15",
                          "--month", "7", "--json"])
        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["total_amount"] == 26500
        assert data["category"] == "residential"
        assert [t["consumed_m3"] for t in data["breakdown"]["tiers"]] == [10, 5]

    def test_early_payment_and_late_fee(self, capsys):
        main.main(["--category", "residential", "--consumption", "15", "--month", "7",
                   "--early-payment", "--days-overdue", "15", "--json"])
        data = json.loads(capsys.readouterr().out)
        assert data["discounts_total"] == pytest.approx(1325)
        assert data["breakdown"]["surcharge"]["penalty_percent"] == pytest.approx(2.5)

    def test_table_output(self, capsys):
        assert main.main(["--category", "senior", "--consumption", "0"]) == 0
        out = capsys.readouterr().out
        assert "TOTAL:" in out
        assert "8,000.00" in out

    def test_default_category_from_settings(self, capsys):
        main.main(["--consumption", "1", "--json"])
        assert json.loads(capsys.readouterr().out)["category"] == "residential"

    def test_negative_consumption(self, capsys):
        assert main.main(["--consumption", "-1"]) == 2
        assert "non-negative" in capsys.readouterr().err

    def test_unknown_category_rejected_by_parser(self):
        with pytest.raises(SystemExit):
            main.main(["--category", "government", "--consumption", "1"])


class TestSeedScript:
    """Tests for scripts/seed_tariffs.py."""

    def setup_method(self):
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        init_db(self.engine)
        self.session_factory = get_session_factory(self.engine)

    def teardown_method(self):
        self.engine.dispose()

    def test_seeds_active_reference_schedule(self):
        config_id = seed(self.session_factory)
        stored = TariffRepository(self.session_factory).get(config_id)
        assert stored.state is ConfigurationState.ACTIVE
        assert stored.name == "APR Basic Tariff"
        assert stored.created_by == "seed"

    def test_is_idempotent(self):
        first = seed(self.session_factory)
        assert seed(self.session_factory) == first
        assert len(TariffRepository(self.session_factory).load_all()) == 1
