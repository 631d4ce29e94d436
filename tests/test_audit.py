"""Tests for the tariff audit trail."""

import threading
from types import SimpleNamespace

from src.audit.config import AuditConfig, EventCategory, EventOutcome
from src.audit.events import Actor, AuditEvent, Resource
from src.audit.recorder import AuditRecorder


def tariff_resource(resource_id="cfg-1"):
    return Resource(resource_type="tariff_configuration", resource_id=resource_id,
                    name="Basic")


class TestAuditConfig:
    """Tests for audit configuration."""

    def test_default_config(self):
        config = AuditConfig()
        assert config.enabled is True
        assert config.buffer_size == 100
        assert config.genesis_hash == "genesis"

    def test_from_settings(self):
        settings = SimpleNamespace(audit_enabled=False, audit_buffer_size=5)
        config = AuditConfig.from_settings(settings)
        assert config.enabled is False
        assert config.buffer_size == 5

    def test_enums(self):
        assert EventCategory.TARIFF.value == "tariff"
        assert EventOutcome.DENIED.value == "denied"


class TestAuditEvent:
    """Tests for event models and hashing."""

    def test_system_actor(self):
        actor = Actor.system()
        assert actor.actor_type == "system"

    def test_hash_is_deterministic(self):
        event = AuditEvent(action="tariff.create", resource=tariff_resource())
        assert event.compute_hash("genesis") == event.compute_hash("genesis")
        assert event.compute_hash("genesis") != event.compute_hash("other")

    def test_hash_covers_details(self):
        event = AuditEvent(action="tariff.update", details={"fields": ["name"]})
        before = event.compute_hash("genesis")
        event.details["fields"].append("tiers")
        assert event.compute_hash("genesis") != before

    def test_to_dict(self):
        event = AuditEvent(
            action="tariff.activate",
            actor=Actor("admin"),
            resource=tariff_resource(),
            outcome=EventOutcome.DENIED,
        )
        data = event.to_dict()
        assert data["actor"] == {"actor_id": "admin", "actor_type": "user"}
        assert data["resource"]["resource_id"] == "cfg-1"
        assert data["outcome"] == "denied"
        assert data["category"] == "tariff"


class TestAuditRecorder:
    """Tests for the hash-chained recorder."""

    def setup_method(self):
        self.recorder = AuditRecorder(AuditConfig(buffer_size=3))

    def test_record_links_chain(self):
        first = self.recorder.record("tariff.create", resource=tariff_resource())
        second = self.recorder.record("tariff.activate", resource=tariff_resource())
        assert first.previous_hash == "genesis"
        assert second.previous_hash == first.event_hash
        assert self.recorder.last_hash == second.event_hash

    def test_default_actor_is_system(self):
        event = self.recorder.record("tariff.create")
        assert event.actor.actor_id == "system"

    def test_buffer_flushes_when_full(self):
        for i in range(4):
            self.recorder.record(f"tariff.op{i}")
        assert self.recorder.event_count == 4
        assert self.recorder.flush() == 1
        assert self.recorder.flush() == 0

    def test_events_for_resource(self):
        self.recorder.record("tariff.create", resource=tariff_resource("a"))
        self.recorder.record("tariff.create", resource=tariff_resource("b"))
        self.recorder.record("tariff.activate", resource=tariff_resource("a"))
        actions = [e.action for e in self.recorder.events_for("a")]
        assert actions == ["tariff.create", "tariff.activate"]

    def test_verify_integrity(self):
        for i in range(5):
            self.recorder.record("tariff.update", details={"n": i})
        assert self.recorder.verify_integrity()

    def test_tampering_detected(self):
        for i in range(5):
            self.recorder.record("tariff.update", details={"n": i})
        self.recorder.get_all_events()[2].details["n"] = 99
        assert not self.recorder.verify_integrity()

    def test_disabled_recorder(self):
        recorder = AuditRecorder(AuditConfig(enabled=False))
        assert recorder.record("tariff.create") is None
        assert recorder.event_count == 0

    def test_clear(self):
        self.recorder.record("tariff.create")
        self.recorder.clear()
        assert self.recorder.event_count == 0
        assert self.recorder.last_hash == "genesis"

    def test_concurrent_recording_keeps_chain(self):
        def worker():
            for _ in range(50):
                self.recorder.record("tariff.update")

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert self.recorder.event_count == 200
        assert self.recorder.verify_integrity()

    def test_singleton(self):
        first = AuditRecorder.get_instance()
        assert AuditRecorder.get_instance() is first
        AuditRecorder.reset_instance()
        assert AuditRecorder.get_instance() is not first
