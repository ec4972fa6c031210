"""Tests for the state store and engine snapshot/restore."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from app.schemas.campaign import CampaignStatus, EngineState, Platform
from app.schemas.outage import RawIncident
from app.services.engine import ACTIVE_KEY, CAMPAIGNS_KEY, EVENT_LOG_KEY, OutageEngine
from app.services.persistence import StateStore

T0 = datetime(2026, 10, 18, 8, 0, tzinfo=timezone.utc)


def _populate(engine: OutageEngine):
    engine.reconcile([
        RawIncident(id="A", impact_households=50, status="active",
                    location={"city": "Breda", "postal_codes": ["4811AA"], "streets": ["Markt"]},
                    period={"begin": "2026-10-18T07:30:00Z", "expected_end": ""}),
        RawIncident(id="B", impact_households=3200, network_type="gas"),
    ], now=T0)
    engine.reconcile([RawIncident(id="A", impact_households=60, status="active")], now=T0 + timedelta(minutes=15))
    engine.ledger.register_campaign("A", Platform.GOOGLE, {"campaign_resource_name": "customers/1/campaigns/2"}, now=T0)
    engine.ledger.register_campaign("A", Platform.META, {"campaign_id": "77", "simulated": True}, now=T0)
    engine.ledger.mark_campaign_paused("A", Platform.META)
    engine.add_event("poll_complete", "Poll #1 complete", {"new_outages": 2})


def test_store_save_and_load(store):
    assert store.load("missing", []) == []
    assert store.save("k", {"a": [1, 2]}) is True
    assert store.load("k") == {"a": [1, 2]}
    assert store.save("k", {"a": []}) is True
    assert store.load("k") == {"a": []}


def test_store_save_failure_is_logged_not_raised(store):
    assert store.save("bad", {"when": object()}) is False
    assert store.load("bad", "default") == "default"


def test_store_load_failure_returns_default():
    session = MagicMock()
    session.get.side_effect = RuntimeError("disk gone")
    store = StateStore(lambda: session)
    assert store.load(ACTIVE_KEY, []) == []
    session.close.assert_called_once()


def test_snapshot_restore_roundtrip_in_memory(engine):
    _populate(engine)
    state = engine.snapshot()
    other = OutageEngine(engine.store)
    other.restore(state)
    assert other.snapshot() == state


def test_empty_state_roundtrip(engine, store):
    assert engine.snapshot() == EngineState()
    assert engine.persist_state() is True
    fresh = OutageEngine(store)
    assert fresh.load_state() == EngineState()


def test_persist_and_load_roundtrip(engine, store):
    _populate(engine)
    before = engine.snapshot()
    assert engine.persist_state() is True

    restored = OutageEngine(store)
    restored.load_state()
    assert restored.snapshot() == before
    assert restored.reconciler.active["A"].first_seen == T0
    assert restored.ledger.get_campaigns_for_outage("A").meta.status == CampaignStatus.PAUSED
    assert restored.ledger.get_stats() == engine.ledger.get_stats()


def test_missing_bundles_default_independently(engine, store):
    _populate(engine)
    engine.persist_state()
    # Wipe one bundle, the others still restore
    store.save(CAMPAIGNS_KEY, "not a mapping")
    restored = OutageEngine(store)
    state = restored.load_state()
    assert state.campaigns == {}
    assert {r.id for r in state.active} == {"A", "B"}
    assert len(state.event_log) == 1


def test_restored_event_log_is_capped(engine, store):
    store.save(EVENT_LOG_KEY, [
        {"timestamp": T0.isoformat(), "type": "t", "message": str(i), "data": {}} for i in range(250)
    ])
    state = engine.load_state()
    assert len(state.event_log) == 250
    assert len(engine.events) == 200


def test_failed_save_many_keeps_previous_bundles(store):
    assert store.save(ACTIVE_KEY, [1]) is True
    assert store.save_many({ACTIVE_KEY: [2], EVENT_LOG_KEY: {"x": object()}}) is False
    assert store.load(ACTIVE_KEY) == [1]
    assert store.load(EVENT_LOG_KEY, "default") == "default"
