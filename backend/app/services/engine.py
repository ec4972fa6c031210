"""Outage engine: incident tracking, campaign ledger, budget control and state.

Holds the in-memory state for the whole service and knows how to snapshot it
to, and restore it from, the state store.
"""

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from pydantic import TypeAdapter, ValidationError

from app.schemas.campaign import CampaignSlots, EngineState, EventEntry
from app.schemas.outage import IncidentRecord, RawIncident, ReconcileResult
from app.services.budget import BudgetAdmissionController
from app.services.campaign_ledger import CampaignLedger
from app.services.event_log import EventLog
from app.services.persistence import StateStore
from app.services.reconciler import Reconciler

logger = logging.getLogger(__name__)

ACTIVE_KEY = "active_outages"
RESOLVED_KEY = "resolved_outages"
CAMPAIGNS_KEY = "campaigns"
EVENT_LOG_KEY = "event_log"

_incidents_adapter = TypeAdapter(list[IncidentRecord])
_campaigns_adapter = TypeAdapter(dict[str, CampaignSlots])
_events_adapter = TypeAdapter(list[EventEntry])


class OutageEngine:
    def __init__(self, store: StateStore | None = None):
        self.store = store or StateStore()
        self.reconciler = Reconciler()
        self.ledger = CampaignLedger(self.reconciler)
        self.budget = BudgetAdmissionController(self.ledger)
        self.events = EventLog()

    def reconcile(self, snapshot: Iterable[RawIncident], now: datetime | None = None) -> ReconcileResult:
        return self.reconciler.reconcile(snapshot, now)

    def add_event(self, type: str, message: str, data: dict[str, Any] | None = None) -> EventEntry:
        return self.events.add(type, message, data)

    def get_active_outages(self) -> list[IncidentRecord]:
        return list(self.reconciler.active.values())

    def get_resolved_outages(self) -> list[IncidentRecord]:
        return list(self.reconciler.resolved.values())

    def get_active_outage(self, incident_id: str) -> IncidentRecord | None:
        return self.reconciler.active.get(incident_id)

    # --- State ---

    def snapshot(self) -> EngineState:
        return EngineState(
            active=self.get_active_outages(),
            resolved=self.get_resolved_outages(),
            campaigns={i: s.model_copy(deep=True) for i, s in self.ledger.campaigns.items()},
            event_log=list(self.events.entries),
        )

    def restore(self, state: EngineState) -> None:
        self.reconciler.load(state.active, state.resolved)
        self.ledger.campaigns = {i: s.model_copy(deep=True) for i, s in state.campaigns.items()}
        self.events.load(state.event_log)

    def persist_state(self) -> bool:
        state = self.snapshot()
        return self.store.save_many({
            ACTIVE_KEY: _incidents_adapter.dump_python(state.active, mode="json"),
            RESOLVED_KEY: _incidents_adapter.dump_python(state.resolved, mode="json"),
            CAMPAIGNS_KEY: _campaigns_adapter.dump_python(state.campaigns, mode="json"),
            EVENT_LOG_KEY: _events_adapter.dump_python(state.event_log, mode="json"),
        })

    def load_state(self) -> EngineState:
        """Restore from the store; each missing or unreadable bundle defaults to empty."""
        state = EngineState(
            active=self._load_bundle(ACTIVE_KEY, _incidents_adapter, []),
            resolved=self._load_bundle(RESOLVED_KEY, _incidents_adapter, []),
            campaigns=self._load_bundle(CAMPAIGNS_KEY, _campaigns_adapter, {}),
            event_log=self._load_bundle(EVENT_LOG_KEY, _events_adapter, []),
        )
        self.restore(state)
        if state.active or state.campaigns or state.event_log:
            logger.info(
                "State loaded: %d active outages, %d campaign slots, %d log entries",
                len(state.active), len(state.campaigns), len(state.event_log),
            )
        return state

    def _load_bundle(self, key: str, adapter: TypeAdapter, default):
        raw = self.store.load(key, default)
        try:
            return adapter.validate_python(raw)
        except ValidationError as e:
            logger.error("Persistence: %s is not valid, starting empty: %s", key, e)
            return default


outage_engine = OutageEngine()
