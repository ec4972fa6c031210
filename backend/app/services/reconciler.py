"""Reconciliation of a fresh outage snapshot against tracked state.

The snapshot is the only source of truth for "still ongoing": anything
tracked but missing from it is resolved. Callers that failed to fetch must
skip reconcile() entirely instead of passing an empty list.
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from app.config import settings
from app.schemas.outage import IncidentRecord, RawIncident, ReconcileResult
from app.services.enricher import enrich, merge_update

logger = logging.getLogger(__name__)


class Reconciler:
    def __init__(self):
        self.active: dict[str, IncidentRecord] = {}
        self.resolved: dict[str, IncidentRecord] = {}

    def get(self, incident_id: str) -> IncidentRecord | None:
        return self.active.get(incident_id) or self.resolved.get(incident_id)

    def reconcile(self, snapshot: Iterable[RawIncident], now: datetime | None = None) -> ReconcileResult:
        now = now or datetime.now(timezone.utc)
        snapshot = list(snapshot)
        fresh_ids = {raw.id for raw in snapshot}
        result = ReconcileResult()

        # New and updated incidents
        for raw in snapshot:
            existing = self.active.get(raw.id)
            if existing is None:
                # A resolved id that shows up again starts over as a new incident
                if self.resolved.pop(raw.id, None) is not None:
                    logger.info("Incident %s reappeared after resolution", raw.id)
                record = enrich(raw, now)
                self.active[raw.id] = record
                result.created.append(record)
                logger.info(
                    "New incident %s in %s (%s, %d households)",
                    record.id, record.city, record.severity.label, record.impact_households,
                )
                continue

            merged = merge_update(existing, raw, now)
            self.active[raw.id] = merged
            if existing.status != merged.status:
                result.updated.append(merged)
                logger.info(
                    "Incident %s updated: status %s -> %s", raw.id, existing.status, merged.status,
                )

        # Duplicate ids in one snapshot are reported once, in their final merged form
        result.created = [self.active[i] for i in dict.fromkeys(r.id for r in result.created)]
        created_ids = {r.id for r in result.created}
        result.updated = [
            self.active[i] for i in dict.fromkeys(r.id for r in result.updated) if i not in created_ids
        ]

        # Resolved: tracked but gone from the snapshot
        for incident_id in [i for i in self.active if i not in fresh_ids]:
            record = self.active.pop(incident_id).model_copy(update={"resolved_at": now})
            self.resolved[incident_id] = record
            result.resolved.append(record)
            logger.info("Incident %s resolved in %s", incident_id, record.city)

        purged = self.purge_resolved(now)
        if purged:
            logger.debug("Purged %d resolved incidents past retention", purged)

        return result

    def purge_resolved(self, now: datetime) -> int:
        cutoff = now - timedelta(hours=settings.resolved_retention_hours)
        stale = [
            i for i, r in self.resolved.items()
            if r.resolved_at is not None and r.resolved_at < cutoff
        ]
        for incident_id in stale:
            del self.resolved[incident_id]
        return len(stale)

    def load(self, active: Iterable[IncidentRecord], resolved: Iterable[IncidentRecord]) -> None:
        self.active = {r.id: r for r in active}
        self.resolved = {r.id: r for r in resolved if r.id not in self.active}
