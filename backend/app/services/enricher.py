"""Incident enrichment (first sighting) and field-by-field update merging."""

from datetime import datetime, timedelta

from app.config import settings
from app.schemas.outage import IncidentRecord, RawIncident
from app.services import severity
from app.services.postcode import province_for_location


def enrich(raw: RawIncident, now: datetime) -> IncidentRecord:
    """Build the tracked record for an incident seen for the first time."""
    location = raw.location.model_copy(update={"province": province_for_location(raw.location)})
    return IncidentRecord(
        id=raw.id,
        network_type=raw.network_type,
        impact_households=raw.impact_households,
        location=location,
        period=raw.period,
        status=raw.status,
        severity=severity.classify_capped(raw.impact_households),
        first_seen=now,
        last_updated=now,
        campaign_end_time=now + timedelta(hours=settings.campaign_duration_hours),
    )


def merge_update(existing: IncidentRecord, raw: RawIncident, now: datetime) -> IncidentRecord:
    """Merge a fresh observation over a tracked record.

    Incoming wins for network type, impact, location, period and status.
    id, first_seen and campaign_end_time are kept. Severity and
    last_updated are recomputed.
    """
    location = raw.location.model_copy(update={"province": province_for_location(raw.location)})
    return existing.model_copy(update={
        "network_type": raw.network_type,
        "impact_households": raw.impact_households,
        "location": location,
        "period": raw.period,
        "status": raw.status,
        "severity": severity.classify_capped(raw.impact_households),
        "last_updated": now,
    })
