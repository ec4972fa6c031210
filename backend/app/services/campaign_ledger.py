"""Campaign ledger: per-incident google/meta slots with their lifecycle state."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from app.config import settings
from app.schemas.campaign import (
    CampaignOverview,
    CampaignRecord,
    CampaignSlots,
    CampaignStatus,
    ExpiredCampaign,
    LedgerStats,
    Platform,
)
from app.services.reconciler import Reconciler

logger = logging.getLogger(__name__)

# Keys in the client payload that are copied onto the record itself
_RECORD_FIELDS = ("name", "simulated")


class CampaignLedger:
    def __init__(self, reconciler: Reconciler):
        # Incidents are only looked up by id, never owned
        self._incidents = reconciler
        self.campaigns: dict[str, CampaignSlots] = {}

    def register_campaign(
        self,
        incident_id: str,
        platform: Platform,
        campaign_data: dict[str, Any],
        budget: float | None = None,
        now: datetime | None = None,
    ) -> CampaignRecord:
        """Create or overwrite the slot for (incident, platform) as active."""
        now = now or datetime.now(timezone.utc)
        platform = Platform(platform)

        if budget is None:
            incident = self._incidents.get(incident_id)
            budget = getattr(incident.severity, f"{platform.value}_budget") if incident else 0.0

        handle = {k: v for k, v in campaign_data.items() if k not in _RECORD_FIELDS}
        record = CampaignRecord(
            platform=platform,
            budget=budget,
            created_at=now,
            expires_at=now + timedelta(hours=settings.campaign_duration_hours),
            handle=handle,
            name=campaign_data.get("name"),
            simulated=bool(campaign_data.get("simulated", False)),
        )
        self.campaigns.setdefault(incident_id, CampaignSlots()).set(platform, record)
        logger.info(
            "Registered %s campaign for incident %s (budget %.2f, expires %s)",
            platform.value, incident_id, budget, record.expires_at.isoformat(),
        )
        return record

    def get_expired_campaigns(self, now: datetime | None = None) -> list[ExpiredCampaign]:
        now = now or datetime.now(timezone.utc)
        expired = []
        for incident_id, slots in self.campaigns.items():
            for platform in Platform:
                campaign = slots.get(platform)
                if campaign and campaign.is_active and campaign.expires_at < now:
                    expired.append(ExpiredCampaign(incident_id=incident_id, platform=platform, campaign=campaign))
        return expired

    def mark_campaign_paused(self, incident_id: str, platform: Platform) -> None:
        slots = self.campaigns.get(incident_id)
        campaign = slots.get(platform) if slots else None
        if campaign is not None:
            campaign.status = CampaignStatus.PAUSED

    def get_campaigns_for_outage(self, incident_id: str) -> CampaignSlots | None:
        return self.campaigns.get(incident_id)

    def get_all_campaigns(self) -> list[CampaignOverview]:
        result = []
        for incident_id, slots in self.campaigns.items():
            incident = self._incidents.get(incident_id)
            result.append(CampaignOverview(
                incident_id=incident_id,
                city=incident.city if incident else "Onbekend",
                google=slots.google,
                meta=slots.meta,
            ))
        return result

    def iter_campaigns(self, platform: Platform):
        for slots in self.campaigns.values():
            campaign = slots.get(platform)
            if campaign is not None:
                yield campaign

    def get_stats(self) -> LedgerStats:
        records = [c for slots in self.campaigns.values() for c in slots.records()]
        return LedgerStats(
            active_outages=len(self._incidents.active),
            resolved_outages=len(self._incidents.resolved),
            total_campaigns=len(records),
            active_campaigns=sum(1 for c in records if c.is_active),
        )
