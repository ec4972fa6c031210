"""Poll orchestration: fetch -> reconcile -> campaign side effects -> persist.

Also runs the expired-campaign sweep and manual campaign creation. Platform
client failures never abort a cycle; they are logged and the effect skipped.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from app.config import settings
from app.schemas.campaign import CampaignCreateRequest, CampaignRecord, Platform
from app.schemas.outage import IncidentRecord, RawIncident
from app.services import outage_feed
from app.services.ad_platforms import CampaignPlatform, GoogleAdsClient, MetaAdsClient
from app.services.engine import OutageEngine, outage_engine

logger = logging.getLogger(__name__)


class CampaignOrchestrator:
    def __init__(
        self,
        engine: OutageEngine,
        platforms: dict[Platform, CampaignPlatform],
        fetcher: Callable[[], Awaitable[list[RawIncident] | None]] = outage_feed.fetch_outages,
    ):
        self.engine = engine
        self.platforms = platforms
        self.fetcher = fetcher
        self.is_polling = False
        self.poll_count = 0
        self.last_poll_time: datetime | None = None

    async def poll_outages(self) -> dict:
        if self.is_polling:
            logger.warning("Poll skipped: previous poll still running")
            return {"skipped": True, "reason": "poll_in_progress"}

        self.is_polling = True
        start = time.monotonic()
        try:
            self.poll_count += 1
            poll = self.poll_count
            logger.info("Poll #%d started", poll)
            self.engine.add_event("poll_start", f"Poll #{poll} started")

            fresh = await self.fetcher()
            if fresh is None:
                logger.warning("Outage data could not be fetched, keeping current state")
                self.engine.add_event("poll_error", "Fetching outages failed, state kept")
                self.last_poll_time = datetime.now(timezone.utc)
                return {"poll": poll, "duration_ms": _elapsed_ms(start), "skipped": True, "reason": "fetch_failed"}

            self.engine.add_event("scrape_result", f"{len(fresh)} outages fetched")
            result = self.engine.reconcile(fresh)

            for incident in result.created:
                await self._handle_new_incident(incident)
            for incident in result.updated:
                self.engine.add_event("outage_updated", f"Outage in {incident.city} changed to {incident.status}", {
                    "id": incident.id,
                    "status": incident.status,
                })
            for incident in result.resolved:
                self.engine.add_event("outage_resolved", f"Outage resolved in {incident.city}", {"id": incident.id})
                await self._pause_campaigns_for(incident.id, reason="outage resolved")

            summary = {
                "poll": poll,
                "duration_ms": _elapsed_ms(start),
                "outages_found": len(fresh),
                "new_outages": len(result.created),
                "updated_outages": len(result.updated),
                "resolved_outages": len(result.resolved),
            }
            logger.info(
                "Poll #%d done in %dms: %d outages, %d new, %d resolved",
                poll, summary["duration_ms"], len(fresh), len(result.created), len(result.resolved),
            )
            self.engine.add_event("poll_complete", f"Poll #{poll} complete", summary)
            self.engine.persist_state()
            self.last_poll_time = datetime.now(timezone.utc)
            return summary
        except Exception as e:
            logger.error("Poll #%d failed: %s", self.poll_count, e)
            self.engine.add_event("poll_error", f"Poll failed: {e}")
            return {"poll": self.poll_count, "error": str(e)}
        finally:
            self.is_polling = False

    async def _handle_new_incident(self, incident: IncidentRecord):
        self.engine.add_event("new_outage", f"New outage in {incident.city}{' (gas)' if incident.is_gas else ''}", {
            "id": incident.id,
            "city": incident.city,
            "severity": incident.severity.label,
            "households": incident.impact_households,
            "network_type": incident.network_type.value,
        })
        if incident.is_gas:
            logger.info("Gas outage in %s, no campaign", incident.city)
            return
        if settings.auto_create_campaigns:
            await self.create_campaigns(CampaignCreateRequest(incident_id=incident.id))

    async def _pause_campaigns_for(self, incident_id: str, reason: str):
        slots = self.engine.ledger.get_campaigns_for_outage(incident_id)
        if slots is None:
            return
        for platform in Platform:
            campaign = slots.get(platform)
            if campaign is not None and campaign.is_active:
                await self._pause(incident_id, platform, campaign, reason)

    async def _pause(self, incident_id: str, platform: Platform, campaign: CampaignRecord, reason: str) -> bool:
        client = self.platforms.get(platform)
        handle = campaign.handle.get(client.handle_key) if client else None
        if not handle:
            return False
        try:
            success = await client.pause_campaign(handle)
        except Exception as e:
            logger.error("Failed to pause %s campaign for %s: %s", platform.value, incident_id, e)
            return False
        if success:
            self.engine.ledger.mark_campaign_paused(incident_id, platform)
            self.engine.add_event("campaign_paused", f"{platform.value} campaign paused ({reason})", {
                "outage_id": incident_id,
                "platform": platform.value,
            })
        return bool(success)

    async def cleanup_expired_campaigns(self) -> dict:
        logger.info("Cleanup: checking for expired campaigns")
        expired = self.engine.ledger.get_expired_campaigns()
        if not expired:
            logger.info("Cleanup: no expired campaigns")
            return {"checked": 0, "paused": 0}

        paused = 0
        for item in expired:
            if await self._pause(item.incident_id, item.platform, item.campaign, reason="expired"):
                paused += 1
        self.engine.persist_state()
        logger.info("Cleanup done: %d campaigns checked, %d paused", len(expired), paused)
        return {"checked": len(expired), "paused": paused}

    async def create_campaigns(self, request: CampaignCreateRequest) -> dict:
        """Create campaigns for an active incident on the requested platforms.

        Each platform is admitted separately against its rolling ceiling.
        Returns {"incident": ..., "results": {platform: record|None}, "errors": [...]}.
        Raises LookupError when the incident is not active.
        """
        incident = self.engine.get_active_outage(request.incident_id)
        if incident is None:
            raise LookupError(request.incident_id)

        self.engine.add_event("campaign_trigger", f"Campaign creation started for {incident.city}", {"id": incident.id})
        results: dict[str, CampaignRecord | None] = {}
        errors: list[str] = []
        options = {
            "custom_budget": request.custom_budget,
            "custom_radius": request.custom_radius,
        }

        for platform, client in self.platforms.items():
            if request.platforms is not None and platform not in request.platforms:
                continue
            if not client.is_enabled():
                continue
            results[platform.value] = None
            requested = request.custom_budget or getattr(incident.severity, f"{platform.value}_budget")

            reservation = self.engine.budget.reserve(platform, requested)
            if reservation is None:
                errors.append(f"{platform.value}: daily budget ceiling reached")
                self.engine.add_event("campaign_skipped", f"{platform.value} skipped (budget ceiling) for {incident.city}", {
                    "id": incident.id,
                })
                continue

            try:
                data = await client.create_campaign(incident, options)
                if data:
                    record = self.engine.ledger.register_campaign(incident.id, platform, data, budget=requested)
                    results[platform.value] = record
                    self.engine.add_event("campaign_created", f"{platform.value} campaign created for {incident.city}", {
                        "id": incident.id,
                        "simulated": record.simulated,
                    })
            except Exception as e:
                logger.error("%s campaign creation failed for %s: %s", platform.value, incident.id, e)
                errors.append(f"{platform.value}: {e}")
                self.engine.add_event("campaign_error", f"{platform.value} error for {incident.city}: {e}")
            finally:
                self.engine.budget.release(reservation)

        self.engine.persist_state()
        return {"incident": incident, "results": results, "errors": errors}


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


orchestrator = CampaignOrchestrator(
    outage_engine,
    {Platform.GOOGLE: GoogleAdsClient(), Platform.META: MetaAdsClient()},
)
