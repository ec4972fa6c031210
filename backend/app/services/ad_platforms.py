"""Ad platform clients (Google Ads, Meta Ads).

Only the simulation path is implemented: with simulation_mode on, campaign
creation returns fake handles shaped like the real platform responses and
pausing always succeeds. Without simulation a client reports itself disabled
and every call is a logged no-op.
"""

import logging
import random
from typing import Any

from app.config import settings
from app.schemas.campaign import Platform
from app.schemas.outage import IncidentRecord

logger = logging.getLogger(__name__)


class CampaignPlatform:
    platform: Platform
    # Key in the campaign handle that pause_campaign() needs
    handle_key: str

    def __init__(self, enabled: bool, simulation: bool | None = None):
        self.simulation = settings.simulation_mode if simulation is None else simulation
        self._enabled = enabled and self.simulation
        if enabled and not self.simulation:
            logger.warning(
                "%s: no live API integration configured, campaigns will NOT be created",
                self.platform.value,
            )

    def is_enabled(self) -> bool:
        return self._enabled

    def campaign_name(self, incident: IncidentRecord) -> str:
        return f"Storing {incident.city} {incident.first_seen:%Y-%m-%d} ({incident.id})"

    async def create_campaign(self, incident: IncidentRecord, options: dict[str, Any] | None = None) -> dict | None:
        """Create a campaign for an incident. Returns the handle dict or None."""
        if not self._enabled:
            logger.debug("%s: skipped, not enabled", self.platform.value)
            return None
        options = options or {}
        campaign_id = f"SIM_{random.randint(0, 999_999)}"
        radius = options.get("custom_radius") or incident.severity.radius_km
        budget = options.get("custom_budget") or getattr(incident.severity, f"{self.platform.value}_budget")
        logger.info(
            "%s (simulated): campaign %s for %s, radius %d km, budget %.2f",
            self.platform.value, campaign_id, incident.city, radius, budget,
        )
        return {
            "name": self.campaign_name(incident),
            "simulated": True,
            "radius_km": radius,
            "landing_page_url": settings.landing_page_url,
            **self._simulated_handle(campaign_id),
        }

    async def pause_campaign(self, handle: str) -> bool:
        if not self._enabled:
            return False
        logger.info("%s (simulated): campaign paused %s", self.platform.value, handle)
        return True

    def _simulated_handle(self, campaign_id: str) -> dict[str, str]:
        raise NotImplementedError


class GoogleAdsClient(CampaignPlatform):
    platform = Platform.GOOGLE
    handle_key = "campaign_resource_name"

    def __init__(self, enabled: bool | None = None, simulation: bool | None = None):
        super().__init__(settings.google_ads_enabled if enabled is None else enabled, simulation)

    def _simulated_handle(self, campaign_id: str) -> dict[str, str]:
        return {
            "campaign_id": campaign_id,
            "campaign_resource_name": f"customers/123/campaigns/{campaign_id}",
            "budget_resource_name": f"customers/123/campaignBudgets/{campaign_id}",
            "ad_group_resource_name": f"customers/123/adGroups/{campaign_id}",
        }


class MetaAdsClient(CampaignPlatform):
    platform = Platform.META
    handle_key = "campaign_id"

    def __init__(self, enabled: bool | None = None, simulation: bool | None = None):
        super().__init__(settings.meta_ads_enabled if enabled is None else enabled, simulation)

    def _simulated_handle(self, campaign_id: str) -> dict[str, str]:
        return {
            "campaign_id": campaign_id,
            "ad_set_id": f"{campaign_id}_adset",
            "ad_id": f"{campaign_id}_ad",
        }
