from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel

from app.schemas.outage import IncidentRecord


class Platform(str, Enum):
    GOOGLE = "google"
    META = "meta"


class CampaignStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"


class CampaignRecord(BaseModel):
    platform: Platform
    budget: float = 0.0
    created_at: datetime
    expires_at: datetime
    status: CampaignStatus = CampaignStatus.ACTIVE
    # Opaque identifiers returned by the platform client (resource names, ids)
    handle: dict[str, Any] = {}
    name: str | None = None
    simulated: bool = False

    @property
    def is_active(self) -> bool:
        return self.status == CampaignStatus.ACTIVE


class CampaignSlots(BaseModel):
    google: CampaignRecord | None = None
    meta: CampaignRecord | None = None

    def get(self, platform: Platform) -> CampaignRecord | None:
        return getattr(self, Platform(platform).value)

    def set(self, platform: Platform, record: CampaignRecord) -> None:
        setattr(self, Platform(platform).value, record)

    def records(self) -> list[CampaignRecord]:
        return [c for c in (self.google, self.meta) if c is not None]


class ExpiredCampaign(BaseModel):
    incident_id: str
    platform: Platform
    campaign: CampaignRecord


class CampaignOverview(BaseModel):
    incident_id: str
    city: str
    google: CampaignRecord | None = None
    meta: CampaignRecord | None = None


class LedgerStats(BaseModel):
    active_outages: int = 0
    resolved_outages: int = 0
    total_campaigns: int = 0
    active_campaigns: int = 0


class CampaignCreateRequest(BaseModel):
    incident_id: str
    platforms: list[Platform] | None = None  # None = every enabled platform
    custom_budget: float | None = None
    custom_radius: int | None = None


class CampaignCreateResponse(BaseModel):
    message: str
    results: dict[str, CampaignRecord | None] = {}
    errors: list[str] = []


class EventEntry(BaseModel):
    timestamp: datetime
    type: str
    message: str
    data: dict[str, Any] = {}


class EngineState(BaseModel):
    """Everything the engine needs to survive a restart."""
    active: list[IncidentRecord] = []
    resolved: list[IncidentRecord] = []
    campaigns: dict[str, CampaignSlots] = {}
    event_log: list[EventEntry] = []
