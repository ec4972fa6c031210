from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class NetworkType(str, Enum):
    ELECTRICITY = "electricity"
    GAS = "gas"
    OTHER = "other"


class SeverityLevel(str, Enum):
    MINOR = "minor"
    MAJOR = "major"
    CRITICAL = "critical"


def parse_datetime(val) -> datetime | None:
    if val is None or val == "":
        return None
    if isinstance(val, datetime):
        return val
    try:
        return datetime.fromisoformat(str(val).replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None


class Location(BaseModel):
    city: str = ""
    province: str | None = None
    postal_codes: list[str] = []
    streets: list[str] = []


class Period(BaseModel):
    begin: datetime | None = None
    end: datetime | None = None  # observed end
    expected_end: datetime | None = None

    @field_validator("begin", "end", "expected_end", mode="before")
    @classmethod
    def _lenient_datetime(cls, v):
        return parse_datetime(v)


class Severity(BaseModel):
    level: SeverityLevel
    label: str
    google_budget: float
    meta_budget: float
    radius_km: int


class RawIncident(BaseModel):
    """A normalised incident as handed over by the feed, before enrichment."""
    id: str
    network_type: NetworkType = NetworkType.ELECTRICITY
    impact_households: int = 0
    location: Location = Field(default_factory=Location)
    period: Period = Field(default_factory=Period)
    status: str = "unknown"

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v):
        return str(v)

    @field_validator("network_type", mode="before")
    @classmethod
    def _known_network(cls, v):
        if isinstance(v, NetworkType):
            return v
        try:
            return NetworkType(str(v or "").lower())
        except ValueError:
            return NetworkType.OTHER

    @field_validator("impact_households", mode="before")
    @classmethod
    def _non_negative_households(cls, v):
        try:
            return max(0, int(v or 0))
        except (ValueError, TypeError):
            return 0

    @field_validator("location", mode="before")
    @classmethod
    def _empty_location(cls, v):
        return v if v is not None else Location()

    @field_validator("period", mode="before")
    @classmethod
    def _empty_period(cls, v):
        return v if v is not None else Period()

    @field_validator("status", mode="before")
    @classmethod
    def _status_text(cls, v):
        return str(v) if v not in (None, "") else "unknown"


class IncidentRecord(RawIncident):
    """Tracked incident state: the raw fields plus everything derived on enrichment."""
    severity: Severity
    first_seen: datetime
    last_updated: datetime
    resolved_at: datetime | None = None
    campaign_end_time: datetime

    @property
    def city(self) -> str:
        return self.location.city or "Onbekend"

    @property
    def is_gas(self) -> bool:
        return self.network_type == NetworkType.GAS


class ReconcileResult(BaseModel):
    created: list[IncidentRecord] = []
    updated: list[IncidentRecord] = []
    resolved: list[IncidentRecord] = []


class OutageOverview(BaseModel):
    active: list[IncidentRecord] = []
    resolved: list[IncidentRecord] = []
