from datetime import datetime

from pydantic import BaseModel

from app.schemas.campaign import EventEntry, LedgerStats


class PlatformStatus(BaseModel):
    enabled: bool = False
    google: bool = False
    meta: bool = False


class SystemStatus(BaseModel):
    status: str = "running"
    poll_count: int = 0
    last_poll_time: datetime | None = None
    is_polling: bool = False
    simulation_mode: bool = True
    services: PlatformStatus
    stats: LedgerStats
    timestamp: datetime


class EventLogPage(BaseModel):
    total: int = 0
    entries: list[EventEntry] = []
