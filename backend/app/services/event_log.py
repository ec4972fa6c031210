"""Rolling, most-recent-first event log for the dashboard."""

from datetime import datetime, timezone
from typing import Any

from app.config import settings
from app.schemas.campaign import EventEntry


class EventLog:
    def __init__(self, limit: int | None = None):
        self.limit = limit or settings.event_log_limit
        self.entries: list[EventEntry] = []

    def add(self, type: str, message: str, data: dict[str, Any] | None = None) -> EventEntry:
        entry = EventEntry(
            timestamp=datetime.now(timezone.utc),
            type=type,
            message=message,
            data=data or {},
        )
        self.entries.insert(0, entry)
        del self.entries[self.limit:]
        return entry

    def recent(self, limit: int = 50) -> list[EventEntry]:
        return self.entries[:max(0, limit)]

    def load(self, entries: list[EventEntry]) -> None:
        self.entries = list(entries)[:self.limit]

    def __len__(self) -> int:
        return len(self.entries)
