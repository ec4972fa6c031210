from datetime import datetime, timezone

from fastapi import APIRouter, Query

from app.config import settings
from app.schemas.campaign import Platform
from app.schemas.status import EventLogPage, PlatformStatus, SystemStatus
from app.services.engine import outage_engine
from app.services.orchestrator import orchestrator

router = APIRouter(tags=["status"])


@router.get("/status", response_model=SystemStatus)
async def get_status():
    google = orchestrator.platforms[Platform.GOOGLE].is_enabled()
    meta = orchestrator.platforms[Platform.META].is_enabled()
    return SystemStatus(
        poll_count=orchestrator.poll_count,
        last_poll_time=orchestrator.last_poll_time,
        is_polling=orchestrator.is_polling,
        simulation_mode=settings.simulation_mode,
        services=PlatformStatus(enabled=google or meta, google=google, meta=meta),
        stats=outage_engine.ledger.get_stats(),
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/log", response_model=EventLogPage)
async def get_event_log(limit: int = Query(50, ge=1, le=200)):
    return EventLogPage(
        total=len(outage_engine.events),
        entries=outage_engine.events.recent(limit),
    )
