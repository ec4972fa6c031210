import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    from app.services.engine import outage_engine
    outage_engine.load_state()
    outage_engine.add_event("system_start", "Outage campaign tracker started", {
        "poll_interval_minutes": settings.poll_interval_minutes,
        "simulation_mode": settings.simulation_mode,
    })
    from app.tasks.scheduler import start_scheduler, stop_scheduler
    start_scheduler()
    # Run the first poll right away instead of waiting a full interval
    import asyncio
    asyncio.create_task(_initial_poll())
    yield
    stop_scheduler()
    outage_engine.persist_state()


async def _initial_poll():
    try:
        from app.services.orchestrator import orchestrator
        logger.info("Running initial outage poll...")
        await orchestrator.poll_outages()
    except Exception as e:
        logger.error("Initial poll failed: %s", e)


app = FastAPI(
    title="Outage Campaigns",
    description="Outage tracking and time-limited ad campaigns per outage",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from app.routers import campaign, outage, status  # noqa: E402

app.include_router(status.router, prefix="/api/v1")
app.include_router(outage.router, prefix="/api/v1")
app.include_router(campaign.router, prefix="/api/v1")


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/api/v1/admin/poll")
async def trigger_poll():
    """Manually trigger an outage poll."""
    from app.services.engine import outage_engine
    from app.services.orchestrator import orchestrator
    outage_engine.add_event("manual_poll", "Manual poll started")
    result = await orchestrator.poll_outages()
    return {"success": "error" not in result, "result": result}


@app.post("/api/v1/admin/cleanup")
async def trigger_cleanup():
    """Manually pause campaigns past their expiry."""
    from app.services.orchestrator import orchestrator
    return await orchestrator.cleanup_expired_campaigns()
