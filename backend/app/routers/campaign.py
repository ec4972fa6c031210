from fastapi import APIRouter, HTTPException

from app.schemas.campaign import CampaignCreateRequest, CampaignCreateResponse, CampaignOverview
from app.services.engine import outage_engine
from app.services.orchestrator import orchestrator

router = APIRouter(prefix="/campaigns", tags=["campaigns"])


@router.get("/", response_model=list[CampaignOverview])
async def list_campaigns():
    return outage_engine.ledger.get_all_campaigns()


@router.post("/", response_model=CampaignCreateResponse)
async def create_campaigns(request: CampaignCreateRequest):
    """Manually start campaigns for an active outage."""
    try:
        outcome = await orchestrator.create_campaigns(request)
    except LookupError:
        raise HTTPException(status_code=404, detail="Outage not found or already resolved")

    results = outcome["results"]
    if not any(results.values()) and outcome["errors"]:
        raise HTTPException(
            status_code=500,
            detail={"error": "Campaign creation failed", "details": outcome["errors"]},
        )
    return CampaignCreateResponse(
        message="Campaign(s) created" if any(results.values()) else "No campaigns created",
        results=results,
        errors=outcome["errors"],
    )
