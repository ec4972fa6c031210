from fastapi import APIRouter, HTTPException

from app.schemas.campaign import CampaignSlots
from app.schemas.outage import IncidentRecord, OutageOverview
from app.services.engine import outage_engine

router = APIRouter(tags=["outages"])


@router.get("/outages/", response_model=OutageOverview)
async def list_outages():
    """Active and recently resolved outages."""
    return OutageOverview(
        active=outage_engine.get_active_outages(),
        resolved=outage_engine.get_resolved_outages(),
    )


@router.get("/outages/{incident_id}", response_model=IncidentRecord)
async def get_outage(incident_id: str):
    incident = outage_engine.reconciler.get(incident_id)
    if incident is None:
        raise HTTPException(status_code=404, detail=f"Outage {incident_id} not found")
    return incident


@router.get("/outages/{incident_id}/campaigns", response_model=CampaignSlots)
async def get_outage_campaigns(incident_id: str):
    return outage_engine.ledger.get_campaigns_for_outage(incident_id) or CampaignSlots()
