"""
Tempo passthrough endpoints for raw planning and worklog data
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_tempo_connector
from connectors.tempo import TempoConnector
from core.exceptions import UpstreamTransportError, ValidationError
from models.tempo import TimeWindow
from utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


def _window(from_date: Optional[str], to_date: Optional[str]) -> TimeWindow:
    try:
        return TimeWindow.parse(from_date, to_date)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/availability", response_model=Dict[str, Any])
async def get_availability(
    from_date: Optional[str] = Query(None, alias="from", description="Start date (YYYY-MM-DD)"),
    to_date: Optional[str] = Query(None, alias="to", description="End date (YYYY-MM-DD)"),
    tempo: TempoConnector = Depends(get_tempo_connector)
):
    """Raw Tempo Planner allocations"""
    window = _window(from_date, to_date)
    try:
        return await tempo.get_availability(window.params["from"], window.params["to"])
    except UpstreamTransportError as e:
        logger.error("Failed to fetch availability", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch availability data")


@router.get("/billability", response_model=Dict[str, Any])
async def get_billability(
    from_date: Optional[str] = Query(None, alias="from", description="Start date (YYYY-MM-DD)"),
    to_date: Optional[str] = Query(None, alias="to", description="End date (YYYY-MM-DD)"),
    tempo: TempoConnector = Depends(get_tempo_connector)
):
    """Raw Tempo worklogs"""
    window = _window(from_date, to_date)
    try:
        return await tempo.get_billability(window.params["from"], window.params["to"])
    except UpstreamTransportError as e:
        logger.error("Failed to fetch billability", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch billability data")
