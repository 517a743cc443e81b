"""
Team analysis API endpoints: merged analysis, enhanced analysis and free-text queries
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from api.dependencies import get_analysis_service, get_query_router
from config import settings
from core.exceptions import UpstreamTransportError, ValidationError
from models.analysis import EnhancedTeamAnalysis, QueryResult, TeamAnalysis
from services.query_router import QueryRouter
from services.team_analysis import TeamAnalysisService
from utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


class QueryRequest(BaseModel):
    query: Optional[str] = None


def parse_days_param(days: Optional[str]) -> int:
    """Validate the `days` query parameter (1 to MAX_ANALYSIS_DAYS)"""
    if days is None or days == "":
        return settings.analysis.default_days
    try:
        value = int(days)
    except ValueError:
        value = None
    if value is None or value < 1 or value > settings.analysis.max_days:
        raise ValidationError(
            f"Invalid days parameter: must be a number between 1 and {settings.analysis.max_days}"
        )
    return value


@router.get("/team-analysis", response_model=TeamAnalysis)
async def get_team_analysis(
    days: Optional[str] = Query(None, description="Number of days to analyze"),
    service: TeamAnalysisService = Depends(get_analysis_service)
):
    """Merged planned/logged time per user, without JIRA identities"""
    try:
        return await service.analyze_team(days=parse_days_param(days))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UpstreamTransportError as e:
        logger.error("Failed to analyze team", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to analyze team data")


@router.get("/enhanced-analysis", response_model=EnhancedTeamAnalysis)
async def get_enhanced_analysis(
    days: Optional[str] = Query(None, description="Number of days to analyze"),
    service: TeamAnalysisService = Depends(get_analysis_service)
):
    """Full analysis with JIRA identities and team metrics"""
    try:
        return await service.get_enhanced_team_analysis(days=parse_days_param(days))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UpstreamTransportError as e:
        logger.error("Failed to run enhanced analysis", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to run enhanced team analysis")


@router.post("/query", response_model=QueryResult)
async def query_team(
    request: QueryRequest,
    query_router: QueryRouter = Depends(get_query_router)
):
    """Answer a free-text question about the team"""
    if not request.query or not request.query.strip():
        raise HTTPException(status_code=400, detail="Missing required field: query")

    try:
        return await query_router.process_query(request.query)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UpstreamTransportError as e:
        logger.error("Failed to process query", query=repr(request.query), error=str(e))
        raise HTTPException(status_code=500, detail="Failed to process query")
