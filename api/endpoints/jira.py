"""
JIRA passthrough endpoints for users, projects and team activity
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_jira_connector
from connectors.jira import JiraConnector
from core.exceptions import UpstreamTransportError
from utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/users", response_model=List[Dict[str, Any]])
async def get_jira_users(
    query: str = Query("", description="Search text; empty lists all users"),
    max_results: int = Query(50, alias="maxResults", ge=1, le=1000),
    jira: JiraConnector = Depends(get_jira_connector)
):
    """Search or list JIRA users"""
    try:
        return await jira.search_users(query, max_results)
    except UpstreamTransportError as e:
        logger.error("Failed to fetch JIRA users", query=query, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch JIRA users")


@router.get("/projects", response_model=List[Dict[str, Any]])
async def get_jira_projects(jira: JiraConnector = Depends(get_jira_connector)):
    """Get all JIRA projects"""
    try:
        return await jira.get_projects()
    except UpstreamTransportError as e:
        logger.error("Failed to fetch JIRA projects", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch JIRA projects")


@router.get("/user/{account_id}", response_model=Dict[str, Any])
async def get_jira_user(account_id: str, jira: JiraConnector = Depends(get_jira_connector)):
    """Get a single JIRA user by account ID"""
    try:
        return await jira.get_user_by_account_id(account_id)
    except UpstreamTransportError as e:
        logger.error("Failed to fetch JIRA user", account_id=account_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch JIRA user")


@router.get("/current-user", response_model=Dict[str, Any])
async def get_current_jira_user(jira: JiraConnector = Depends(get_jira_connector)):
    """Get the account the API credentials belong to"""
    try:
        return await jira.get_current_user()
    except UpstreamTransportError as e:
        logger.error("Failed to fetch current JIRA user", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch current JIRA user")


@router.get("/team-activity", response_model=Dict[str, Any])
async def get_jira_team_activity(
    projects: Optional[str] = Query(None, description="Comma-separated project keys"),
    days: int = Query(30, ge=1, le=365),
    jira: JiraConnector = Depends(get_jira_connector)
):
    """Issues with work logged in the last N days"""
    project_keys = [key.strip() for key in (projects or "").split(",") if key.strip()]
    try:
        return await jira.get_team_activity(project_keys, days)
    except UpstreamTransportError as e:
        logger.error("Failed to fetch JIRA team activity", projects=projects, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch JIRA team activity")
