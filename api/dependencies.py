"""
Process-wide connector instances exposed as FastAPI dependencies
"""
from typing import Optional

from fastapi import Depends

from connectors.jira import JiraConnector
from connectors.tempo import TempoConnector
from services.query_router import QueryRouter
from services.team_analysis import TeamAnalysisService

_tempo_connector: Optional[TempoConnector] = None
_jira_connector: Optional[JiraConnector] = None


def get_tempo_connector() -> TempoConnector:
    global _tempo_connector
    if _tempo_connector is None:
        _tempo_connector = TempoConnector()
    return _tempo_connector


def get_jira_connector() -> JiraConnector:
    global _jira_connector
    if _jira_connector is None:
        _jira_connector = JiraConnector()
    return _jira_connector


def get_analysis_service(
    tempo: TempoConnector = Depends(get_tempo_connector),
    jira: JiraConnector = Depends(get_jira_connector),
) -> TeamAnalysisService:
    return TeamAnalysisService(tempo, jira)


def get_query_router(
    analysis_service: TeamAnalysisService = Depends(get_analysis_service),
) -> QueryRouter:
    return QueryRouter(analysis_service)


async def close_connectors():
    """Release upstream HTTP clients on shutdown"""
    global _tempo_connector, _jira_connector
    if _tempo_connector is not None:
        await _tempo_connector.close()
        _tempo_connector = None
    if _jira_connector is not None:
        await _jira_connector.close()
        _jira_connector = None
