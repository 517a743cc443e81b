"""
Keyword-driven query handling for free-text questions about the team
"""
import re
from typing import Callable, List, Optional, Tuple

from config import settings
from core.exceptions import ValidationError
from models.analysis import EnhancedTeamAnalysis, QueryResult, QueryType
from services.team_analysis import TeamAnalysisService
from utils.logging import get_logger
from utils.rounding import format_number as fmt

logger = get_logger(__name__)

PERIOD_PATTERN = re.compile(r"(\d+)\s*(day|week|month)", re.IGNORECASE)
UNIT_DAYS = {"day": 1, "week": 7, "month": 30}


def parse_days(query: str, default: Optional[int] = None) -> int:
    """Day count from phrases like '14 days', '3 weeks' or '2 months'"""
    match = PERIOD_PATTERN.search(query)
    if not match:
        return default if default is not None else settings.analysis.default_days
    try:
        count = int(match.group(1))
    except ValueError:
        raise ValidationError(f"Period too long: {match.group(0)[:20]}...")
    return count * UNIT_DAYS[match.group(2).lower()]


def _mentions(*keywords: str) -> Callable[[str], bool]:
    def predicate(lowered: str) -> bool:
        return any(keyword in lowered for keyword in keywords)
    return predicate


def build_availability_response(analysis: EnhancedTeamAnalysis, query: str) -> QueryResult:
    metrics = analysis.team_metrics
    availability = metrics.availability
    return QueryResult(
        query=query,
        type=QueryType.AVAILABILITY,
        summary=(
            f"Team has {fmt(availability.total_planned_hours)}h planned "
            f"({fmt(availability.avg_planned_hours)}h avg per person). "
            f"{availability.high_capacity_users} high-capacity, "
            f"{availability.low_capacity_users} low-capacity users."
        ),
        insights=[
            f"Status: {metrics.insights.capacity_status}",
            f"Active team members: {metrics.team.active_users}",
            f"High capacity utilization: {availability.high_capacity_users} users",
            f"Low capacity utilization: {availability.low_capacity_users} users",
        ],
        data=analysis,
    )


def build_billability_response(analysis: EnhancedTeamAnalysis, query: str) -> QueryResult:
    metrics = analysis.team_metrics
    billability = metrics.billability
    return QueryResult(
        query=query,
        type=QueryType.BILLABILITY,
        summary=(
            f"Team billability: {billability.overall_billability_rate}% "
            f"({fmt(billability.total_billable_hours)}h/{fmt(billability.total_logged_hours)}h). "
            f"{billability.high_billability_users} high-performers, "
            f"{billability.low_billability_users} need attention."
        ),
        insights=[
            f"Status: {metrics.insights.billability_status}",
            f"Top performers: {len(metrics.insights.top_performers)}",
            f"Users needing attention: {len(metrics.insights.needs_attention)}",
            f"Overall rate: {billability.overall_billability_rate}%",
        ],
        data=analysis,
    )


def build_team_overview_response(analysis: EnhancedTeamAnalysis, query: str) -> QueryResult:
    metrics = analysis.team_metrics
    return QueryResult(
        query=query,
        type=QueryType.TEAM_OVERVIEW,
        summary=(
            f"Team: {metrics.team.active_users} active users. "
            f"Capacity: {metrics.insights.capacity_status}. "
            f"Billability: {metrics.insights.billability_status} "
            f"({metrics.billability.overall_billability_rate}%)."
        ),
        insights=[
            f"Users: {metrics.team.total_users} total ({metrics.team.active_users} active)",
            f"Hours: {fmt(metrics.availability.total_planned_hours)}h planned, "
            f"{fmt(metrics.billability.total_logged_hours)}h logged",
            f"Billability rate: {metrics.billability.overall_billability_rate}%",
            f"Top performers: {len(metrics.insights.top_performers)}, "
            f"need attention: {len(metrics.insights.needs_attention)}",
        ],
        data=analysis,
    )


def build_full_response(analysis: EnhancedTeamAnalysis, query: str) -> QueryResult:
    metrics = analysis.team_metrics
    return QueryResult(
        query=query,
        type=QueryType.FULL_ANALYSIS,
        summary=(
            f"Complete team analysis: {metrics.team.active_users} active users, "
            f"{metrics.billability.overall_billability_rate}% billability, "
            f"{metrics.insights.capacity_status.lower()}."
        ),
        insights=[
            f"Team size: {metrics.team.active_users} active users",
            f"Capacity: {metrics.insights.capacity_status}",
            f"Billability: {metrics.insights.billability_status}",
            f"Data quality: {analysis.enrichment.enrichment_rate}% user enrichment",
        ],
        data=analysis,
    )


ResponseBuilder = Callable[[EnhancedTeamAnalysis, str], QueryResult]

# Evaluated in order; the first matching predicate wins
QUERY_ROUTES: List[Tuple[Callable[[str], bool], ResponseBuilder]] = [
    (_mentions("available", "availability", "capacity"), build_availability_response),
    (_mentions("billability", "billable"), build_billability_response),
    (_mentions("team", "overview"), build_team_overview_response),
]
FALLBACK_BUILDER: ResponseBuilder = build_full_response


def classify_query(query: str) -> ResponseBuilder:
    lowered = query.lower()
    for predicate, builder in QUERY_ROUTES:
        if predicate(lowered):
            return builder
    return FALLBACK_BUILDER


class QueryRouter:
    """Answers free-text questions with templated summaries"""

    def __init__(self, analysis_service: TeamAnalysisService):
        self.analysis_service = analysis_service

    async def process_query(self, query: str) -> QueryResult:
        logger.info("Processing query", query=repr(query))
        days = parse_days(query)
        builder = classify_query(query)

        analysis = await self.analysis_service.get_enhanced_team_analysis(days=days)
        result = builder(analysis, query)

        logger.info("Query answered", type=result.type.value, days=days)
        return result
