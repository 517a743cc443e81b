"""
Team analysis service: merges Tempo planning and worklog data per user,
attaches JIRA identities and computes team metrics
"""
import asyncio
from typing import Dict, Iterable, Optional, Tuple

from config import settings
from connectors.jira import JiraConnector
from connectors.tempo import TempoConnector
from core.exceptions import UpstreamTransportError
from models.analysis import (
    AnalysisSummary,
    AvailabilityStats,
    BillabilityStats,
    EnhancedTeamAnalysis,
    EnrichmentStats,
    TeamAnalysis,
    UserAggregate,
    UserIdentity,
)
from models.tempo import LoggedRecord, PlannedRecord, TimeWindow
from services.team_metrics import calculate_team_metrics
from utils.logging import get_logger
from utils.rounding import percentage, to_hours

logger = get_logger(__name__)


class PlannedTotals:
    __slots__ = ("planned_seconds", "plan_count")

    def __init__(self):
        self.planned_seconds = 0
        self.plan_count = 0


class LoggedTotals:
    __slots__ = ("spent_seconds", "billable_seconds", "worklog_count")

    def __init__(self):
        self.spent_seconds = 0
        self.billable_seconds = 0
        self.worklog_count = 0


def group_planned(records: Iterable[PlannedRecord]) -> Dict[str, PlannedTotals]:
    groups: Dict[str, PlannedTotals] = {}
    for record in records:
        totals = groups.setdefault(record.user_id, PlannedTotals())
        totals.planned_seconds += record.planned_seconds
        totals.plan_count += 1
    return groups


def group_logged(records: Iterable[LoggedRecord]) -> Dict[str, LoggedTotals]:
    groups: Dict[str, LoggedTotals] = {}
    for record in records:
        totals = groups.setdefault(record.user_id, LoggedTotals())
        totals.spent_seconds += record.spent_seconds
        totals.billable_seconds += record.billable_seconds
        totals.worklog_count += 1
    return groups


def build_user_aggregate(user_id: str, planned: Optional[PlannedTotals],
                         logged: Optional[LoggedTotals]) -> UserAggregate:
    planned = planned or PlannedTotals()
    logged = logged or LoggedTotals()
    return UserAggregate(
        user_id=user_id,
        availability=AvailabilityStats(
            total_planned_hours=to_hours(planned.planned_seconds),
            plan_count=planned.plan_count,
        ),
        billability=BillabilityStats(
            total_logged_hours=to_hours(logged.spent_seconds),
            billable_hours=to_hours(logged.billable_seconds),
            billable_percentage=percentage(logged.billable_seconds, logged.spent_seconds),
            worklog_count=logged.worklog_count,
        ),
    )


def merge_user_records(planned: Iterable[PlannedRecord],
                       logged: Iterable[LoggedRecord]) -> Dict[str, UserAggregate]:
    """One aggregate per user seen on either side; the missing side is zero"""
    planned_groups = group_planned(planned)
    logged_groups = group_logged(logged)

    # Planned ids first, then logged-only ids, in first-seen order
    all_user_ids = dict.fromkeys([*planned_groups, *logged_groups])
    return {
        user_id: build_user_aggregate(user_id, planned_groups.get(user_id), logged_groups.get(user_id))
        for user_id in all_user_ids
    }


class TeamAnalysisService:
    """Runs the per-request analysis pipeline against Tempo and JIRA"""

    def __init__(self, tempo_connector: TempoConnector, jira_connector: JiraConnector):
        self.tempo = tempo_connector
        self.jira = jira_connector

    def resolve_window(self, days: Optional[int] = None) -> TimeWindow:
        if days is None:
            days = settings.analysis.default_days
        return TimeWindow.last_days(days)

    async def analyze_team(self, days: Optional[int] = None,
                           window: Optional[TimeWindow] = None) -> TeamAnalysis:
        """Merge planned and logged time per user for the window

        Either fetch failing aborts the whole analysis.
        """
        window = window or self.resolve_window(days)
        logger.info("Analyzing team data", **window.params)

        plans, worklogs = await asyncio.gather(
            self.tempo.fetch_planned(window),
            self.tempo.fetch_logged(window),
        )

        user_analysis = merge_user_records(plans, worklogs)
        return TeamAnalysis(
            date_range=window,
            summary=AnalysisSummary(
                total_users=len(user_analysis),
                total_plans=len(plans),
                total_worklogs=len(worklogs),
            ),
            user_analysis=user_analysis,
        )

    async def enrich_identities(self, user_analysis: Dict[str, UserAggregate]) -> Tuple[Dict[str, UserAggregate], EnrichmentStats]:
        """Attach a JIRA identity to every user, falling back to a placeholder"""
        user_ids = list(user_analysis)
        try:
            users = await self.jira.get_users_with_details(user_ids)
        except UpstreamTransportError as e:
            # Only the bulk listing (no ids) can fail as a whole
            logger.warning("JIRA user listing failed", error=str(e))
            users = []

        identities: Dict[str, UserIdentity] = {}
        for user in users:
            if user and user.get("accountId"):
                identity = UserIdentity.from_api(user)
                identities[identity.account_id] = identity

        enriched = {}
        resolved = 0
        for user_id, aggregate in user_analysis.items():
            identity = identities.get(user_id)
            if identity is None:
                identity = UserIdentity.placeholder(user_id)
            else:
                resolved += 1
            enriched[user_id] = aggregate.model_copy(update={"user_info": identity})

        stats = EnrichmentStats(
            users_enriched=resolved,
            total_users=len(user_ids),
            enrichment_rate=percentage(resolved, len(user_ids)),
        )
        return enriched, stats

    async def get_enhanced_team_analysis(self, days: Optional[int] = None,
                                         window: Optional[TimeWindow] = None) -> EnhancedTeamAnalysis:
        """Merged analysis with identities and team metrics"""
        logger.info("Running enhanced team analysis", days=days)
        analysis = await self.analyze_team(days=days, window=window)

        user_analysis, enrichment = await self.enrich_identities(analysis.user_analysis)
        team_metrics = calculate_team_metrics(user_analysis)

        logger.info("Enhanced team analysis completed",
                    users=enrichment.total_users,
                    enrichment_rate=enrichment.enrichment_rate,
                    billability_rate=team_metrics.billability.overall_billability_rate)

        return EnhancedTeamAnalysis(
            date_range=analysis.date_range,
            summary=analysis.summary,
            user_analysis=user_analysis,
            team_metrics=team_metrics,
            enrichment=enrichment,
        )
