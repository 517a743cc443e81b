"""
Team-level rollups and status bands over merged user analysis
"""
from typing import Dict, Iterable, List

from models.analysis import (
    AttentionItem,
    AvailabilityRollup,
    BillabilityRollup,
    TeamInsights,
    TeamMetrics,
    TeamSummary,
    TopPerformer,
    UserAggregate,
)
from utils.rounding import round_half_up

# Capacity bands are ratios of the team's own average planned hours
HIGH_CAPACITY_RATIO = 1.2
LOW_CAPACITY_RATIO = 0.5

HIGH_BILLABILITY_PERCENT = 75
LOW_BILLABILITY_PERCENT = 25
TOP_PERFORMER_MIN_HOURS = 10
TOP_PERFORMER_LIMIT = 3

NO_TIME_LOGGED = "No time logged"
LOW_BILLABILITY = "Low billability"


def get_capacity_status(avg_planned_hours: float) -> str:
    if avg_planned_hours > 35:
        return "High capacity utilization"
    if avg_planned_hours > 25:
        return "Moderate capacity utilization"
    return "Low capacity utilization"


def get_billability_status(rate: float) -> str:
    if rate > 75:
        return "Excellent billability"
    if rate > 50:
        return "Good billability"
    if rate > 25:
        return "Fair billability"
    return "Poor billability"


def is_low_billability(user: UserAggregate) -> bool:
    return (user.billability.total_logged_hours > 0
            and user.billability.billable_percentage < LOW_BILLABILITY_PERCENT)


def get_top_performers(users: Iterable[UserAggregate]) -> List[TopPerformer]:
    candidates = [
        u for u in users
        if u.billability.billable_percentage > HIGH_BILLABILITY_PERCENT
        and u.billability.total_logged_hours > TOP_PERFORMER_MIN_HOURS
    ]
    candidates.sort(key=lambda u: u.billability.billable_percentage, reverse=True)
    return [
        TopPerformer(
            name=u.display_name,
            account_id=u.user_id,
            billable_percentage=u.billability.billable_percentage,
            billable_hours=u.billability.billable_hours,
        )
        for u in candidates[:TOP_PERFORMER_LIMIT]
    ]


def get_users_needing_attention(users: Iterable[UserAggregate]) -> List[AttentionItem]:
    flagged = []
    for u in users:
        logged = u.billability.total_logged_hours
        no_time_logged = u.availability.total_planned_hours > 0 and logged == 0
        if not (is_low_billability(u) or no_time_logged):
            continue
        flagged.append(AttentionItem(
            name=u.display_name,
            account_id=u.user_id,
            issue=NO_TIME_LOGGED if logged == 0 else LOW_BILLABILITY,
            billable_percentage=u.billability.billable_percentage,
            logged_hours=logged,
        ))
    return flagged


def calculate_team_metrics(user_analysis: Dict[str, UserAggregate]) -> TeamMetrics:
    """Roll merged user analysis up to team metrics

    Only users not explicitly marked inactive take part. The result depends
    on nothing but `user_analysis`.
    """
    users = list(user_analysis.values())
    active_users = [u for u in users if u.is_active]

    total_planned_hours = sum(u.availability.total_planned_hours for u in active_users)
    avg_planned_hours = total_planned_hours / len(active_users) if active_users else 0

    total_logged_hours = sum(u.billability.total_logged_hours for u in active_users)
    total_billable_hours = sum(u.billability.billable_hours for u in active_users)
    overall_rate = total_billable_hours / total_logged_hours * 100 if total_logged_hours > 0 else 0

    high_capacity = [u for u in active_users
                     if u.availability.total_planned_hours > avg_planned_hours * HIGH_CAPACITY_RATIO]
    low_capacity = [u for u in active_users
                    if u.availability.total_planned_hours < avg_planned_hours * LOW_CAPACITY_RATIO]

    high_billability = [u for u in active_users
                        if u.billability.billable_percentage > HIGH_BILLABILITY_PERCENT]
    low_billability = [u for u in active_users if is_low_billability(u)]

    return TeamMetrics(
        team=TeamSummary(
            total_users=len(users),
            active_users=len(active_users),
            inactive_users=len(users) - len(active_users),
        ),
        availability=AvailabilityRollup(
            total_planned_hours=round_half_up(total_planned_hours, 2),
            avg_planned_hours=round_half_up(avg_planned_hours, 2),
            high_capacity_users=len(high_capacity),
            low_capacity_users=len(low_capacity),
        ),
        billability=BillabilityRollup(
            total_logged_hours=round_half_up(total_logged_hours, 2),
            total_billable_hours=round_half_up(total_billable_hours, 2),
            overall_billability_rate=int(round_half_up(overall_rate)),
            high_billability_users=len(high_billability),
            low_billability_users=len(low_billability),
        ),
        insights=TeamInsights(
            capacity_status=get_capacity_status(avg_planned_hours),
            billability_status=get_billability_status(overall_rate),
            top_performers=get_top_performers(active_users),
            needs_attention=get_users_needing_attention(active_users),
        ),
    )
