# tests/test_team_metrics.py
import pytest

from models.analysis import AvailabilityStats, BillabilityStats, UserAggregate, UserIdentity
from services.team_metrics import (
    calculate_team_metrics,
    get_billability_status,
    get_capacity_status,
)


def make_user(user_id, planned=0.0, logged=0.0, billable=0.0, active=True):
    percentage = round(billable / logged * 100) if logged else 0
    identity = UserIdentity(account_id=user_id, display_name=user_id.title(), active=active)
    return UserAggregate(
        user_id=user_id,
        availability=AvailabilityStats(total_planned_hours=planned, plan_count=1 if planned else 0),
        billability=BillabilityStats(
            total_logged_hours=logged,
            billable_hours=billable,
            billable_percentage=percentage,
            worklog_count=1 if logged else 0,
        ),
        user_info=identity,
    )


def by_id(*users):
    return {u.user_id: u for u in users}


def test_two_user_capacity_scenario():
    """
    A planned 40h and logged nothing, B planned nothing and logged 20h all billable.
    Average planned is 20h, so A is high capacity (40 > 24) and B low (0 < 10).
    Only A needs attention.
    """
    metrics = calculate_team_metrics(by_id(
        make_user("a", planned=40),
        make_user("b", logged=20, billable=20),
    ))

    assert metrics.availability.avg_planned_hours == 20
    assert metrics.availability.high_capacity_users == 1
    assert metrics.availability.low_capacity_users == 1
    assert [item.account_id for item in metrics.insights.needs_attention] == ["a"]
    assert metrics.insights.needs_attention[0].issue == "No time logged"
    assert metrics.billability.overall_billability_rate == 100
    assert metrics.billability.low_billability_users == 0


def test_empty_team_is_all_zero():
    metrics = calculate_team_metrics({})

    assert metrics.team.total_users == 0
    assert metrics.team.active_users == 0
    assert metrics.availability.total_planned_hours == 0
    assert metrics.availability.avg_planned_hours == 0
    assert metrics.billability.overall_billability_rate == 0
    assert metrics.insights.top_performers == []
    assert metrics.insights.needs_attention == []
    assert metrics.insights.capacity_status == "Low capacity utilization"
    assert metrics.insights.billability_status == "Poor billability"


def test_only_inactive_users_gives_zero_rates():
    metrics = calculate_team_metrics(by_id(make_user("x", planned=40, logged=40, billable=40, active=False)))

    assert metrics.team.inactive_users == 1
    assert metrics.availability.avg_planned_hours == 0
    assert metrics.billability.overall_billability_rate == 0


def test_unknown_active_flag_counts_as_active():
    user = make_user("u", planned=10, active=None)

    metrics = calculate_team_metrics(by_id(user))

    assert metrics.team.active_users == 1


def test_zero_logged_user_is_not_low_billability():
    metrics = calculate_team_metrics(by_id(
        make_user("idle", planned=30),
        make_user("low", logged=20, billable=2),
    ))

    assert metrics.billability.low_billability_users == 1
    issues = {item.account_id: item.issue for item in metrics.insights.needs_attention}
    assert issues == {"idle": "No time logged", "low": "Low billability"}


def test_top_performers_sorted_and_truncated():
    metrics = calculate_team_metrics(by_id(
        make_user("p80", logged=20, billable=16),
        make_user("p100", logged=20, billable=20),
        make_user("p90", logged=20, billable=18),
        make_user("p95", logged=20, billable=19),
        make_user("few_hours", logged=5, billable=5),
    ))

    names = [p.account_id for p in metrics.insights.top_performers]
    assert names == ["p100", "p95", "p90"]
    assert metrics.billability.high_billability_users == 5


@pytest.mark.parametrize("avg_hours, expected", [
    (40, "High capacity utilization"),
    (35, "Moderate capacity utilization"),
    (30, "Moderate capacity utilization"),
    (25, "Low capacity utilization"),
    (0, "Low capacity utilization"),
])
def test_capacity_status_bands(avg_hours, expected):
    assert get_capacity_status(avg_hours) == expected


@pytest.mark.parametrize("rate, expected", [
    (90, "Excellent billability"),
    (75, "Good billability"),
    (51, "Good billability"),
    (50, "Fair billability"),
    (26, "Fair billability"),
    (25, "Poor billability"),
    (0, "Poor billability"),
])
def test_billability_status_bands(rate, expected):
    assert get_billability_status(rate) == expected


def test_metrics_are_deterministic():
    users = by_id(
        make_user("a", planned=32, logged=30, billable=25),
        make_user("b", planned=16, logged=10, billable=1),
        make_user("c", planned=0, logged=0),
    )

    assert calculate_team_metrics(users) == calculate_team_metrics(users)
