"""
Team analysis data models

Attributes are snake_case in Python and serialized in the camelCase shape
the dashboard and MCP plugin consume.
"""
import enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from models.tempo import TimeWindow

PLACEHOLDER_ID_LENGTH = 8


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ActiveState(enum.Enum):
    """Whether the identity directory marks a user active

    UNKNOWN covers identities whose record carries no flag; they are
    counted as active everywhere.
    """
    ACTIVE = "active"
    INACTIVE = "inactive"
    UNKNOWN = "unknown"

    @classmethod
    def from_flag(cls, flag: Optional[bool]) -> "ActiveState":
        if flag is None:
            return cls.UNKNOWN
        return cls.ACTIVE if flag else cls.INACTIVE

    def as_flag(self) -> Optional[bool]:
        if self is ActiveState.UNKNOWN:
            return None
        return self is ActiveState.ACTIVE


class UserIdentity(CamelModel):
    """Display identity for a bare account id"""
    account_id: str
    display_name: str
    email_address: Optional[str] = None
    active: ActiveState = ActiveState.UNKNOWN
    time_zone: Optional[str] = None

    @field_validator("active", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> Any:
        if value is None or isinstance(value, bool):
            return ActiveState.from_flag(value)
        return value

    @field_serializer("active")
    def _serialize_active(self, value: ActiveState) -> Optional[bool]:
        return value.as_flag()

    @property
    def is_active(self) -> bool:
        return self.active is not ActiveState.INACTIVE

    @classmethod
    def from_api(cls, user: Dict[str, Any]) -> "UserIdentity":
        """Build from a JIRA user resource"""
        return cls(
            account_id=user["accountId"],
            display_name=user.get("displayName") or user["accountId"],
            email_address=user.get("emailAddress"),
            active=ActiveState.from_flag(user.get("active")),
            time_zone=user.get("timeZone"),
        )

    @classmethod
    def placeholder(cls, account_id: str) -> "UserIdentity":
        """Stand-in identity for an id the directory could not resolve"""
        return cls(
            account_id=account_id,
            display_name=f"Unknown User ({account_id[:PLACEHOLDER_ID_LENGTH]}...)",
            email_address=None,
            active=ActiveState.ACTIVE,
        )


class AvailabilityStats(CamelModel):
    total_planned_hours: float = 0.0
    plan_count: int = 0


class BillabilityStats(CamelModel):
    total_logged_hours: float = 0.0
    billable_hours: float = 0.0
    billable_percentage: int = 0
    worklog_count: int = 0


class UserAggregate(CamelModel):
    """Planned and logged time for one user over the analysis window"""
    user_id: str
    availability: AvailabilityStats = Field(default_factory=AvailabilityStats)
    billability: BillabilityStats = Field(default_factory=BillabilityStats)
    user_info: Optional[UserIdentity] = None

    @property
    def is_active(self) -> bool:
        return self.user_info is None or self.user_info.is_active

    @property
    def display_name(self) -> str:
        if self.user_info is None:
            return UserIdentity.placeholder(self.user_id).display_name
        return self.user_info.display_name


class AnalysisSummary(CamelModel):
    total_users: int = 0
    total_plans: int = 0
    total_worklogs: int = 0


class TeamAnalysis(CamelModel):
    """Merged per-user analysis, before identity enrichment"""
    date_range: TimeWindow
    summary: AnalysisSummary
    user_analysis: Dict[str, UserAggregate] = Field(default_factory=dict)


class EnrichmentStats(CamelModel):
    users_enriched: int = 0
    total_users: int = 0
    enrichment_rate: int = 0


class TeamSummary(CamelModel):
    total_users: int = 0
    active_users: int = 0
    inactive_users: int = 0


class AvailabilityRollup(CamelModel):
    total_planned_hours: float = 0.0
    avg_planned_hours: float = 0.0
    high_capacity_users: int = 0
    low_capacity_users: int = 0


class BillabilityRollup(CamelModel):
    total_logged_hours: float = 0.0
    total_billable_hours: float = 0.0
    overall_billability_rate: int = 0
    high_billability_users: int = 0
    low_billability_users: int = 0


class TopPerformer(CamelModel):
    name: str
    account_id: str
    billable_percentage: int
    billable_hours: float


class AttentionItem(CamelModel):
    name: str
    account_id: str
    issue: str
    billable_percentage: int
    logged_hours: float


class TeamInsights(CamelModel):
    capacity_status: str
    billability_status: str
    top_performers: List[TopPerformer] = Field(default_factory=list)
    needs_attention: List[AttentionItem] = Field(default_factory=list)


class TeamMetrics(CamelModel):
    team: TeamSummary
    availability: AvailabilityRollup
    billability: BillabilityRollup
    insights: TeamInsights


class EnhancedTeamAnalysis(TeamAnalysis):
    """Merged analysis with identities, team metrics and enrichment diagnostics"""
    team_metrics: TeamMetrics
    # Serialized as jiraIntegration for the dashboard
    enrichment: EnrichmentStats = Field(alias="jiraIntegration")


class QueryType(str, enum.Enum):
    AVAILABILITY = "availability"
    BILLABILITY = "billability"
    TEAM_OVERVIEW = "team_overview"
    FULL_ANALYSIS = "full_analysis"


class QueryResult(CamelModel):
    query: str
    type: QueryType
    summary: str
    insights: List[str] = Field(default_factory=list)
    data: EnhancedTeamAnalysis
