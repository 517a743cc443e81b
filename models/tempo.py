"""
Tempo time tracking data models
"""
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ValidationError


class TimeWindow(BaseModel):
    """Inclusive calendar date range used for every upstream query"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_date: date = Field(alias="from")
    to_date: date = Field(alias="to")

    @model_validator(mode="after")
    def _check_order(self) -> "TimeWindow":
        if self.from_date > self.to_date:
            raise ValueError("'from' must not be after 'to'")
        return self

    @classmethod
    def last_days(cls, days: int, today: Optional[date] = None) -> "TimeWindow":
        """Window ending today (UTC) and starting `days` days earlier"""
        if days < 0:
            raise ValidationError(f"days must not be negative, got {days}")
        end = today or datetime.now(timezone.utc).date()
        try:
            start = end - timedelta(days=days)
        except OverflowError:
            raise ValidationError(f"days reaches past the earliest representable date, got {days}")
        return cls(from_date=start, to_date=end)

    @classmethod
    def parse(cls, from_value: Optional[str], to_value: Optional[str]) -> "TimeWindow":
        """Build a window from YYYY-MM-DD strings supplied by a caller"""
        if not from_value or not to_value:
            raise ValidationError("Missing required parameters: from, to (YYYY-MM-DD format)")
        try:
            start = date.fromisoformat(from_value)
            end = date.fromisoformat(to_value)
        except ValueError:
            raise ValidationError(
                f"Invalid date range {from_value!r} - {to_value!r}: expected YYYY-MM-DD"
            )
        try:
            return cls(from_date=start, to_date=end)
        except PydanticValidationError:
            raise ValidationError(f"Invalid date range: {from_value} is after {to_value}")

    @property
    def params(self) -> Dict[str, str]:
        return {"from": self.from_date.isoformat(), "to": self.to_date.isoformat()}


class PlannedRecord(BaseModel):
    """A single Tempo Planner allocation"""
    user_id: str
    planned_seconds: int = 0

    @classmethod
    def from_api(cls, plan: Dict[str, Any]) -> Optional["PlannedRecord"]:
        user_id = (plan.get("assignee") or {}).get("id")
        if not user_id:
            return None
        return cls(
            user_id=user_id,
            planned_seconds=plan.get("totalPlannedSecondsInScope") or 0,
        )


class LoggedRecord(BaseModel):
    """A single Tempo worklog"""
    user_id: str
    spent_seconds: int = 0
    # Upstream is trusted; billable > spent is passed through as-is
    billable_seconds: int = 0

    @classmethod
    def from_api(cls, worklog: Dict[str, Any]) -> Optional["LoggedRecord"]:
        user_id = (worklog.get("author") or {}).get("accountId")
        if not user_id:
            return None
        return cls(
            user_id=user_id,
            spent_seconds=worklog.get("timeSpentSeconds") or 0,
            billable_seconds=worklog.get("billableSeconds") or 0,
        )
