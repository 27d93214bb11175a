from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime
from typing import Any, Mapping, Optional, Tuple

from ..common.datetime_utils import coerce_date, iso_or_none
from ..core.enums import WindowStatus
from ..core.exceptions import ValidationError

Bounds = Tuple[date, date]


@dataclass(frozen=True)
class ReviewWindow:
    """Quarter bounds plus the self-review and manager-review sub-windows."""

    cycle_id: int
    quarter: int
    quarter_start: date
    quarter_end: date
    manager_review_start: date
    manager_review_end: date
    self_review_start: Optional[date] = None
    self_review_end: Optional[date] = None
    updated_at: Optional[datetime] = field(default=None, compare=False)

    @property
    def bounds(self) -> Bounds:
        return (self.quarter_start, self.quarter_end)

    def manager_review_open_on(self, day: date) -> bool:
        return self.manager_review_start <= day <= self.manager_review_end

    def to_dict(self) -> dict:
        return {
            "cycle_id": self.cycle_id,
            "quarter": self.quarter,
            "quarter_start": iso_or_none(self.quarter_start),
            "quarter_end": iso_or_none(self.quarter_end),
            "self_review_start": iso_or_none(self.self_review_start),
            "self_review_end": iso_or_none(self.self_review_end),
            "manager_review_start": iso_or_none(self.manager_review_start),
            "manager_review_end": iso_or_none(self.manager_review_end),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class GoalWindow:
    """Goal-setting window of a quarter and its goal-approval sub-window."""

    cycle_id: int
    quarter: int
    goal_submission_start: Optional[date] = None
    goal_submission_end: Optional[date] = None
    goal_approval_start: Optional[date] = None
    goal_approval_end: Optional[date] = None
    allow_late_goal_submission: bool = False
    status: WindowStatus = WindowStatus.DRAFT
    updated_at: Optional[datetime] = field(default=None, compare=False)

    def to_dict(self) -> dict:
        return {
            "cycle_id": self.cycle_id,
            "quarter": self.quarter,
            "goal_submission_start": iso_or_none(self.goal_submission_start),
            "goal_submission_end": iso_or_none(self.goal_submission_end),
            "goal_approval_start": iso_or_none(self.goal_approval_start),
            "goal_approval_end": iso_or_none(self.goal_approval_end),
            "allow_late_goal_submission": self.allow_late_goal_submission,
            "status": self.status.value,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class QuarterWindow:
    review: ReviewWindow
    goal: GoalWindow

    def to_dict(self) -> dict:
        return {"review": self.review.to_dict(), "goal": self.goal.to_dict()}


def _dates_from_mapping(cls, data: Mapping[str, Any]) -> dict:
    return {f.name: coerce_date(data.get(f.name), f.name) for f in fields(cls) if f.name in data}


@dataclass(frozen=True)
class ReviewWindowUpdate:
    """Allow-listed fields an administrator may set on a review window.

    ``None`` means "not part of this update".
    """

    quarter_start: Optional[date] = None
    quarter_end: Optional[date] = None
    self_review_start: Optional[date] = None
    self_review_end: Optional[date] = None
    manager_review_start: Optional[date] = None
    manager_review_end: Optional[date] = None

    @property
    def touches_sub_windows(self) -> bool:
        return any(
            v is not None
            for v in (
                self.self_review_start,
                self.self_review_end,
                self.manager_review_start,
                self.manager_review_end,
            )
        )

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ReviewWindowUpdate":
        return cls(**_dates_from_mapping(cls, data))


@dataclass(frozen=True)
class GoalWindowUpdate:
    goal_submission_start: Optional[date] = None
    goal_submission_end: Optional[date] = None
    goal_approval_start: Optional[date] = None
    goal_approval_end: Optional[date] = None
    allow_late_goal_submission: Optional[bool] = None
    status: Optional[WindowStatus] = None

    @property
    def touches_sub_windows(self) -> bool:
        return any(
            v is not None
            for v in (
                self.goal_submission_start,
                self.goal_submission_end,
                self.goal_approval_start,
                self.goal_approval_end,
            )
        )

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GoalWindowUpdate":
        values: dict = {}
        for name in ("goal_submission_start", "goal_submission_end", "goal_approval_start", "goal_approval_end"):
            if name in data:
                values[name] = coerce_date(data.get(name), name)

        flag = data.get("allow_late_goal_submission")
        if flag is not None:
            if not isinstance(flag, bool):
                raise ValidationError("allow_late_goal_submission must be a boolean", field="allow_late_goal_submission")
            values["allow_late_goal_submission"] = flag

        status = data.get("status")
        if status is not None:
            try:
                values["status"] = WindowStatus(status)
            except ValueError:
                raise ValidationError(f"Invalid window status: {status!r}", field="status")
        return cls(**values)


REVIEW_FIELDS = frozenset(f.name for f in fields(ReviewWindowUpdate))
GOAL_FIELDS = frozenset(f.name for f in fields(GoalWindowUpdate))


@dataclass(frozen=True)
class QuarterWindowUpdate:
    review: ReviewWindowUpdate = ReviewWindowUpdate()
    goal: GoalWindowUpdate = GoalWindowUpdate()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "QuarterWindowUpdate":
        """Build an update from a flat request payload.

        Unknown keys are rejected as a whole rather than ignored.
        """

        if data is None or not isinstance(data, Mapping):
            raise ValidationError("Request body must be an object")

        invalid = sorted(k for k in data if k not in REVIEW_FIELDS and k not in GOAL_FIELDS)
        if invalid:
            raise ValidationError(f"Invalid fields provided: {', '.join(invalid)}", field=invalid[0])

        review = ReviewWindowUpdate.from_mapping({k: v for k, v in data.items() if k in REVIEW_FIELDS})
        goal = GoalWindowUpdate.from_mapping({k: v for k, v in data.items() if k in GOAL_FIELDS})
        return cls(review=review, goal=goal)


@dataclass(frozen=True)
class SubmissionWindow:
    """The deadline window an employee submits against."""

    start: Optional[date]
    end: Optional[date]
    late_globally_allowed: bool = False

    def is_open_on(self, day: date) -> bool:
        if self.start is None or day < self.start:
            return False
        return self.end is None or day <= self.end

    def is_past(self, day: date) -> bool:
        return self.end is not None and day > self.end
