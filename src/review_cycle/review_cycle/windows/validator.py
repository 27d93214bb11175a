"""Interval rules for a single quarter's windows.

Everything here is pure: callers fetch the existing record, merge, and only
persist the returned record. A rejected merge raises ``ValidationError`` before
anything is written.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..core.constants import QUARTERS
from ..core.enums import WindowStatus
from ..core.exceptions import ValidationError
from .model import Bounds, GoalWindow, GoalWindowUpdate, ReviewWindow, ReviewWindowUpdate

logger = logging.getLogger(__name__)

_QUARTER_MONTHS = {
    1: ((1, 1), (3, 31)),
    2: ((4, 1), (6, 30)),
    3: ((7, 1), (9, 30)),
    4: ((10, 1), (12, 31)),
}


def default_quarter_bounds(year: int, quarter: int) -> Bounds:
    """Calendar-quarter boundaries of ``year`` (Jan-Mar, Apr-Jun, Jul-Sep, Oct-Dec)."""

    if quarter not in QUARTERS:
        raise ValidationError("quarter must be between 1 and 4", field="quarter")
    (sm, sd), (em, ed) = _QUARTER_MONTHS[quarter]
    return date(int(year), sm, sd), date(int(year), em, ed)


def _first(*values: Optional[date]) -> Optional[date]:
    for v in values:
        if v is not None:
            return v
    return None


def _outside(value: Optional[date], bounds: Bounds) -> bool:
    return value is not None and not (bounds[0] <= value <= bounds[1])


def _require_within(field_name: str, value: Optional[date], bounds: Bounds) -> None:
    if _outside(value, bounds):
        start, end = bounds
        raise ValidationError(
            f"{field_name} must be between {start.isoformat()} and {end.isoformat()}",
            field=field_name,
            allowed_range=bounds,
        )


def _require_ordered(start_field: str, start: Optional[date], end_field: str, end: Optional[date]) -> None:
    if start is not None and end is not None and start > end:
        raise ValidationError(f"{start_field} must be on or before {end_field}", field=start_field)


def _collapse(start: Optional[date], end: Optional[date]):
    # An inverted pair keeps the end date.
    if start is not None and end is not None and start > end:
        return end, end
    return start, end


def merge_review_window(
    existing: Optional[ReviewWindow],
    updates: ReviewWindowUpdate,
    *,
    cycle_id: int,
    year: int,
    quarter: int,
) -> ReviewWindow:
    default_start, default_end = default_quarter_bounds(year, quarter)

    quarter_start = _first(updates.quarter_start, existing and existing.quarter_start, default_start)
    quarter_end = _first(updates.quarter_end, existing and existing.quarter_end, default_end)
    _require_ordered("quarter_start", quarter_start, "quarter_end", quarter_end)
    bounds = (quarter_start, quarter_end)

    self_start = _first(updates.self_review_start, existing and existing.self_review_start)
    self_end = _first(updates.self_review_end, existing and existing.self_review_end)

    mgr_start = _first(updates.manager_review_start, existing and existing.manager_review_start, quarter_end)
    mgr_end = _first(updates.manager_review_end, existing and existing.manager_review_end, quarter_end)
    mgr_start, mgr_end = _collapse(mgr_start, mgr_end)

    if existing is not None and not updates.touches_sub_windows and bounds != existing.bounds:
        if _outside(self_start, bounds) or _outside(self_end, bounds):
            logger.info(
                "Clearing self-review window of cycle %s Q%s outside new bounds %s..%s",
                cycle_id, quarter, quarter_start, quarter_end,
            )
            self_start, self_end = None, None
        if _outside(mgr_start, bounds):
            mgr_start = quarter_end
        if _outside(mgr_end, bounds):
            mgr_end = quarter_end
        mgr_start, mgr_end = _collapse(mgr_start, mgr_end)

    _require_ordered("self_review_start", self_start, "self_review_end", self_end)
    _require_within("self_review_start", self_start, bounds)
    _require_within("self_review_end", self_end, bounds)
    _require_within("manager_review_start", mgr_start, bounds)
    _require_within("manager_review_end", mgr_end, bounds)

    return ReviewWindow(
        cycle_id=int(cycle_id),
        quarter=int(quarter),
        quarter_start=quarter_start,
        quarter_end=quarter_end,
        self_review_start=self_start,
        self_review_end=self_end,
        manager_review_start=mgr_start,
        manager_review_end=mgr_end,
        updated_at=existing.updated_at if existing else None,
    )


def merge_goal_window(
    existing: Optional[GoalWindow],
    updates: GoalWindowUpdate,
    quarter_bounds: Bounds,
    *,
    cycle_id: int,
    quarter: int,
) -> GoalWindow:
    quarter_start, quarter_end = quarter_bounds

    sub_start = _first(updates.goal_submission_start, existing and existing.goal_submission_start)
    sub_end = _first(updates.goal_submission_end, existing and existing.goal_submission_end)
    appr_start = _first(updates.goal_approval_start, existing and existing.goal_approval_start)
    appr_end = _first(updates.goal_approval_end, existing and existing.goal_approval_end)
    appr_start, appr_end = _collapse(appr_start, appr_end)

    if existing is not None and not updates.touches_sub_windows:
        # Bounds may have moved under a stored goal window.
        if _outside(sub_start, quarter_bounds) or _outside(sub_end, quarter_bounds):
            sub_start, sub_end = None, None
        if _outside(appr_start, quarter_bounds):
            appr_start = quarter_end
        if _outside(appr_end, quarter_bounds):
            appr_end = quarter_end
        appr_start, appr_end = _collapse(appr_start, appr_end)

    _require_ordered("goal_submission_start", sub_start, "goal_submission_end", sub_end)
    _require_within("goal_submission_start", sub_start, quarter_bounds)
    _require_within("goal_submission_end", sub_end, quarter_bounds)
    _require_within("goal_approval_start", appr_start, quarter_bounds)
    _require_within("goal_approval_end", appr_end, quarter_bounds)

    if updates.allow_late_goal_submission is not None:
        allow_late = bool(updates.allow_late_goal_submission)
    else:
        allow_late = existing.allow_late_goal_submission if existing else False

    status = updates.status or (existing.status if existing else WindowStatus.DRAFT)

    return GoalWindow(
        cycle_id=int(cycle_id),
        quarter=int(quarter),
        goal_submission_start=sub_start,
        goal_submission_end=sub_end,
        goal_approval_start=appr_start,
        goal_approval_end=appr_end,
        allow_late_goal_submission=allow_late,
        status=status,
        updated_at=existing.updated_at if existing else None,
    )
