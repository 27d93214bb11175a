from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Union

from ..core.enums import SubmissionKind
from ..core.exceptions import ValidationError
from ..core.quarter import Quarter
from ..employees.repository import EmployeeDirectory
from ..permissions.repository import PermissionRepository
from ..submissions.repository import SubmissionQuery
from ..windows.service import CycleWindowStore
from . import tracker
from .model import ComplianceSnapshot, LateSubmissionReport

logger = logging.getLogger(__name__)


def _scopes_for(quarter: Quarter) -> List[Quarter]:
    if quarter.is_year_end:
        return [Quarter.YEAR_END]
    return [quarter, Quarter.ANY]


def parse_kind(value: Union[str, SubmissionKind, None]) -> SubmissionKind:
    if isinstance(value, SubmissionKind):
        return value
    if value is None or value == "":
        return SubmissionKind.SELF_REVIEW
    try:
        return SubmissionKind(value)
    except ValueError:
        raise ValidationError(f"Invalid submission kind: {value!r}", field="kind")


class ComplianceService:
    """Late-submission statistics and rosters for one deadline."""

    def __init__(
        self,
        windows: CycleWindowStore,
        employees: EmployeeDirectory,
        submissions: SubmissionQuery,
        permissions: PermissionRepository,
    ):
        self._windows = windows
        self._employees = employees
        self._submissions = submissions
        self._permissions = permissions

    def _snapshots(self, cycle, quarter: Quarter, kind: SubmissionKind, today: date, window) -> List[ComplianceSnapshot]:
        employees = self._employees.active_employees_joined_on_or_before(window.start)
        submitted = self._submissions.submitted_employee_ids(cycle.cycle_id, quarter, kind)
        permissions = self._permissions.list_permissions(
            cycle_id=cycle.cycle_id, scopes=_scopes_for(quarter), exclude_revoked=True
        )
        return tracker.snapshot(cycle.cycle_id, quarter, kind, employees, submitted, permissions, today, window)

    def get_late_submission_stats(
        self,
        cycle_id: int,
        quarter: Union[int, str, Quarter],
        kind: Union[str, SubmissionKind, None] = SubmissionKind.SELF_REVIEW,
        *,
        today: date,
    ) -> LateSubmissionReport:
        cycle = self._windows.get_cycle(cycle_id)
        q = Quarter.parse(quarter)
        k = parse_kind(kind)
        window = self._windows.submission_window(cycle, q, k)

        if window.start is None:
            raise ValidationError(f"Cannot access {q.label()}: the start date is not configured", field="quarter")
        if today < window.start:
            raise ValidationError(
                f"Cannot access {q.label()}: it has not started yet, it starts on {window.start.isoformat()}",
                field="quarter",
            )

        snapshots = self._snapshots(cycle, q, k, today, window)
        stats = tracker.aggregate(snapshots, window.end, today)
        logger.debug(
            "Late submission stats cycle=%s %s %s: total=%s submitted=%s missed=%s late=%s",
            cycle.cycle_id, q.label(), k.value,
            stats.total, stats.submitted, stats.missed_deadline, stats.late_access_granted,
        )
        return LateSubmissionReport(
            cycle_id=cycle.cycle_id,
            quarter=q,
            kind=k,
            window_start=window.start,
            window_end=window.end,
            is_past_deadline=window.is_past(today),
            late_globally_allowed=window.late_globally_allowed,
            stats=stats,
        )

    def get_late_submission_roster(
        self,
        cycle_id: int,
        quarter: Union[int, str, Quarter],
        kind: Union[str, SubmissionKind, None] = SubmissionKind.SELF_REVIEW,
        *,
        today: date,
        employee_id: Optional[int] = None,
    ) -> List[ComplianceSnapshot]:
        """Employees who still owe a submission, plus everyone holding a permission."""

        cycle = self._windows.get_cycle(cycle_id)
        q = Quarter.parse(quarter)
        k = parse_kind(kind)
        window = self._windows.submission_window(cycle, q, k)

        rows = [
            s
            for s in self._snapshots(cycle, q, k, today, window)
            if not s.has_submitted or s.has_active_permission
        ]
        if employee_id is not None:
            rows = [s for s in rows if s.employee_id == int(employee_id)]
        return rows
