from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..common.datetime_utils import iso_or_none
from ..core.enums import SubmissionKind
from ..core.quarter import Quarter
from ..employees.model import Employee
from ..permissions.model import LateSubmissionPermission


@dataclass(frozen=True)
class ComplianceSnapshot:
    """Derived deadline status of one employee for one period and kind."""

    employee: Employee
    cycle_id: int
    quarter: Quarter
    kind: SubmissionKind
    has_submitted: bool
    has_active_permission: bool
    is_past_deadline: bool
    is_window_open: bool
    permission: Optional[LateSubmissionPermission] = None
    late_globally_allowed: bool = False

    @property
    def employee_id(self) -> int:
        return self.employee.employee_id

    @property
    def needs_permission(self) -> bool:
        return not self.has_submitted and not self.has_active_permission

    @property
    def can_submit(self) -> bool:
        if self.has_submitted:
            return False
        return self.is_window_open or self.has_active_permission or (self.is_past_deadline and self.late_globally_allowed)

    def to_dict(self) -> dict:
        e = self.employee
        return {
            "employee_id": e.employee_id,
            "emp_code": e.emp_code,
            "employee_name": e.full_name,
            "employee_email": e.email,
            "department": e.department,
            "date_of_joining": iso_or_none(e.date_of_joining),
            "manager_code": e.manager_code,
            "manager_name": e.manager_name,
            "quarter": self.quarter.key,
            "kind": self.kind.value,
            "has_submitted": self.has_submitted,
            "permission": self.permission.to_dict() if self.permission else None,
            "needs_permission": self.needs_permission,
            "is_past_deadline": self.is_past_deadline,
            "is_window_open": self.is_window_open,
            "can_submit": self.can_submit,
        }


@dataclass(frozen=True)
class LateSubmissionStats:
    total: int
    submitted: int
    missed_deadline: int
    late_access_granted: int


@dataclass(frozen=True)
class LateSubmissionReport:
    """Aggregate statistics for one deadline, as served to HR."""

    cycle_id: int
    quarter: Quarter
    kind: SubmissionKind
    window_start: Optional[date]
    window_end: Optional[date]
    is_past_deadline: bool
    late_globally_allowed: bool
    stats: LateSubmissionStats

    def to_dict(self) -> dict:
        return {
            "cycle_id": self.cycle_id,
            "quarter": self.quarter.key,
            "kind": self.kind.value,
            "window_start": iso_or_none(self.window_start),
            "window_end": iso_or_none(self.window_end),
            "is_past_deadline": self.is_past_deadline,
            "late_globally_allowed": self.late_globally_allowed,
            "total_employees": self.stats.total,
            "submitted": self.stats.submitted,
            "missed_deadline": self.stats.missed_deadline,
            "late_access_granted": self.stats.late_access_granted,
        }
