"""Deadline compliance rules.

Pure functions over already-fetched data: employees, the set of employees who
submitted, the cycle's late-submission permissions and an explicit ``now``.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Set

from ..core.enums import SubmissionKind
from ..core.quarter import Quarter
from ..employees.model import Employee
from ..permissions.model import LateSubmissionPermission, Moment
from ..windows.model import SubmissionWindow
from .model import ComplianceSnapshot, LateSubmissionStats


def is_eligible(employee: Employee, window_start: Optional[date]) -> bool:
    """Only employees who had joined when the window opened are held to its deadline.

    An unknown join date is not eligible once a window start is configured.
    """

    if window_start is None:
        return True
    if employee.date_of_joining is None:
        return False
    return employee.date_of_joining <= window_start


def scope_matches(scope: Quarter, quarter: Quarter) -> bool:
    """Does a permission granted for ``scope`` cover a deadline in ``quarter``?

    The wildcard covers numbered quarters only; year-end needs a year-end grant.
    """

    if quarter.is_year_end:
        return scope.is_year_end
    if quarter.is_numbered:
        return scope == quarter or scope.is_any
    return False


def match_permission(
    employee_id: int,
    cycle_id: int,
    quarter: Quarter,
    permissions: Iterable[LateSubmissionPermission],
    now: Moment,
) -> Optional[LateSubmissionPermission]:
    """Active permission covering the deadline; quarter-specific beats wildcard."""

    best: Optional[LateSubmissionPermission] = None
    for p in permissions:
        if p.employee_id != int(employee_id) or p.cycle_id != int(cycle_id):
            continue
        if not p.is_active(now) or not scope_matches(p.scope, quarter):
            continue
        if best is None or _outranks(p, best):
            best = p
    return best


def _outranks(candidate: LateSubmissionPermission, current: LateSubmissionPermission) -> bool:
    if candidate.scope.is_any != current.scope.is_any:
        return current.scope.is_any
    return candidate.granted_at > current.granted_at


def index_permissions(
    cycle_id: int,
    quarter: Quarter,
    permissions: Iterable[LateSubmissionPermission],
    now: Moment,
) -> Dict[int, LateSubmissionPermission]:
    """``match_permission`` for every employee at once."""

    by_employee: Dict[int, LateSubmissionPermission] = {}
    for p in permissions:
        if p.cycle_id != int(cycle_id) or not p.is_active(now) or not scope_matches(p.scope, quarter):
            continue
        current = by_employee.get(p.employee_id)
        if current is None or _outranks(p, current):
            by_employee[p.employee_id] = p
    return by_employee


def snapshot(
    cycle_id: int,
    quarter: Quarter,
    kind: SubmissionKind,
    employees: Iterable[Employee],
    submissions: Set[int],
    permissions: Iterable[LateSubmissionPermission],
    now: date,
    window: SubmissionWindow,
) -> List[ComplianceSnapshot]:
    matched = index_permissions(cycle_id, quarter, permissions, now)
    past = window.is_past(now)
    open_now = window.is_open_on(now)

    out: List[ComplianceSnapshot] = []
    for e in employees:
        if not is_eligible(e, window.start):
            continue
        permission = matched.get(e.employee_id)
        out.append(
            ComplianceSnapshot(
                employee=e,
                cycle_id=int(cycle_id),
                quarter=quarter,
                kind=kind,
                has_submitted=e.employee_id in submissions,
                has_active_permission=permission is not None,
                is_past_deadline=past,
                is_window_open=open_now,
                permission=permission,
                late_globally_allowed=window.late_globally_allowed,
            )
        )
    return out


def aggregate(snapshots: Sequence[ComplianceSnapshot], window_end: Optional[date], now: date) -> LateSubmissionStats:
    total = len(snapshots)
    submitted = sum(1 for s in snapshots if s.has_submitted)
    # A deadline that has not passed cannot be missed yet.
    past = window_end is not None and now > window_end
    return LateSubmissionStats(
        total=total,
        submitted=submitted,
        missed_deadline=(total - submitted) if past else 0,
        late_access_granted=sum(1 for s in snapshots if s.has_active_permission),
    )
