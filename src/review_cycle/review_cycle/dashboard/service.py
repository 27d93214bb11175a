from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import FrozenSet, Optional, Sequence, Tuple

from ..core.constants import QUARTERS
from ..core.enums import SubmissionKind
from ..core.quarter import Quarter
from ..cycles.model import Cycle
from ..cycles.repository import CycleRepository
from ..employees.repository import EmployeeDirectory
from ..submissions.repository import SubmissionQuery
from ..windows.service import CycleWindowStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuarterlyPending:
    pending_count: int = 0
    open_pending_count: int = 0
    employees: FrozenSet[int] = field(default_factory=frozenset)


@dataclass(frozen=True)
class ManagerDashboard:
    cycle_id: int
    direct_reports_count: int = 0
    goals_pending_approval: int = 0
    evaluations_pending: int = 0
    quarterly_pending: int = 0
    year_end_pending: int = 0
    quarterly_open_pending: int = 0

    def to_dict(self) -> dict:
        return {
            "cycle_id": self.cycle_id,
            "direct_reports_count": self.direct_reports_count,
            "goals_pending_approval": self.goals_pending_approval,
            "evaluations_pending": self.evaluations_pending,
            "quarterly_pending": self.quarterly_pending,
            "year_end_pending": self.year_end_pending,
            "quarterly_open_pending": self.quarterly_open_pending,
        }


class ComplianceDashboard:
    """Outstanding manager work over a manager's direct reports."""

    def __init__(
        self,
        cycles: CycleRepository,
        employees: EmployeeDirectory,
        submissions: SubmissionQuery,
        windows: CycleWindowStore,
    ):
        self._cycles = cycles
        self._employees = employees
        self._submissions = submissions
        self._windows = windows

    def _awaiting_manager(self, cycle: Cycle, quarter: Quarter, report_ids: FrozenSet[int]) -> FrozenSet[int]:
        kind = SubmissionKind.SELF_REVIEW
        submitted = self._submissions.submitted_employee_ids(cycle.cycle_id, quarter, kind) & report_ids
        if not submitted:
            return frozenset()
        reviewed = self._submissions.reviewed_employee_ids(cycle.cycle_id, quarter, kind)
        return frozenset(submitted - reviewed)

    def pending_goal_approvals(self, report_ids: Sequence[int], cycle: Cycle) -> int:
        if not report_ids:
            return 0
        return self._submissions.goals_awaiting_approval(cycle.cycle_id, report_ids)

    def pending_quarterly_reviews(self, report_ids: Sequence[int], cycle: Cycle, today: date) -> QuarterlyPending:
        ids = frozenset(int(i) for i in report_ids)
        if not ids:
            return QuarterlyPending()

        pending = 0
        open_pending = 0
        employees: set[int] = set()
        for q in QUARTERS:
            waiting = self._awaiting_manager(cycle, Quarter.numbered(q), ids)
            if not waiting:
                continue
            pending += len(waiting)
            employees |= waiting
            if self._windows.resolve_review_window(cycle, q).manager_review_open_on(today):
                open_pending += len(waiting)

        return QuarterlyPending(pending_count=pending, open_pending_count=open_pending, employees=frozenset(employees))

    def pending_year_end_reviews(self, report_ids: Sequence[int], cycle: Cycle) -> Tuple[int, FrozenSet[int]]:
        ids = frozenset(int(i) for i in report_ids)
        if not ids:
            return 0, frozenset()
        waiting = self._awaiting_manager(cycle, Quarter.YEAR_END, ids)
        return len(waiting), waiting

    def get_manager_dashboard(self, manager_id: int, cycle_id: int, *, today: date) -> ManagerDashboard:
        cycle = self._windows.get_cycle(cycle_id)
        return self._build(int(manager_id), cycle, today)

    def get_active_manager_dashboard(self, manager_id: int, *, today: date) -> Optional[ManagerDashboard]:
        cycle = self._cycles.get_active()
        if cycle is None:
            return None
        return self._build(int(manager_id), cycle, today)

    def _build(self, manager_id: int, cycle: Cycle, today: date) -> ManagerDashboard:
        report_ids = [e.employee_id for e in self._employees.direct_reports_of(manager_id)]
        if not report_ids:
            return ManagerDashboard(cycle_id=cycle.cycle_id)

        quarterly = self.pending_quarterly_reviews(report_ids, cycle, today)
        year_end_count, year_end_employees = self.pending_year_end_reviews(report_ids, cycle)

        dashboard = ManagerDashboard(
            cycle_id=cycle.cycle_id,
            direct_reports_count=len(report_ids),
            goals_pending_approval=self.pending_goal_approvals(report_ids, cycle),
            evaluations_pending=len(quarterly.employees | year_end_employees),
            quarterly_pending=quarterly.pending_count,
            year_end_pending=year_end_count,
            quarterly_open_pending=quarterly.open_pending_count,
        )
        logger.debug("Manager dashboard manager=%s cycle=%s: %s", manager_id, cycle.cycle_id, dashboard)
        return dashboard
