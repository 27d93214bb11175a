from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Optional

import pytest

from src.review_cycle.review_cycle.container import wire
from src.review_cycle.review_cycle.core.enums import CycleStatus, SubmissionKind, WindowKind
from src.review_cycle.review_cycle.core.exceptions import ConflictError, NotFoundError
from src.review_cycle.review_cycle.core.quarter import Quarter
from src.review_cycle.review_cycle.cycles.model import Cycle
from src.review_cycle.review_cycle.employees.model import Employee
from src.review_cycle.review_cycle.permissions.model import LateSubmissionPermission
from src.review_cycle.review_cycle.windows.service import CycleWindowStore


@dataclass
class InMemoryCycles:
    cycles: dict[int, Cycle] = field(default_factory=dict)

    def get_by_id(self, cycle_id: int) -> Optional[Cycle]:
        return self.cycles.get(int(cycle_id))

    def get_active(self) -> Optional[Cycle]:
        active = [c for c in self.cycles.values() if c.status == CycleStatus.ACTIVE]
        return active[-1] if active else None


class InMemoryWindowSession:
    def __init__(self, store: "InMemoryWindows", cycle_id: int, quarter: int):
        self._store = store
        self._cycle_id = cycle_id
        self._quarter = quarter
        self.staged: dict = {}

    def get_window(self, kind: WindowKind):
        key = (self._cycle_id, self._quarter, kind)
        if key in self.staged:
            return self.staged[key]
        return self._store.rows.get(key)

    def put_window(self, kind: WindowKind, record):
        self._store.writes += 1
        stored = replace(record, updated_at=datetime(2026, 1, 1) + timedelta(seconds=self._store.writes))
        self.staged[(self._cycle_id, self._quarter, kind)] = stored
        return stored


class InMemoryWindows:
    """Staged writes are committed only when the session block exits cleanly."""

    def __init__(self):
        self.rows: dict = {}
        self.writes = 0

    def get_window(self, *, cycle_id: int, quarter: int, kind: WindowKind):
        return self.rows.get((int(cycle_id), int(quarter), kind))

    @contextmanager
    def session(self, *, cycle_id: int, quarter: int):
        session = InMemoryWindowSession(self, int(cycle_id), int(quarter))
        yield session
        self.rows.update(session.staged)


@dataclass
class InMemoryEmployees:
    employees: dict[int, Employee] = field(default_factory=dict)
    manager_of: dict[int, int] = field(default_factory=dict)

    def add(self, employee: Employee, *, manager_id: Optional[int] = None) -> Employee:
        self.employees[employee.employee_id] = employee
        if manager_id is not None:
            self.manager_of[employee.employee_id] = manager_id
        return employee

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.employees.get(int(employee_id))

    def active_employees_joined_on_or_before(self, on_date: Optional[date]):
        return [
            e
            for e in self.employees.values()
            if e.is_active and (on_date is None or (e.date_of_joining is not None and e.date_of_joining <= on_date))
        ]

    def direct_reports_of(self, manager_id: int):
        return [
            e for eid, e in self.employees.items() if self.manager_of.get(eid) == int(manager_id) and e.is_active
        ]


class FakeSubmissions:
    def __init__(self):
        self.submitted: dict = {}
        self.reviewed: dict = {}
        self.pending_goals: dict[int, int] = {}

    def mark_submitted(self, cycle_id: int, quarter: Quarter, kind: SubmissionKind, *employee_ids: int) -> None:
        self.submitted.setdefault((cycle_id, quarter.key, kind), set()).update(employee_ids)

    def mark_reviewed(self, cycle_id: int, quarter: Quarter, kind: SubmissionKind, *employee_ids: int) -> None:
        self.reviewed.setdefault((cycle_id, quarter.key, kind), set()).update(employee_ids)

    def submitted_employee_ids(self, cycle_id, quarter, kind):
        return set(self.submitted.get((int(cycle_id), quarter.key, kind), set()))

    def reviewed_employee_ids(self, cycle_id, quarter, kind):
        return set(self.reviewed.get((int(cycle_id), quarter.key, kind), set()))

    def goals_awaiting_approval(self, cycle_id, employee_ids, quarter=None):
        return sum(self.pending_goals.get(int(i), 0) for i in employee_ids)


class InMemoryPermissions:
    def __init__(self):
        self.rows: dict[int, LateSubmissionPermission] = {}
        self._next_id = 1

    def add(self, **kwargs) -> LateSubmissionPermission:
        p = LateSubmissionPermission(permission_id=self._next_id, **kwargs)
        self.rows[p.permission_id] = p
        self._next_id += 1
        return p

    def get_by_id(self, permission_id):
        return self.rows.get(int(permission_id))

    def find_by_scope(self, *, employee_id, cycle_id, scope):
        for p in self.rows.values():
            if p.employee_id == employee_id and p.cycle_id == cycle_id and p.scope == scope:
                return p
        return None

    def list_permissions(self, *, cycle_id=None, employee_id=None, scopes=None, exclude_revoked=False, limit=None):
        keys = None if scopes is None else {s.key for s in scopes}
        out = [
            p
            for p in self.rows.values()
            if (cycle_id is None or p.cycle_id == cycle_id)
            and (employee_id is None or p.employee_id == employee_id)
            and (keys is None or p.scope.key in keys)
            and (not exclude_revoked or p.revoked_at is None)
        ]
        out.sort(key=lambda p: p.granted_at, reverse=True)
        return out[:limit] if limit is not None else out

    def create(self, *, employee_id, cycle_id, scope, granted_by, granted_at, reason=None, expires_at=None):
        if self.find_by_scope(employee_id=employee_id, cycle_id=cycle_id, scope=scope):
            raise ConflictError("duplicate scope")
        return self.add(
            employee_id=employee_id,
            cycle_id=cycle_id,
            scope=scope,
            granted_by=granted_by,
            granted_at=granted_at,
            reason=reason,
            expires_at=expires_at,
        )

    def reactivate(self, *, permission_id, granted_by, granted_at, reason=None, expires_at=None):
        p = self.rows.get(int(permission_id))
        if p is None:
            raise NotFoundError("missing")
        p = replace(p, granted_by=granted_by, granted_at=granted_at, reason=reason, expires_at=expires_at, revoked_at=None)
        self.rows[p.permission_id] = p
        return p

    def set_revoked(self, *, permission_ids, revoked_at):
        changed = 0
        for pid in permission_ids:
            p = self.rows.get(int(pid))
            if p is not None and p.revoked_at is None:
                self.rows[p.permission_id] = replace(p, revoked_at=revoked_at)
                changed += 1
        return changed

    def update(self, *, permission_id, reason=None, expires_at=None):
        p = self.rows.get(int(permission_id))
        if p is None:
            return None
        p = replace(
            p,
            reason=reason if reason is not None else p.reason,
            expires_at=expires_at if expires_at is not None else p.expires_at,
        )
        self.rows[p.permission_id] = p
        return p


@pytest.fixture
def cycle() -> Cycle:
    return Cycle(
        cycle_id=1,
        name="FY2026",
        year=2026,
        status=CycleStatus.ACTIVE,
        start_date=date(2026, 1, 1),
        end_date=date(2026, 12, 31),
        self_evaluation_start=date(2026, 12, 1),
        self_evaluation_end=date(2026, 12, 15),
    )


@pytest.fixture
def cycles(cycle) -> InMemoryCycles:
    return InMemoryCycles({cycle.cycle_id: cycle})


@pytest.fixture
def windows() -> InMemoryWindows:
    return InMemoryWindows()


@pytest.fixture
def employees() -> InMemoryEmployees:
    return InMemoryEmployees()


@pytest.fixture
def submissions() -> FakeSubmissions:
    return FakeSubmissions()


@pytest.fixture
def permissions() -> InMemoryPermissions:
    return InMemoryPermissions()


@pytest.fixture
def store(windows, cycles) -> CycleWindowStore:
    return CycleWindowStore(windows, cycles)


@pytest.fixture
def container(cycles, windows, employees, submissions, permissions):
    return wire(
        cycles_repo=cycles,
        windows_repo=windows,
        employees_repo=employees,
        submissions_query=submissions,
        permissions_repo=permissions,
    )
