from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .compliance.service import ComplianceService
from .cycles.mysql_cycle_repository import MySQLCycleRepository
from .cycles.repository import CycleRepository
from .dashboard.service import ComplianceDashboard
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_directory import MySQLEmployeeDirectory
from .employees.repository import EmployeeDirectory
from .permissions.mysql_permission_repository import MySQLPermissionRepository
from .permissions.repository import PermissionRepository
from .permissions.service import LateSubmissionPermissionService
from .submissions.mysql_submission_query import MySQLSubmissionQuery
from .submissions.repository import SubmissionQuery
from .windows.mysql_window_repository import MySQLWindowRepository
from .windows.repository import WindowRepository
from .windows.service import CycleWindowStore


@dataclass(frozen=True)
class Container:
    cycles_repo: CycleRepository
    windows_repo: WindowRepository
    employees_repo: EmployeeDirectory
    submissions_query: SubmissionQuery
    permissions_repo: PermissionRepository

    window_store: CycleWindowStore
    compliance_service: ComplianceService
    permission_service: LateSubmissionPermissionService
    dashboard: ComplianceDashboard

    conn: Optional[DatabaseConnection] = None


def wire(
    *,
    cycles_repo: CycleRepository,
    windows_repo: WindowRepository,
    employees_repo: EmployeeDirectory,
    submissions_query: SubmissionQuery,
    permissions_repo: PermissionRepository,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build the services over any set of repositories."""

    window_store = CycleWindowStore(windows_repo, cycles_repo)
    return Container(
        cycles_repo=cycles_repo,
        windows_repo=windows_repo,
        employees_repo=employees_repo,
        submissions_query=submissions_query,
        permissions_repo=permissions_repo,
        window_store=window_store,
        compliance_service=ComplianceService(window_store, employees_repo, submissions_query, permissions_repo),
        permission_service=LateSubmissionPermissionService(permissions_repo, employees_repo, cycles_repo),
        dashboard=ComplianceDashboard(cycles_repo, employees_repo, submissions_query, window_store),
        conn=conn,
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return wire(
        cycles_repo=MySQLCycleRepository(conn),
        windows_repo=MySQLWindowRepository(conn),
        employees_repo=MySQLEmployeeDirectory(conn),
        submissions_query=MySQLSubmissionQuery(conn),
        permissions_repo=MySQLPermissionRepository(conn),
        conn=conn,
    )
