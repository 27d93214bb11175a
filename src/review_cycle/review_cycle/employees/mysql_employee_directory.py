from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import Employee
from .repository import EmployeeDirectory

_SELECT = """
    SELECT e.employee_id, e.emp_code, e.full_name, e.email, e.department,
           e.date_of_joining, e.manager_code, e.status,
           m.full_name AS manager_name
    FROM employees e
    LEFT JOIN employees m ON m.emp_code = e.manager_code
"""


def _row_to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        emp_code=r["emp_code"],
        full_name=r["full_name"],
        email=r.get("email"),
        department=r.get("department"),
        date_of_joining=normalize_mysql_date(r.get("date_of_joining")),
        manager_code=r.get("manager_code"),
        manager_name=r.get("manager_name"),
        is_active=(r.get("status") == "active"),
    )


class MySQLEmployeeDirectory(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE e.employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _row_to_employee(r) if r else None

    def active_employees_joined_on_or_before(self, on_date: Optional[date]) -> Sequence[Employee]:
        clauses = ["e.status='active'"]
        params: list[object] = []
        if on_date is not None:
            clauses.append("e.date_of_joining <= %s")
            params.append(on_date)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {' AND '.join(clauses)} ORDER BY e.full_name",
                tuple(params),
            )
            return [_row_to_employee(r) for r in fetchall(cur)]

    def direct_reports_of(self, manager_id: int) -> Sequence[Employee]:
        # manager_code references the manager's emp_code, not the numeric id.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT}
                JOIN employees mgr ON mgr.emp_code = e.manager_code
                WHERE mgr.employee_id=%s AND e.status='active'
                ORDER BY e.full_name
                """,
                (int(manager_id),),
            )
            return [_row_to_employee(r) for r in fetchall(cur)]
