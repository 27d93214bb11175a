from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee as seen by the compliance engine.

    Only the fields the deadline and dashboard rules read are carried.
    """

    employee_id: int
    emp_code: str
    full_name: str
    email: Optional[str] = None
    department: Optional[str] = None
    date_of_joining: Optional[date] = None
    manager_code: Optional[str] = None
    manager_name: Optional[str] = None
    is_active: bool = True
