from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeDirectory(Protocol):
    """Read-only view of the employee master data."""

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def active_employees_joined_on_or_before(self, on_date: Optional[date]) -> Sequence[Employee]:
        """Active employees; ``None`` means no join-date filter.

        With a date, employees without a known join date are left out.
        """

        raise NotImplementedError

    def direct_reports_of(self, manager_id: int) -> Sequence[Employee]:
        raise NotImplementedError
