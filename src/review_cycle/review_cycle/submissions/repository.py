from __future__ import annotations

from typing import Iterable, Optional, Protocol, Set

from ..core.enums import SubmissionKind
from ..core.quarter import Quarter


class SubmissionQuery(Protocol):
    """Submission facts recorded by the evaluation and goal modules.

    ``quarter`` is a numbered quarter or ``Quarter.YEAR_END``.
    """

    def submitted_employee_ids(self, cycle_id: int, quarter: Quarter, kind: SubmissionKind) -> Set[int]:
        """Employees who submitted (self-review submitted / goals sent for approval)."""

        raise NotImplementedError

    def reviewed_employee_ids(self, cycle_id: int, quarter: Quarter, kind: SubmissionKind) -> Set[int]:
        """Employees whose manager-side action reached a terminal state."""

        raise NotImplementedError

    def goals_awaiting_approval(self, cycle_id: int, employee_ids: Iterable[int], quarter: Optional[Quarter] = None) -> int:
        """Number of goals in status 'submitted' owned by ``employee_ids``."""

        raise NotImplementedError
