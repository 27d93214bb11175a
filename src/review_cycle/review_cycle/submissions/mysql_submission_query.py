from __future__ import annotations

from typing import Iterable, Optional, Set

from ..core.enums import GoalStatus, SubmissionKind
from ..core.exceptions import ValidationError
from ..core.quarter import Quarter
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_placeholders
from .repository import SubmissionQuery

# Manager-side states that close a review obligation.
QUARTERLY_REVIEW_DONE = ("submitted", "approved")
YEAR_END_REVIEW_DONE = ("submitted", "released")
# A goal counts as submitted once it left draft on its way to the manager.
_GOAL_SENT = (GoalStatus.SUBMITTED.value, GoalStatus.APPROVED.value, GoalStatus.LOCKED.value)


class MySQLSubmissionQuery(SubmissionQuery):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _ids(self, sql: str, params: tuple) -> Set[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return {int(r["employee_id"]) for r in fetchall(cur)}

    def submitted_employee_ids(self, cycle_id: int, quarter: Quarter, kind: SubmissionKind) -> Set[int]:
        if kind == SubmissionKind.GOAL:
            if not quarter.is_numbered:
                raise ValidationError("Goal submissions are quarterly", field="quarter")
            return self._ids(
                f"""
                SELECT DISTINCT employee_id FROM goals
                WHERE cycle_id=%s AND quarter=%s AND status IN ({in_placeholders(_GOAL_SENT)})
                """,
                (int(cycle_id), quarter.number, *_GOAL_SENT),
            )

        if quarter.is_year_end:
            return self._ids(
                """
                SELECT DISTINCT employee_id FROM self_evaluations
                WHERE cycle_id=%s AND quarter IS NULL AND status='submitted'
                """,
                (int(cycle_id),),
            )

        return self._ids(
            """
            SELECT DISTINCT employee_id FROM quarterly_self_reviews
            WHERE cycle_id=%s AND quarter=%s AND status='submitted'
            """,
            (int(cycle_id), quarter.number),
        )

    def reviewed_employee_ids(self, cycle_id: int, quarter: Quarter, kind: SubmissionKind) -> Set[int]:
        if kind == SubmissionKind.GOAL:
            if not quarter.is_numbered:
                raise ValidationError("Goal submissions are quarterly", field="quarter")
            return self._ids(
                """
                SELECT DISTINCT employee_id FROM goals
                WHERE cycle_id=%s AND quarter=%s AND status=%s
                """,
                (int(cycle_id), quarter.number, GoalStatus.APPROVED.value),
            )

        if quarter.is_year_end:
            return self._ids(
                f"""
                SELECT DISTINCT employee_id FROM manager_evaluations
                WHERE cycle_id=%s AND status IN ({in_placeholders(YEAR_END_REVIEW_DONE)})
                """,
                (int(cycle_id), *YEAR_END_REVIEW_DONE),
            )

        return self._ids(
            f"""
            SELECT DISTINCT employee_id FROM quarterly_manager_reviews
            WHERE cycle_id=%s AND quarter=%s AND status IN ({in_placeholders(QUARTERLY_REVIEW_DONE)})
            """,
            (int(cycle_id), quarter.number, *QUARTERLY_REVIEW_DONE),
        )

    def goals_awaiting_approval(self, cycle_id: int, employee_ids: Iterable[int], quarter: Optional[Quarter] = None) -> int:
        ids = [int(i) for i in employee_ids]
        if not ids:
            return 0

        sql = f"""
            SELECT COUNT(*) AS count FROM goals
            WHERE employee_id IN ({in_placeholders(ids)}) AND cycle_id=%s AND status=%s
        """
        params: list[object] = [*ids, int(cycle_id), GoalStatus.SUBMITTED.value]
        if quarter is not None and quarter.is_numbered:
            sql += " AND quarter=%s"
            params.append(quarter.number)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            r = fetchone(cur)
            return int(r["count"]) if r else 0
