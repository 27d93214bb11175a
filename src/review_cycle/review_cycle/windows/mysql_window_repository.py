from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from ..core.enums import WindowKind, WindowStatus
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_date
from .model import GoalWindow, ReviewWindow
from .repository import WindowRecord, WindowRepository, WindowSession

_REVIEW_SELECT = """
    SELECT cycle_id, quarter, quarter_start, quarter_end,
           self_review_start, self_review_end,
           manager_review_start, manager_review_end, updated_at
    FROM quarter_review_windows
    WHERE cycle_id=%s AND quarter=%s
"""

_GOAL_SELECT = """
    SELECT cycle_id, quarter, goal_submission_start, goal_submission_end,
           goal_approval_start, goal_approval_end,
           allow_late_goal_submission, status, updated_at
    FROM quarter_goal_windows
    WHERE cycle_id=%s AND quarter=%s
"""


def _row_to_review(r: dict) -> ReviewWindow:
    return ReviewWindow(
        cycle_id=int(r["cycle_id"]),
        quarter=int(r["quarter"]),
        quarter_start=normalize_mysql_date(r["quarter_start"]),
        quarter_end=normalize_mysql_date(r["quarter_end"]),
        self_review_start=normalize_mysql_date(r.get("self_review_start")),
        self_review_end=normalize_mysql_date(r.get("self_review_end")),
        manager_review_start=normalize_mysql_date(r["manager_review_start"]),
        manager_review_end=normalize_mysql_date(r["manager_review_end"]),
        updated_at=r.get("updated_at"),
    )


def _row_to_goal(r: dict) -> GoalWindow:
    return GoalWindow(
        cycle_id=int(r["cycle_id"]),
        quarter=int(r["quarter"]),
        goal_submission_start=normalize_mysql_date(r.get("goal_submission_start")),
        goal_submission_end=normalize_mysql_date(r.get("goal_submission_end")),
        goal_approval_start=normalize_mysql_date(r.get("goal_approval_start")),
        goal_approval_end=normalize_mysql_date(r.get("goal_approval_end")),
        allow_late_goal_submission=bool(r.get("allow_late_goal_submission")),
        status=WindowStatus(r.get("status") or WindowStatus.DRAFT.value),
        updated_at=r.get("updated_at"),
    )


def _select(cur, kind: WindowKind, cycle_id: int, quarter: int, *, for_update: bool = False) -> Optional[WindowRecord]:
    sql = _REVIEW_SELECT if kind == WindowKind.REVIEW else _GOAL_SELECT
    if for_update:
        sql += " FOR UPDATE"
    cur.execute(sql, (int(cycle_id), int(quarter)))
    r = fetchone(cur)
    if not r:
        return None
    return _row_to_review(r) if kind == WindowKind.REVIEW else _row_to_goal(r)


class _MySQLWindowSession(WindowSession):
    def __init__(self, cur, cycle_id: int, quarter: int):
        self._cur = cur
        self._cycle_id = int(cycle_id)
        self._quarter = int(quarter)

    def get_window(self, kind: WindowKind) -> Optional[WindowRecord]:
        return _select(self._cur, kind, self._cycle_id, self._quarter, for_update=True)

    def put_window(self, kind: WindowKind, record: WindowRecord) -> WindowRecord:
        if kind == WindowKind.REVIEW:
            self._cur.execute(
                """
                INSERT INTO quarter_review_windows(
                    cycle_id, quarter, quarter_start, quarter_end,
                    self_review_start, self_review_end,
                    manager_review_start, manager_review_end, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,NOW())
                ON DUPLICATE KEY UPDATE
                    quarter_start=VALUES(quarter_start),
                    quarter_end=VALUES(quarter_end),
                    self_review_start=VALUES(self_review_start),
                    self_review_end=VALUES(self_review_end),
                    manager_review_start=VALUES(manager_review_start),
                    manager_review_end=VALUES(manager_review_end),
                    updated_at=NOW()
                """,
                (
                    self._cycle_id,
                    self._quarter,
                    record.quarter_start,
                    record.quarter_end,
                    record.self_review_start,
                    record.self_review_end,
                    record.manager_review_start,
                    record.manager_review_end,
                ),
            )
        else:
            self._cur.execute(
                """
                INSERT INTO quarter_goal_windows(
                    cycle_id, quarter, goal_submission_start, goal_submission_end,
                    goal_approval_start, goal_approval_end,
                    allow_late_goal_submission, status, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,NOW())
                ON DUPLICATE KEY UPDATE
                    goal_submission_start=VALUES(goal_submission_start),
                    goal_submission_end=VALUES(goal_submission_end),
                    goal_approval_start=VALUES(goal_approval_start),
                    goal_approval_end=VALUES(goal_approval_end),
                    allow_late_goal_submission=VALUES(allow_late_goal_submission),
                    status=VALUES(status),
                    updated_at=NOW()
                """,
                (
                    self._cycle_id,
                    self._quarter,
                    record.goal_submission_start,
                    record.goal_submission_end,
                    record.goal_approval_start,
                    record.goal_approval_end,
                    1 if record.allow_late_goal_submission else 0,
                    record.status.value,
                ),
            )

        stored = _select(self._cur, kind, self._cycle_id, self._quarter)
        if stored is None:
            raise RuntimeError(f"{kind.value} window for cycle {self._cycle_id} Q{self._quarter} was not stored")
        return stored


class MySQLWindowRepository(WindowRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_window(self, *, cycle_id: int, quarter: int, kind: WindowKind) -> Optional[WindowRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            return _select(cur, kind, cycle_id, quarter)

    @contextmanager
    def session(self, *, cycle_id: int, quarter: int) -> Iterator[WindowSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            # Lock the cycle row: concurrent upserts on the same cycle serialize here,
            # including the first insert of a (cycle, quarter) key.
            cur.execute("SELECT cycle_id FROM performance_cycles WHERE cycle_id=%s FOR UPDATE", (int(cycle_id),))
            if not fetchone(cur):
                raise NotFoundError("Cycle not found")
            yield _MySQLWindowSession(cur, cycle_id, quarter)
