from __future__ import annotations

from typing import Optional

from ..core.enums import CycleStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_date
from .model import Cycle
from .repository import CycleRepository

_COLUMNS = """
    cycle_id, name, year, status, start_date, end_date,
    self_evaluation_start, self_evaluation_end,
    manager_evaluation_start, manager_evaluation_end,
    calibration_start, calibration_end, release_date
"""


def _row_to_cycle(r: dict) -> Cycle:
    return Cycle(
        cycle_id=int(r["cycle_id"]),
        name=r["name"],
        year=int(r["year"]),
        status=CycleStatus(r["status"]),
        start_date=normalize_mysql_date(r.get("start_date")),
        end_date=normalize_mysql_date(r.get("end_date")),
        self_evaluation_start=normalize_mysql_date(r.get("self_evaluation_start")),
        self_evaluation_end=normalize_mysql_date(r.get("self_evaluation_end")),
        manager_evaluation_start=normalize_mysql_date(r.get("manager_evaluation_start")),
        manager_evaluation_end=normalize_mysql_date(r.get("manager_evaluation_end")),
        calibration_start=normalize_mysql_date(r.get("calibration_start")),
        calibration_end=normalize_mysql_date(r.get("calibration_end")),
        release_date=normalize_mysql_date(r.get("release_date")),
    )


class MySQLCycleRepository(CycleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, cycle_id: int) -> Optional[Cycle]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM performance_cycles WHERE cycle_id=%s", (int(cycle_id),))
            r = fetchone(cur)
            return _row_to_cycle(r) if r else None

    def get_active(self) -> Optional[Cycle]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM performance_cycles
                WHERE status=%s
                ORDER BY created_at DESC
                LIMIT 1
                """,
                (CycleStatus.ACTIVE.value,),
            )
            r = fetchone(cur)
            return _row_to_cycle(r) if r else None
