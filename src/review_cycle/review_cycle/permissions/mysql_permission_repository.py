from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

import mysql.connector

from ..core.exceptions import ConflictError
from ..core.quarter import Quarter
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_placeholders
from .model import LateSubmissionPermission
from .repository import PermissionRepository

_SELECT = """
    SELECT permission_id, employee_id, cycle_id, scope, reason,
           granted_by, granted_at, expires_at, revoked_at
    FROM late_submission_permissions
"""


def _row_to_permission(r: dict) -> LateSubmissionPermission:
    return LateSubmissionPermission(
        permission_id=int(r["permission_id"]),
        employee_id=int(r["employee_id"]),
        cycle_id=int(r["cycle_id"]),
        scope=Quarter.from_key(r["scope"]),
        reason=r.get("reason"),
        granted_by=int(r["granted_by"]) if r.get("granted_by") is not None else None,
        granted_at=r["granted_at"],
        expires_at=r.get("expires_at"),
        revoked_at=r.get("revoked_at"),
    )


class MySQLPermissionRepository(PermissionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get(self, cur, permission_id: int) -> Optional[LateSubmissionPermission]:
        cur.execute(_SELECT + " WHERE permission_id=%s", (int(permission_id),))
        r = fetchone(cur)
        return _row_to_permission(r) if r else None

    def get_by_id(self, permission_id: int) -> Optional[LateSubmissionPermission]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._get(cur, permission_id)

    def find_by_scope(self, *, employee_id: int, cycle_id: int, scope: Quarter) -> Optional[LateSubmissionPermission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE employee_id=%s AND cycle_id=%s AND scope=%s",
                (int(employee_id), int(cycle_id), scope.key),
            )
            r = fetchone(cur)
            return _row_to_permission(r) if r else None

    def list_permissions(
        self,
        *,
        cycle_id: Optional[int] = None,
        employee_id: Optional[int] = None,
        scopes: Optional[Iterable[Quarter]] = None,
        exclude_revoked: bool = False,
        limit: Optional[int] = None,
    ) -> Sequence[LateSubmissionPermission]:
        clauses = ["1=1"]
        params: list[object] = []

        if cycle_id is not None:
            clauses.append("cycle_id=%s")
            params.append(int(cycle_id))
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if scopes is not None:
            keys = [s.key for s in scopes]
            if not keys:
                return []
            clauses.append(f"scope IN ({in_placeholders(keys)})")
            params.extend(keys)
        if exclude_revoked:
            clauses.append("revoked_at IS NULL")

        where = " AND ".join(clauses)

        sql = f"{_SELECT} WHERE {where} ORDER BY granted_at DESC"
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_permission(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        employee_id: int,
        cycle_id: int,
        scope: Quarter,
        granted_by: Optional[int],
        granted_at: datetime,
        reason: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> LateSubmissionPermission:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO late_submission_permissions(
                        employee_id, cycle_id, scope, reason, granted_by, granted_at, expires_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (int(employee_id), int(cycle_id), scope.key, reason, granted_by, granted_at, expires_at),
                )
                return self._get(cur, int(cur.lastrowid))
        except mysql.connector.IntegrityError as e:
            # uq_permission_scope raced with another grant.
            raise ConflictError(
                f"Late submission permission already exists for this employee for {scope.label()}"
            ) from e

    def reactivate(
        self,
        *,
        permission_id: int,
        granted_by: Optional[int],
        granted_at: datetime,
        reason: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> LateSubmissionPermission:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE late_submission_permissions
                SET granted_by=%s, granted_at=%s, reason=%s, expires_at=%s, revoked_at=NULL
                WHERE permission_id=%s
                """,
                (granted_by, granted_at, reason, expires_at, int(permission_id)),
            )
            return self._get(cur, permission_id)

    def set_revoked(self, *, permission_ids: Sequence[int], revoked_at: datetime) -> int:
        ids = [int(i) for i in permission_ids]
        if not ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE late_submission_permissions
                SET revoked_at=%s
                WHERE permission_id IN ({in_placeholders(ids)}) AND revoked_at IS NULL
                """,
                (revoked_at, *ids),
            )
            return int(cur.rowcount)

    def update(
        self,
        *,
        permission_id: int,
        reason: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> Optional[LateSubmissionPermission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE late_submission_permissions
                SET expires_at=COALESCE(%s, expires_at),
                    reason=COALESCE(%s, reason)
                WHERE permission_id=%s
                """,
                (expires_at, reason, int(permission_id)),
            )
            return self._get(cur, permission_id)
