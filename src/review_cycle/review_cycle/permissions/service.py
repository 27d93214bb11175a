from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import List, Optional, Sequence, Union

from ..compliance.tracker import match_permission
from ..core.constants import DEFAULT_PERMISSION_LIST_LIMIT
from ..core.enums import ADMIN_ROLES, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.quarter import Quarter
from ..cycles.repository import CycleRepository
from ..employees.repository import EmployeeDirectory
from .model import LateSubmissionPermission, PermissionCheck
from .repository import PermissionRepository

logger = logging.getLogger(__name__)

QuarterInput = Union[int, str, Quarter, None]


def _require_admin(current_role: Role) -> None:
    if current_role not in ADMIN_ROLES:
        raise AuthorizationError("Only HR or system administrators can manage late submission permissions")


def _end_of_day(value: Optional[Union[date, datetime]]) -> Optional[datetime]:
    # A date-only expiry stays valid through that whole day.
    if value is None or isinstance(value, datetime):
        return value
    return datetime.combine(value, time(23, 59, 59))


def _future_expiry(value: Optional[Union[date, datetime]], now: datetime) -> Optional[datetime]:
    expires = _end_of_day(value)
    if expires is not None and expires <= now:
        raise ValidationError("expires_at must be in the future", field="expires_at")
    return expires


def _clean(text: Optional[str]) -> Optional[str]:
    return (text or "").strip() or None


class LateSubmissionPermissionService:
    def __init__(self, permissions: PermissionRepository, employees: EmployeeDirectory, cycles: CycleRepository):
        self._permissions = permissions
        self._employees = employees
        self._cycles = cycles

    def grant(
        self,
        *,
        current_role: Role,
        granted_by: int,
        employee_id: int,
        cycle_id: int,
        quarter: QuarterInput,
        now: datetime,
        reason: Optional[str] = None,
        expires_at: Optional[Union[date, datetime]] = None,
    ) -> LateSubmissionPermission:
        """Grant (or reactivate) the permission for one scope.

        ``quarter`` None or "any" grants the wildcard over all quarters.
        """

        _require_admin(current_role)
        scope = Quarter.parse(quarter, allow_any=True)

        if not self._employees.get_by_id(int(employee_id)):
            raise NotFoundError("Employee not found")
        if not self._cycles.get_by_id(int(cycle_id)):
            raise NotFoundError("Cycle not found")

        expires = _future_expiry(expires_at, now)

        existing = self._permissions.find_by_scope(employee_id=int(employee_id), cycle_id=int(cycle_id), scope=scope)
        # Expiry alone does not free the slot; only a revoked grant is reactivated.
        if existing is not None and existing.revoked_at is None:
            raise ConflictError(f"Late submission permission already exists for this employee for {scope.label()}")

        if existing is not None:
            permission = self._permissions.reactivate(
                permission_id=existing.permission_id,
                granted_by=int(granted_by),
                granted_at=now,
                reason=_clean(reason),
                expires_at=expires,
            )
            logger.info(
                "Reactivated late submission permission %s (employee=%s cycle=%s scope=%s)",
                permission.permission_id, employee_id, cycle_id, scope.key,
            )
            return permission

        permission = self._permissions.create(
            employee_id=int(employee_id),
            cycle_id=int(cycle_id),
            scope=scope,
            granted_by=int(granted_by),
            granted_at=now,
            reason=_clean(reason),
            expires_at=expires,
        )
        logger.info(
            "Granted late submission permission %s (employee=%s cycle=%s scope=%s)",
            permission.permission_id, employee_id, cycle_id, scope.key,
        )
        return permission

    def revoke(self, *, current_role: Role, permission_id: int, now: datetime) -> LateSubmissionPermission:
        """Soft delete. Revoking an already revoked permission is a no-op."""

        _require_admin(current_role)
        permission = self._permissions.get_by_id(int(permission_id))
        if not permission:
            raise NotFoundError("Late submission permission not found")
        if permission.revoked_at is not None:
            return permission

        self._permissions.set_revoked(permission_ids=[permission.permission_id], revoked_at=now)
        logger.info("Revoked late submission permission %s", permission.permission_id)
        return self._permissions.get_by_id(permission.permission_id)

    def revoke_for(
        self,
        *,
        current_role: Role,
        cycle_id: int,
        employee_id: int,
        now: datetime,
        quarter: QuarterInput = None,
    ) -> List[LateSubmissionPermission]:
        """Revoke by (cycle, employee).

        year-end revokes the year-end grant, a numbered quarter revokes that
        quarter's grant and the wildcard, no quarter revokes everything.
        """

        _require_admin(current_role)
        active = list(
            self._permissions.list_permissions(cycle_id=int(cycle_id), employee_id=int(employee_id), exclude_revoked=True)
        )
        if quarter is not None and quarter != "":
            scope = Quarter.parse(quarter, allow_any=True)
            if scope.is_year_end:
                active = [p for p in active if p.scope.is_year_end]
            elif scope.is_numbered:
                active = [p for p in active if p.scope == scope or p.scope.is_any]
            else:
                active = [p for p in active if p.scope.is_any]

        if not active:
            raise NotFoundError("No active late submission permission found")

        self._permissions.set_revoked(permission_ids=[p.permission_id for p in active], revoked_at=now)
        logger.info(
            "Revoked %s late submission permission(s) for employee=%s cycle=%s",
            len(active), employee_id, cycle_id,
        )
        return [self._permissions.get_by_id(p.permission_id) for p in active]

    def update(
        self,
        *,
        current_role: Role,
        permission_id: int,
        now: datetime,
        reason: Optional[str] = None,
        expires_at: Optional[Union[date, datetime]] = None,
    ) -> LateSubmissionPermission:
        _require_admin(current_role)
        updated = self._permissions.update(
            permission_id=int(permission_id),
            reason=_clean(reason),
            expires_at=_future_expiry(expires_at, now),
        )
        if not updated:
            raise NotFoundError("Late submission permission not found")
        return updated

    def get(self, *, current_role: Role, permission_id: int) -> LateSubmissionPermission:
        _require_admin(current_role)
        permission = self._permissions.get_by_id(int(permission_id))
        if not permission:
            raise NotFoundError("Late submission permission not found")
        return permission

    def list_permissions(
        self,
        *,
        current_role: Role,
        now: datetime,
        cycle_id: Optional[int] = None,
        employee_id: Optional[int] = None,
        active_only: bool = False,
    ) -> Sequence[LateSubmissionPermission]:
        _require_admin(current_role)
        rows = self._permissions.list_permissions(
            cycle_id=cycle_id,
            employee_id=employee_id,
            exclude_revoked=active_only,
            limit=DEFAULT_PERMISSION_LIST_LIMIT,
        )
        if active_only:
            rows = [p for p in rows if p.is_active(now)]
        return rows

    def check(self, *, employee_id: int, cycle_id: int, now: datetime, quarter: QuarterInput = None) -> PermissionCheck:
        """Employee self-check; without a quarter any active grant in the cycle counts."""

        rows = self._permissions.list_permissions(
            cycle_id=int(cycle_id), employee_id=int(employee_id), exclude_revoked=True
        )
        if quarter is None or quarter == "":
            active = [p for p in rows if p.is_active(now)]
            return PermissionCheck(has_permission=bool(active), permission=active[0] if active else None)

        permission = match_permission(int(employee_id), int(cycle_id), Quarter.parse(quarter), rows, now)
        return PermissionCheck(has_permission=permission is not None, permission=permission)
