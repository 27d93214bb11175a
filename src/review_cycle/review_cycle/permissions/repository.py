from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.quarter import Quarter
from .model import LateSubmissionPermission


class PermissionRepository(Protocol):
    def get_by_id(self, permission_id: int) -> Optional[LateSubmissionPermission]:
        raise NotImplementedError

    def find_by_scope(self, *, employee_id: int, cycle_id: int, scope: Quarter) -> Optional[LateSubmissionPermission]:
        """The single stored row for (employee, cycle, scope), revoked or not."""

        raise NotImplementedError

    def list_permissions(
        self,
        *,
        cycle_id: Optional[int] = None,
        employee_id: Optional[int] = None,
        scopes: Optional[Iterable[Quarter]] = None,
        exclude_revoked: bool = False,
        limit: Optional[int] = None,
    ) -> Sequence[LateSubmissionPermission]:
        """Newest grant first."""

        raise NotImplementedError

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
        """Raises ConflictError when the (employee, cycle, scope) slot is taken."""

        raise NotImplementedError

    def reactivate(
        self,
        *,
        permission_id: int,
        granted_by: Optional[int],
        granted_at: datetime,
        reason: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> LateSubmissionPermission:
        raise NotImplementedError

    def set_revoked(self, *, permission_ids: Sequence[int], revoked_at: datetime) -> int:
        """Mark still-active rows revoked; returns the number of rows changed."""

        raise NotImplementedError

    def update(
        self,
        *,
        permission_id: int,
        reason: Optional[str] = None,
        expires_at: Optional[datetime] = None,
    ) -> Optional[LateSubmissionPermission]:
        """Change only the non-None fields."""

        raise NotImplementedError
