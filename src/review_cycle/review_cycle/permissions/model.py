from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from ..core.enums import PermissionState
from ..core.quarter import Quarter

Moment = Union[date, datetime]


@dataclass(frozen=True)
class LateSubmissionPermission:
    """An HR-granted exception letting one employee submit after a deadline.

    ``scope`` is a numbered quarter, ``Quarter.YEAR_END`` or the wildcard
    ``Quarter.ANY``. Revocation is a soft delete via ``revoked_at``; expiry is
    evaluated against the caller's ``now``.
    """

    permission_id: int
    employee_id: int
    cycle_id: int
    scope: Quarter
    granted_at: datetime
    granted_by: Optional[int] = None
    reason: Optional[str] = None
    expires_at: Optional[datetime] = None
    revoked_at: Optional[datetime] = None

    def is_expired(self, now: Moment) -> bool:
        if self.expires_at is None:
            return False
        if isinstance(now, datetime):
            return now > self.expires_at
        return now > self.expires_at.date()

    def is_active(self, now: Moment) -> bool:
        return self.revoked_at is None and not self.is_expired(now)

    def state(self, now: Moment) -> PermissionState:
        if self.revoked_at is not None:
            return PermissionState.REVOKED
        if self.is_expired(now):
            return PermissionState.EXPIRED
        return PermissionState.GRANTED

    def to_dict(self, now: Optional[Moment] = None) -> dict:
        out = {
            "permission_id": self.permission_id,
            "employee_id": self.employee_id,
            "cycle_id": self.cycle_id,
            "quarter": self.scope.key,
            "reason": self.reason,
            "granted_by": self.granted_by,
            "granted_at": self.granted_at.isoformat() if self.granted_at else None,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "revoked_at": self.revoked_at.isoformat() if self.revoked_at else None,
        }
        if now is not None:
            out["state"] = self.state(now).value
        return out


@dataclass(frozen=True)
class PermissionCheck:
    has_permission: bool
    permission: Optional[LateSubmissionPermission] = None
