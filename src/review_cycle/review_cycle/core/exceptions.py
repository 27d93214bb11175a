from __future__ import annotations

from datetime import date
from typing import Optional, Tuple


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    Window validation fills ``field`` and ``allowed_range`` so callers can
    point at the offending value.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        allowed_range: Optional[Tuple[date, date]] = None,
    ):
        super().__init__(message)
        self.field = field
        self.allowed_range = allowed_range

    def to_dict(self) -> dict:
        out: dict = {"error": str(self)}
        if self.field:
            out["field"] = self.field
        if self.allowed_range:
            start, end = self.allowed_range
            out["allowed_range"] = [start.isoformat(), end.isoformat()]
        return out


class NotFoundError(DomainError):
    """Raised when a referenced cycle, window, employee or permission is missing."""


class ConflictError(DomainError):
    """Raised when an active record already occupies a unique slot."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""
