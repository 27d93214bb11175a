from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def coerce_date(value: Any, field_name: str) -> Optional[date]:
    """Accept None, date, datetime or an ISO string; anything else is invalid."""

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        v = value.strip()
        if not v:
            return None
        try:
            return parse_iso_date(v[:10])
        except ValueError:
            raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)", field=field_name)
    raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)", field=field_name)


def iso_or_none(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def today_local() -> date:
    """Current local date.

    Note: Wrapped so tests can patch it; services take ``today``/``now`` explicitly.
    """
    return date.today()


def now_local() -> datetime:
    return datetime.now()
