from __future__ import annotations

from typing import Any

from ..core.exceptions import ValidationError


def require_positive_id(value: Any, field_name: str) -> int:
    if value is None or value == "":
        raise ValidationError(f"{field_name} is required", field=field_name)
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} is invalid", field=field_name)
    try:
        ident = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid", field=field_name)
    if ident <= 0:
        raise ValidationError(f"{field_name} is invalid", field=field_name)
    return ident
