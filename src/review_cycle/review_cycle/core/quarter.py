from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from .constants import ANY_QUARTER_KEY, QUARTERS, YEAR_END_KEY
from .exceptions import ValidationError


@dataclass(frozen=True)
class Quarter:
    """Period scope: a numbered quarter, the year-end review, or any quarter.

    ``ANY`` only appears on late-submission permissions (a wildcard over the
    numbered quarters). Stored as the string ``key``.
    """

    number: Optional[int] = None
    year_end: bool = False

    YEAR_END: ClassVar["Quarter"]
    ANY: ClassVar["Quarter"]

    @classmethod
    def numbered(cls, number: int) -> "Quarter":
        number = int(number)
        if number not in QUARTERS:
            raise ValidationError("quarter must be between 1 and 4, or \"year-end\"", field="quarter")
        return cls(number=number)

    @property
    def is_numbered(self) -> bool:
        return self.number is not None

    @property
    def is_year_end(self) -> bool:
        return self.year_end

    @property
    def is_any(self) -> bool:
        return self.number is None and not self.year_end

    @property
    def key(self) -> str:
        if self.number is not None:
            return str(self.number)
        return YEAR_END_KEY if self.year_end else ANY_QUARTER_KEY

    @classmethod
    def from_key(cls, key: str) -> "Quarter":
        value = str(key).strip().lower()
        if value == YEAR_END_KEY:
            return cls.YEAR_END
        if value == ANY_QUARTER_KEY:
            return cls.ANY
        if not value.isdigit():
            raise ValidationError(f"Invalid quarter: {key!r}", field="quarter")
        return cls.numbered(int(value))

    @classmethod
    def parse(cls, value: Union[int, str, "Quarter", None], *, allow_any: bool = False) -> "Quarter":
        """Parse request input: 1..4, "year-end", and ("any" / None) when allowed."""

        if isinstance(value, Quarter):
            q = value
        elif value is None or value == "":
            if not allow_any:
                raise ValidationError("quarter is required", field="quarter")
            return cls.ANY
        elif isinstance(value, int):
            q = cls.numbered(value)
        else:
            q = cls.from_key(value)

        if q.is_any and not allow_any:
            raise ValidationError("quarter must be between 1 and 4, or \"year-end\"", field="quarter")
        return q

    def label(self) -> str:
        if self.number is not None:
            return f"Q{self.number}"
        return "year-end" if self.year_end else "all quarters"

    def __str__(self) -> str:
        return self.key


Quarter.YEAR_END = Quarter(year_end=True)
Quarter.ANY = Quarter()
