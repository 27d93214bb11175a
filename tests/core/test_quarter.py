from __future__ import annotations

import pytest

from src.review_cycle.review_cycle.core.exceptions import ValidationError
from src.review_cycle.review_cycle.core.quarter import Quarter


@pytest.mark.parametrize(
    "value, expected",
    [
        (3, Quarter.numbered(3)),
        ("4", Quarter.numbered(4)),
        ("year-end", Quarter.YEAR_END),
        (Quarter.YEAR_END, Quarter.YEAR_END),
    ],
)
def test_parse(value, expected):
    assert Quarter.parse(value) == expected


def test_missing_quarter_is_wildcard_only_when_allowed():
    assert Quarter.parse(None, allow_any=True) == Quarter.ANY
    assert Quarter.parse("any", allow_any=True).is_any
    with pytest.raises(ValidationError):
        Quarter.parse(None)
    with pytest.raises(ValidationError):
        Quarter.parse("any")


@pytest.mark.parametrize("value", [0, 5, "Q1", "five"])
def test_invalid_quarters(value):
    with pytest.raises(ValidationError):
        Quarter.parse(value)


def test_year_end_and_wildcard_are_distinct():
    assert Quarter.YEAR_END != Quarter.ANY
    assert {Quarter.YEAR_END.key, Quarter.ANY.key, Quarter.numbered(1).key} == {"year-end", "any", "1"}
    assert Quarter.from_key(Quarter.ANY.key) == Quarter.ANY
    assert Quarter.numbered(2).label() == "Q2"
