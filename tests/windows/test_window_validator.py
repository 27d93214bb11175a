from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.review_cycle.review_cycle.core.enums import WindowStatus
from src.review_cycle.review_cycle.core.exceptions import ValidationError
from src.review_cycle.review_cycle.windows.model import GoalWindow, GoalWindowUpdate, ReviewWindow, ReviewWindowUpdate
from src.review_cycle.review_cycle.windows.validator import (
    default_quarter_bounds,
    merge_goal_window,
    merge_review_window,
)


def _existing_q2() -> ReviewWindow:
    return ReviewWindow(
        cycle_id=1,
        quarter=2,
        quarter_start=date(2026, 4, 1),
        quarter_end=date(2026, 6, 30),
        self_review_start=date(2026, 6, 10),
        self_review_end=date(2026, 6, 20),
        manager_review_start=date(2026, 6, 21),
        manager_review_end=date(2026, 6, 30),
    )


@pytest.mark.parametrize("year", [2025, 2026, 2028])
def test_default_quarters_tile_the_year(year):
    bounds = [default_quarter_bounds(year, q) for q in (1, 2, 3, 4)]

    assert bounds[0][0] == date(year, 1, 1)
    assert bounds[-1][1] == date(year, 12, 31)
    for (_, prev_end), (next_start, _) in zip(bounds, bounds[1:]):
        assert next_start == prev_end + timedelta(days=1)


def test_default_quarter_rejects_out_of_range():
    with pytest.raises(ValidationError):
        default_quarter_bounds(2026, 5)


def test_new_quarter_gets_calendar_bounds_and_manager_review_on_last_day():
    w = merge_review_window(None, ReviewWindowUpdate(), cycle_id=1, year=2026, quarter=2)

    assert (w.quarter_start, w.quarter_end) == (date(2026, 4, 1), date(2026, 6, 30))
    assert (w.manager_review_start, w.manager_review_end) == (date(2026, 6, 30), date(2026, 6, 30))
    assert w.self_review_start is None and w.self_review_end is None


def test_inverted_manager_pair_collapses_to_end():
    w = merge_review_window(
        None,
        ReviewWindowUpdate(manager_review_start=date(2026, 6, 25), manager_review_end=date(2026, 6, 20)),
        cycle_id=1,
        year=2026,
        quarter=2,
    )

    assert w.manager_review_start == w.manager_review_end == date(2026, 6, 20)


def test_narrowing_bounds_clears_self_review_and_clamps_manager_review():
    w = merge_review_window(
        _existing_q2(),
        ReviewWindowUpdate(quarter_end=date(2026, 6, 5)),
        cycle_id=1,
        year=2026,
        quarter=2,
    )

    assert w.quarter_end == date(2026, 6, 5)
    assert w.self_review_start is None and w.self_review_end is None
    assert w.manager_review_start == w.manager_review_end == date(2026, 6, 5)


def test_narrowing_that_keeps_dates_inside_leaves_them_alone():
    w = merge_review_window(
        _existing_q2(),
        ReviewWindowUpdate(quarter_start=date(2026, 5, 1)),
        cycle_id=1,
        year=2026,
        quarter=2,
    )

    assert w.self_review_start == date(2026, 6, 10)
    assert w.manager_review_start == date(2026, 6, 21)


def test_self_review_outside_quarter_is_rejected_with_allowed_range():
    with pytest.raises(ValidationError) as exc:
        merge_review_window(
            _existing_q2(),
            ReviewWindowUpdate(self_review_start=date(2026, 3, 1)),
            cycle_id=1,
            year=2026,
            quarter=2,
        )

    assert exc.value.field == "self_review_start"
    assert exc.value.allowed_range == (date(2026, 4, 1), date(2026, 6, 30))


def test_inverted_self_review_is_rejected():
    with pytest.raises(ValidationError):
        merge_review_window(
            None,
            ReviewWindowUpdate(self_review_start=date(2026, 6, 20), self_review_end=date(2026, 6, 10)),
            cycle_id=1,
            year=2026,
            quarter=2,
        )


def test_inverted_quarter_bounds_are_rejected():
    with pytest.raises(ValidationError):
        merge_review_window(
            None,
            ReviewWindowUpdate(quarter_start=date(2026, 6, 1), quarter_end=date(2026, 5, 1)),
            cycle_id=1,
            year=2026,
            quarter=2,
        )


def test_goal_window_merges_flag_and_status_and_keeps_dates():
    existing = GoalWindow(
        cycle_id=1,
        quarter=2,
        goal_submission_start=date(2026, 4, 1),
        goal_submission_end=date(2026, 4, 15),
    )

    g = merge_goal_window(
        existing,
        GoalWindowUpdate(allow_late_goal_submission=True, status=WindowStatus.OPEN),
        (date(2026, 4, 1), date(2026, 6, 30)),
        cycle_id=1,
        quarter=2,
    )

    assert g.allow_late_goal_submission is True
    assert g.status == WindowStatus.OPEN
    assert g.goal_submission_end == date(2026, 4, 15)


def test_goal_submission_outside_quarter_is_rejected():
    with pytest.raises(ValidationError) as exc:
        merge_goal_window(
            None,
            GoalWindowUpdate(goal_submission_start=date(2026, 7, 1)),
            (date(2026, 4, 1), date(2026, 6, 30)),
            cycle_id=1,
            quarter=2,
        )

    assert exc.value.field == "goal_submission_start"


def test_stored_goal_window_follows_narrowed_quarter():
    existing = GoalWindow(
        cycle_id=1,
        quarter=2,
        goal_submission_start=date(2026, 6, 1),
        goal_submission_end=date(2026, 6, 10),
        goal_approval_start=date(2026, 6, 11),
        goal_approval_end=date(2026, 6, 20),
    )

    g = merge_goal_window(existing, GoalWindowUpdate(), (date(2026, 4, 1), date(2026, 5, 31)), cycle_id=1, quarter=2)

    assert g.goal_submission_start is None and g.goal_submission_end is None
    assert g.goal_approval_start == g.goal_approval_end == date(2026, 5, 31)


def test_moving_quarter_start_past_manager_review_clamps_to_quarter_end():
    w = merge_review_window(
        _existing_q2(),
        ReviewWindowUpdate(quarter_start=date(2026, 6, 25)),
        cycle_id=1,
        year=2026,
        quarter=2,
    )

    assert w.quarter_start == date(2026, 6, 25)
    assert w.self_review_start is None and w.self_review_end is None
    assert w.manager_review_start == w.manager_review_end == date(2026, 6, 30)


@pytest.mark.parametrize(
    "with_existing, updates",
    [
        (False, ReviewWindowUpdate()),
        (False, ReviewWindowUpdate(manager_review_start=date(2026, 6, 1))),
        (False, ReviewWindowUpdate(manager_review_start=date(2026, 6, 25), manager_review_end=date(2026, 6, 20))),
        (True, ReviewWindowUpdate(quarter_start=date(2026, 5, 1))),
        (True, ReviewWindowUpdate(quarter_start=date(2026, 6, 25))),
        (True, ReviewWindowUpdate(quarter_end=date(2026, 6, 5))),
        (True, ReviewWindowUpdate(quarter_start=date(2026, 6, 25), quarter_end=date(2026, 6, 28))),
        (True, ReviewWindowUpdate(manager_review_end=date(2026, 6, 22))),
        (True, ReviewWindowUpdate(manager_review_end=date(2026, 6, 15))),
    ],
)
def test_manager_review_never_ends_before_it_starts(with_existing, updates):
    existing = _existing_q2() if with_existing else None

    w = merge_review_window(existing, updates, cycle_id=1, year=2026, quarter=2)

    assert w.manager_review_start <= w.manager_review_end
    assert w.quarter_start <= w.manager_review_start and w.manager_review_end <= w.quarter_end
