from __future__ import annotations

import logging
from typing import Optional

from ..core.enums import SubmissionKind, WindowKind
from ..core.exceptions import NotFoundError, ValidationError
from ..core.quarter import Quarter
from ..cycles.model import Cycle
from ..cycles.repository import CycleRepository
from .model import (
    Bounds,
    GoalWindow,
    GoalWindowUpdate,
    QuarterWindow,
    QuarterWindowUpdate,
    ReviewWindow,
    ReviewWindowUpdate,
    SubmissionWindow,
)
from .repository import WindowRepository, WindowSession
from .validator import merge_goal_window, merge_review_window

logger = logging.getLogger(__name__)


class CycleWindowStore:
    """Source of truth for "when is period X open" within a cycle.

    All merge rules live in ``validator``; this class fetches, merges and
    persists inside one repository session so a rejected merge writes nothing.
    """

    def __init__(self, windows: WindowRepository, cycles: CycleRepository):
        self._windows = windows
        self._cycles = cycles

    def get_cycle(self, cycle_id: int) -> Cycle:
        cycle = self._cycles.get_by_id(int(cycle_id))
        if not cycle:
            raise NotFoundError("Cycle not found")
        return cycle

    # -------- writes --------
    def upsert_review_window(self, cycle_id: int, quarter: int, updates: ReviewWindowUpdate) -> ReviewWindow:
        cycle = self.get_cycle(cycle_id)
        q = Quarter.numbered(quarter).number
        with self._windows.session(cycle_id=cycle.cycle_id, quarter=q) as session:
            review = self._apply_review(session, cycle, q, updates)
            existing_goal = session.get_window(WindowKind.GOAL)
            if existing_goal is not None:
                self._apply_goal(session, cycle, q, GoalWindowUpdate(), review=review)
            return review

    def upsert_goal_window(self, cycle_id: int, quarter: int, updates: GoalWindowUpdate) -> GoalWindow:
        cycle = self.get_cycle(cycle_id)
        q = Quarter.numbered(quarter).number
        with self._windows.session(cycle_id=cycle.cycle_id, quarter=q) as session:
            return self._apply_goal(session, cycle, q, updates)

    def upsert_quarter_window(self, cycle_id: int, quarter: int, update: QuarterWindowUpdate) -> QuarterWindow:
        """Apply review then goal fields of one payload as a single unit."""

        cycle = self.get_cycle(cycle_id)
        q = Quarter.numbered(quarter).number
        with self._windows.session(cycle_id=cycle.cycle_id, quarter=q) as session:
            review = self._apply_review(session, cycle, q, update.review)
            goal = self._apply_goal(session, cycle, q, update.goal, review=review)
            return QuarterWindow(review=review, goal=goal)

    def _apply_review(self, session: WindowSession, cycle: Cycle, quarter: int, updates: ReviewWindowUpdate) -> ReviewWindow:
        existing = session.get_window(WindowKind.REVIEW)
        try:
            merged = merge_review_window(existing, updates, cycle_id=cycle.cycle_id, year=cycle.year, quarter=quarter)
        except ValidationError as e:
            logger.warning("Rejected review window update for cycle %s Q%s: %s", cycle.cycle_id, quarter, e)
            raise

        if existing is not None and merged == existing:
            return existing

        stored = session.put_window(WindowKind.REVIEW, merged)
        logger.info(
            "Stored review window cycle=%s Q%s quarter=%s..%s self=%s..%s manager=%s..%s",
            cycle.cycle_id, quarter,
            merged.quarter_start, merged.quarter_end,
            merged.self_review_start, merged.self_review_end,
            merged.manager_review_start, merged.manager_review_end,
        )
        return stored

    def _apply_goal(
        self,
        session: WindowSession,
        cycle: Cycle,
        quarter: int,
        updates: GoalWindowUpdate,
        *,
        review: Optional[ReviewWindow] = None,
    ) -> GoalWindow:
        if review is None:
            review = session.get_window(WindowKind.REVIEW)
        if review is None:
            logger.info("Creating default review window for cycle %s Q%s", cycle.cycle_id, quarter)
            review = self._apply_review(session, cycle, quarter, ReviewWindowUpdate())

        existing = session.get_window(WindowKind.GOAL)
        try:
            merged = merge_goal_window(existing, updates, review.bounds, cycle_id=cycle.cycle_id, quarter=quarter)
        except ValidationError as e:
            logger.warning("Rejected goal window update for cycle %s Q%s: %s", cycle.cycle_id, quarter, e)
            raise

        if existing is not None and merged == existing:
            return existing

        stored = session.put_window(WindowKind.GOAL, merged)
        logger.info("Stored goal window cycle=%s Q%s", cycle.cycle_id, quarter)
        return stored

    # -------- reads --------
    def get_quarter_bounds(self, cycle_id: int, quarter: int) -> Optional[Bounds]:
        q = Quarter.numbered(quarter).number
        review = self._windows.get_window(cycle_id=int(cycle_id), quarter=q, kind=WindowKind.REVIEW)
        return review.bounds if review else None

    def resolve_review_window(self, cycle: Cycle, quarter: int) -> ReviewWindow:
        """Stored review window, or the defaults it would be created with."""

        q = Quarter.numbered(quarter).number
        stored = self._windows.get_window(cycle_id=cycle.cycle_id, quarter=q, kind=WindowKind.REVIEW)
        if stored is not None:
            return stored
        return merge_review_window(None, ReviewWindowUpdate(), cycle_id=cycle.cycle_id, year=cycle.year, quarter=q)

    def resolve_goal_window(self, cycle: Cycle, quarter: int) -> GoalWindow:
        q = Quarter.numbered(quarter).number
        stored = self._windows.get_window(cycle_id=cycle.cycle_id, quarter=q, kind=WindowKind.GOAL)
        return stored if stored is not None else GoalWindow(cycle_id=cycle.cycle_id, quarter=q)

    def get_quarter_window(self, cycle_id: int, quarter: int) -> QuarterWindow:
        cycle = self.get_cycle(cycle_id)
        return QuarterWindow(
            review=self.resolve_review_window(cycle, quarter),
            goal=self.resolve_goal_window(cycle, quarter),
        )

    def submission_window(self, cycle: Cycle, quarter: Quarter, kind: SubmissionKind) -> SubmissionWindow:
        if quarter.is_any:
            raise ValidationError("A deadline needs a quarter or \"year-end\"", field="quarter")

        if kind == SubmissionKind.GOAL:
            if not quarter.is_numbered:
                raise ValidationError("Goal submission windows are quarterly", field="quarter")
            goal = self.resolve_goal_window(cycle, quarter.number)
            return SubmissionWindow(
                start=goal.goal_submission_start,
                end=goal.goal_submission_end,
                late_globally_allowed=goal.allow_late_goal_submission,
            )

        if quarter.is_year_end:
            return SubmissionWindow(start=cycle.self_evaluation_start, end=cycle.self_evaluation_end)

        review = self.resolve_review_window(cycle, quarter.number)
        return SubmissionWindow(start=review.self_review_start, end=review.self_review_end)
