from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import CycleStatus


@dataclass(frozen=True)
class Cycle:
    """Domain entity: one annual performance-review cycle.

    Quarter windows live in their own records (see ``windows``); the cycle only
    carries the annual bounds and the year-end evaluation windows.
    """

    cycle_id: int
    name: str
    year: int
    status: CycleStatus
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    self_evaluation_start: Optional[date] = None
    self_evaluation_end: Optional[date] = None
    manager_evaluation_start: Optional[date] = None
    manager_evaluation_end: Optional[date] = None
    calibration_start: Optional[date] = None
    calibration_end: Optional[date] = None
    release_date: Optional[date] = None
