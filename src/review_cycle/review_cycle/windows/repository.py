from __future__ import annotations

from typing import ContextManager, Optional, Protocol, Union

from ..core.enums import WindowKind
from .model import GoalWindow, ReviewWindow

WindowRecord = Union[ReviewWindow, GoalWindow]


class WindowSession(Protocol):
    """Unit of work over one (cycle, quarter) key.

    Reads and writes made through a session are applied atomically: either
    every ``put_window`` of the session is committed, or none is.
    """

    def get_window(self, kind: WindowKind) -> Optional[WindowRecord]:
        raise NotImplementedError

    def put_window(self, kind: WindowKind, record: WindowRecord) -> WindowRecord:
        """Insert-or-replace keyed by (cycle, quarter, kind).

        Returns the stored record (with its ``updated_at`` marker).
        """

        raise NotImplementedError


class WindowRepository(Protocol):
    def get_window(self, *, cycle_id: int, quarter: int, kind: WindowKind) -> Optional[WindowRecord]:
        raise NotImplementedError

    def session(self, *, cycle_id: int, quarter: int) -> ContextManager[WindowSession]:
        raise NotImplementedError
