from __future__ import annotations

from typing import Optional, Protocol

from .model import Cycle


class CycleRepository(Protocol):
    def get_by_id(self, cycle_id: int) -> Optional[Cycle]:
        raise NotImplementedError

    def get_active(self) -> Optional[Cycle]:
        """Most recently created cycle with status 'active'."""

        raise NotImplementedError
