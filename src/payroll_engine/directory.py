from __future__ import annotations

from typing import Iterable, List, Protocol

from .models import CompensationInput


class CompensationDirectory(Protocol):
    def list_active_compensation(self) -> List[CompensationInput]:
        """Snapshot of every active employee's compensation facts."""


class StaticDirectory:
    """Directory backed by a fixed list, used for previews and batch imports."""

    def __init__(self, records: Iterable[CompensationInput]):
        self._records = list(records)

    def list_active_compensation(self) -> List[CompensationInput]:
        return list(self._records)
