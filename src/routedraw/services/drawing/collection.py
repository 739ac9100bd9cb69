"""Committed routes for the current map session."""

from __future__ import annotations

from ...models.domain import RouteRecord


class RouteCollection:
    """Routes in commit order.

    A commit reserves its slot before the final distance is measured, so a
    slow measurement never lets a later route overtake it. Slots that are
    still being measured are skipped by ``all()`` and ``len()``.
    """

    def __init__(self) -> None:
        self._records: list[RouteRecord | None] = []

    def reserve(self) -> int:
        self._records.append(None)
        return len(self._records) - 1

    def fill(self, slot: int, record: RouteRecord) -> None:
        if self._records[slot] is not None:
            raise ValueError(f"Route slot {slot} is already filled.")
        self._records[slot] = record

    def append(self, record: RouteRecord) -> None:
        self.fill(self.reserve(), record)

    def clear(self) -> None:
        self._records.clear()

    def all(self) -> tuple[RouteRecord, ...]:
        return tuple(record for record in self._records if record is not None)

    def __len__(self) -> int:
        return sum(1 for record in self._records if record is not None)
