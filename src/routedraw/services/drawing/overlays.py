"""Registry of overlays the controller has placed on the map."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable


class OverlayKind(str, Enum):
    ROUTE = "route"
    MARKER = "marker"


@dataclass(frozen=True, slots=True)
class OverlayEntry:
    kind: OverlayKind
    handle: int


class OverlayRegistry:
    """Tracks overlays by kind so they can be removed through their handles."""

    def __init__(self) -> None:
        self._entries: list[OverlayEntry] = []

    def register(self, kind: OverlayKind, handle: int) -> OverlayEntry:
        entry = OverlayEntry(kind, handle)
        self._entries.append(entry)
        return entry

    def entries(self, kind: OverlayKind | None = None) -> list[OverlayEntry]:
        return [entry for entry in self._entries if kind is None or entry.kind == kind]

    def remove_all(self, remove: Callable[[int], None]) -> int:
        """Remove every registered overlay with ``remove(handle)``; returns the count."""
        entries, self._entries = self._entries, []
        for entry in entries:
            remove(entry.handle)
        return len(entries)

    def __len__(self) -> int:
        return len(self._entries)
