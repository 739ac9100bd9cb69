"""Map widget collaborator.

The drawing core only talks to the map through :class:`MapWidget`. The
headless implementation keeps the rendered state in memory so the HTTP layer
can forward browser events into it and report back what should be on screen.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, Sequence

from ...models.domain import GeoPoint

logger = logging.getLogger(__name__)

PointerCallback = Callable[[GeoPoint], Any]

POINTER_DOWN = "pointerdown"
POINTER_MOVE = "pointermove"
KEY_DOWN = "keydown"


class MapWidget(Protocol):
    def add_listener(self, event: str, callback: Callable[..., Any]) -> int: ...

    def remove_listener(self, handle: int) -> None: ...

    def set_live_path(self, points: Sequence[GeoPoint]) -> None: ...

    def add_polyline(self, points: Sequence[GeoPoint]) -> int: ...

    def add_marker(self, point: GeoPoint, title: str) -> int: ...

    def remove_overlay(self, handle: int) -> None: ...

    def set_viewport(self, center: GeoPoint, zoom: int) -> None: ...


@dataclass
class HeadlessMapWidget:
    """In-memory map widget that records overlays and dispatches events."""

    center: GeoPoint = GeoPoint(40.7128, -74.006)
    zoom: int = 12
    live_path: list[GeoPoint] = field(default_factory=list)
    polylines: dict[int, tuple[GeoPoint, ...]] = field(default_factory=dict)
    markers: dict[int, tuple[GeoPoint, str]] = field(default_factory=dict)
    _listeners: dict[int, tuple[str, Callable[..., Any]]] = field(default_factory=dict)
    _ids: Any = field(default_factory=lambda: itertools.count(1))

    def add_listener(self, event: str, callback: Callable[..., Any]) -> int:
        handle = next(self._ids)
        self._listeners[handle] = (event, callback)
        return handle

    def remove_listener(self, handle: int) -> None:
        self._listeners.pop(handle, None)

    def listener_count(self, event: str | None = None) -> int:
        return sum(1 for name, _ in self._listeners.values() if event is None or name == event)

    def dispatch(self, event: str, *args: Any) -> list[Any]:
        """Call every listener registered for ``event`` and return their results."""
        # Copy first; listeners add and remove listeners while running.
        callbacks = [callback for name, callback in list(self._listeners.values()) if name == event]
        logger.debug(f"Dispatching {event} to {len(callbacks)} listener(s)")
        return [callback(*args) for callback in callbacks]

    def set_live_path(self, points: Sequence[GeoPoint]) -> None:
        self.live_path = list(points)

    def add_polyline(self, points: Sequence[GeoPoint]) -> int:
        handle = next(self._ids)
        self.polylines[handle] = tuple(points)
        return handle

    def add_marker(self, point: GeoPoint, title: str) -> int:
        handle = next(self._ids)
        self.markers[handle] = (point, title)
        return handle

    def remove_overlay(self, handle: int) -> None:
        self.polylines.pop(handle, None)
        self.markers.pop(handle, None)

    def set_viewport(self, center: GeoPoint, zoom: int) -> None:
        self.center = center
        self.zoom = zoom


async def dispatch_event(widget: HeadlessMapWidget, event: str, *args: Any) -> list[Any]:
    """Dispatch an event and await coroutine listeners.

    Listeners that return a task (live distance updates) are left running.
    """
    results = []
    for result in widget.dispatch(event, *args):
        if asyncio.iscoroutine(result):
            result = await result
        results.append(result)
    return results
