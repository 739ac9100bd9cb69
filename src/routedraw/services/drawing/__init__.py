"""Route drawing session services."""

from .collection import RouteCollection
from .controller import MapController
from .session import DrawingSession
from .widget import HeadlessMapWidget, MapWidget

__all__ = [
    "DrawingSession",
    "HeadlessMapWidget",
    "MapController",
    "MapWidget",
    "RouteCollection",
]
