"""Routed distance estimates with straight-line fallback."""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

from ...errors import RoutingLookupFailed
from ...models.domain import DistanceEstimate, DistanceProvenance, GeoPoint
from .. import geospatial

logger = logging.getLogger(__name__)


class RoutingBackend(Protocol):
    async def route_distance(self, origin: GeoPoint, destination: GeoPoint) -> float: ...


def straight_line_estimate(path: Sequence[GeoPoint]) -> DistanceEstimate:
    return DistanceEstimate(geospatial.path_distance(path), DistanceProvenance.STRAIGHT_LINE)


class RouteFindingAdapter:
    """Turns routing lookups into distance estimates.

    Segments are looked up one after another so the routing provider never
    sees concurrent requests from a single path. If any lookup fails, the whole
    path is measured with great-circle distances instead, so an estimate is
    never a mix of routed and straight-line segments.
    """

    def __init__(self, backend: RoutingBackend | None, *, enabled: bool = True) -> None:
        self.backend = backend
        self.enabled = enabled and backend is not None

    async def segment_distance(self, a: GeoPoint, b: GeoPoint) -> float:
        if not self.enabled:
            raise RoutingLookupFailed("Routed distance is disabled.")
        return await self.backend.route_distance(a, b)

    async def path_distance(self, path: Sequence[GeoPoint]) -> DistanceEstimate:
        if len(path) < 2 or not self.enabled:
            return straight_line_estimate(path)

        snapshot = tuple(path)
        total = 0.0
        try:
            for i in range(len(snapshot) - 1):
                total += await self.segment_distance(snapshot[i], snapshot[i + 1])
        except RoutingLookupFailed as exc:
            logger.warning(f"Route calculation failed ({exc}); using straight-line distance for {len(snapshot)} points")
            return straight_line_estimate(snapshot)
        return DistanceEstimate(total, DistanceProvenance.ROUTED)
