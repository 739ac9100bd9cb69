"""State machine for the route currently being drawn."""

from __future__ import annotations

import logging

from ...errors import SessionNotActive
from ...models.domain import ZERO_DISTANCE, DistanceEstimate, DrawingStatus, GeoPoint

logger = logging.getLogger(__name__)


class DrawingSession:
    """A single in-progress route: Idle until started, Active until finished or cancelled.

    Distance updates arrive asynchronously and out of order. Each one carries
    the generation of the session it was computed for and the length of the
    path it measured; ``apply_distance`` keeps only results for the current
    generation whose path is at least as long as the last applied one, and
    never lowers the displayed distance.
    """

    def __init__(self) -> None:
        self.status = DrawingStatus.IDLE
        self.path: list[GeoPoint] = []
        self.start_point: GeoPoint | None = None
        self.live_distance: DistanceEstimate = ZERO_DISTANCE
        self.generation = 0
        self._applied_length = 0

    @property
    def is_active(self) -> bool:
        return self.status is DrawingStatus.ACTIVE

    def start(self, point: GeoPoint) -> None:
        if self.is_active:
            raise RuntimeError("A route is already being drawn.")
        self._reset()
        self.status = DrawingStatus.ACTIVE
        self.path = [point]
        self.start_point = point
        logger.debug(f"Started drawing at ({point.lat:.6f}, {point.lng:.6f})")

    def extend(self, point: GeoPoint) -> tuple[GeoPoint, ...]:
        """Append a point and return a snapshot of the path for measuring."""
        if not self.is_active:
            raise SessionNotActive("Cannot add points while idle.")
        self.path.append(point)
        return tuple(self.path)

    def apply_distance(self, generation: int, path_length: int, estimate: DistanceEstimate) -> bool:
        """Apply a resolved distance unless it is stale. Returns whether it was applied."""
        if not self.is_active or generation != self.generation:
            return False
        if path_length < self._applied_length:
            logger.debug(f"Discarding stale distance for {path_length} points (have {self._applied_length})")
            return False
        self._applied_length = path_length
        if estimate.meters < self.live_distance.meters:
            # A straight-line fallback can undercut an earlier routed figure.
            logger.debug(
                f"Keeping {self.live_distance.display} over lower {estimate.provenance.value} "
                f"estimate for {path_length} points"
            )
            return False
        self.live_distance = estimate
        return True

    def finish(self) -> tuple[GeoPoint, ...]:
        """Leave the Active state and hand over the drawn path."""
        if not self.is_active:
            raise SessionNotActive("No route is being drawn.")
        path = tuple(self.path)
        self._reset()
        return path

    def cancel(self) -> None:
        self._reset()

    def _reset(self) -> None:
        # A new generation makes every in-flight distance result stale.
        self.generation += 1
        self.status = DrawingStatus.IDLE
        self.path = []
        self.start_point = None
        self.live_distance = ZERO_DISTANCE
        self._applied_length = 0
