"""Domain models for drawn routes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence


class DrawingStatus(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


class DistanceProvenance(str, Enum):
    ROUTED = "routed"
    STRAIGHT_LINE = "straight-line"


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A latitude/longitude pair in degrees."""

    lat: float
    lng: float

    def as_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


def format_distance_km(meters: float) -> str:
    """Render a distance in meters as the ``"<km> km"`` display string."""

    return f"{meters / 1000.0:.2f} km"


@dataclass(frozen=True, slots=True)
class DistanceEstimate:
    meters: float
    provenance: DistanceProvenance = DistanceProvenance.STRAIGHT_LINE

    def __post_init__(self) -> None:
        if self.meters < 0:
            raise ValueError(f"Distance cannot be negative: {self.meters}")

    @property
    def display(self) -> str:
        return format_distance_km(self.meters)


ZERO_DISTANCE = DistanceEstimate(0.0)


@dataclass(frozen=True, slots=True)
class RouteRecord:
    """A committed route. The path is stored as a tuple and never changes."""

    path: tuple[GeoPoint, ...]
    distance: DistanceEstimate
    start_point: GeoPoint
    end_point: GeoPoint

    @classmethod
    def from_path(cls, path: Sequence[GeoPoint], distance: DistanceEstimate) -> "RouteRecord":
        if not path:
            raise ValueError("A route needs at least one point.")
        frozen = tuple(path)
        return cls(path=frozen, distance=distance, start_point=frozen[0], end_point=frozen[-1])
