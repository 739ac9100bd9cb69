"""Routing services."""

from .adapter import RouteFindingAdapter, straight_line_estimate
from .osrm_client import OSRMClient

__all__ = [
    "OSRMClient",
    "RouteFindingAdapter",
    "straight_line_estimate",
]
