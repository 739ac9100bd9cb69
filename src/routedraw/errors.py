"""Error types raised by the drawing core."""

from __future__ import annotations


class RouteDrawError(Exception):
    """Base class for route drawing errors."""


class ConfigurationMissing(RouteDrawError):
    """Raised when the routing API key is absent at initialization."""


class RoutingLookupFailed(RouteDrawError):
    """The routing service could not produce a distance for a segment."""


class GeocodingFailed(RouteDrawError):
    """No location could be found for a search query."""

    user_message = "Location not found. Please try again."


class DegenerateRoute(RouteDrawError):
    """A committed path has a single point or zero length."""


class SessionNotActive(RouteDrawError):
    """A commit was requested while no route is being drawn."""
