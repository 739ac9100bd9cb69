"""Address search against a Nominatim-compatible geocoder."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from ..config import Settings, settings as default_settings
from ..errors import GeocodingFailed
from ..models.domain import GeoPoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GeocodeCandidate:
    point: GeoPoint
    formatted_address: str


class NominatimGeocoder:
    def __init__(
        self,
        base_url: str | None = None,
        limit: int | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        config: Settings | None = None,
    ) -> None:
        config = config or default_settings
        self.base_url = (base_url or config.geocoder_base_url).rstrip("/")
        self.limit = limit or config.geocoder_result_limit
        self.timeout = timeout or config.geocoder_timeout_seconds
        self.user_agent = config.app_name
        self._transport = transport

    async def geocode(self, query: str) -> list[GeocodeCandidate]:
        """Return candidate locations for a free-text address, best match first.

        Raises:
            GeocodingFailed: if the query is blank, the service errors, or
                nothing matches.
        """
        query = query.strip()
        if not query:
            raise GeocodingFailed("Search query is empty.")

        params = {"q": query, "format": "jsonv2", "limit": str(self.limit)}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                headers={"User-Agent": self.user_agent},
            ) as client:
                response = await client.get(f"{self.base_url}/search", params=params)
                response.raise_for_status()
                results = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(f"Geocoding failed for '{query}': {exc}")
            raise GeocodingFailed(f"Geocoding request failed: {exc}") from exc

        candidates = []
        for item in results if isinstance(results, list) else []:
            try:
                point = GeoPoint(lat=float(item["lat"]), lng=float(item["lon"]))
            except (KeyError, TypeError, ValueError):
                continue
            candidates.append(GeocodeCandidate(point=point, formatted_address=item.get("display_name", query)))

        if not candidates:
            raise GeocodingFailed(f"No results for '{query}'.")
        return candidates
