"""HTTP client for interacting with OSRM services."""

from __future__ import annotations

import asyncio
import logging

import httpx

from ...config import Settings, settings as default_settings
from ...errors import RoutingLookupFailed
from ...models.domain import GeoPoint

logger = logging.getLogger(__name__)


def format_coordinates(points: list[GeoPoint]) -> str:
    """OSRM expects ``lon,lat;lon,lat``."""
    return ";".join(f"{point.lng},{point.lat}" for point in points)


class OSRMClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        config: Settings | None = None,
    ) -> None:
        config = config or default_settings
        self.base_url = (base_url or config.osrm_base_url).rstrip("/")
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.profile = profile or config.osrm_profile
        self.api_key = api_key if api_key is not None else config.routing_api_key
        self.timeout = timeout if timeout is not None else config.osrm_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else config.osrm_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else config.osrm_backoff_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=5.0),
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def route_distance(self, origin: GeoPoint, destination: GeoPoint) -> float:
        """Driving distance in meters between two points.

        Raises:
            RoutingLookupFailed: on a non-``Ok`` response, HTTP error, network
                failure or timeout once retries are exhausted.
        """
        url = f"{self.base_url}/route/v1/{self.profile}/{format_coordinates([origin, destination])}"
        params = {
            "overview": "false",  # distance only, no geometry
            "alternatives": "false",
            "steps": "false",
        }
        if self.api_key:
            params["key"] = self.api_key

        client = self._get_client()
        attempt = 0
        while True:
            try:
                response = await client.get(url, params=params)
                response.raise_for_status()
                data = response.json()
                if data.get("code") != "Ok":
                    # OSRM answers NoRoute/InvalidQuery with a body; retrying won't help
                    raise RoutingLookupFailed(
                        f"OSRM route request failed: {data.get('message', data.get('code', 'Unknown OSRM route error'))}"
                    )
                routes = data.get("routes") or []
                if not routes or routes[0].get("distance") is None:
                    raise RoutingLookupFailed("OSRM response contained no route distance.")
                return float(routes[0]["distance"])
            except RoutingLookupFailed:
                raise
            except httpx.HTTPStatusError as e:
                attempt += 1
                if attempt > self.max_retries:
                    raise RoutingLookupFailed(
                        f"OSRM returned HTTP {e.response.status_code} for {origin} -> {destination}"
                    ) from e
                await asyncio.sleep(self.backoff_seconds * attempt)
            except httpx.TimeoutException as e:
                attempt += 1
                if attempt > self.max_retries:
                    logger.warning(f"OSRM route request timed out after {self.max_retries} retries: {e}")
                    raise RoutingLookupFailed(f"OSRM route request timed out: {e}") from e
                wait_time = self.backoff_seconds * (2 ** (attempt - 1))  # Exponential backoff
                logger.debug(f"OSRM route timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                await asyncio.sleep(wait_time)
            except (httpx.HTTPError, OSError) as e:
                attempt += 1
                if attempt > self.max_retries:
                    raise RoutingLookupFailed(f"Failed to connect to OSRM service at {self.base_url}: {e}") from e
                wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                logger.debug(f"OSRM network error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                await asyncio.sleep(wait_time)
            except ValueError as e:
                # Body was not JSON
                raise RoutingLookupFailed(f"OSRM returned an unreadable response: {e}") from e


async def check_health(
    base_url: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    config: Settings | None = None,
) -> bool:
    """Check OSRM service health by routing between two fixed points.

    Public OSRM endpoints may not have a /health endpoint, so we test
    connectivity with a minimal route request using the configured profile
    and API key.
    """
    config = config or default_settings
    base = (base_url or config.osrm_base_url).rstrip("/")
    if not base:
        return False
    params = {"overview": "false"}
    if config.routing_api_key:
        params["key"] = config.routing_api_key
    try:
        # Two points in lower Manhattan
        test_coords = "-74.006,40.7128;-74.0,40.72"
        url = f"{base}/route/v1/{config.osrm_profile}/{test_coords}"
        async with httpx.AsyncClient(timeout=5.0, transport=transport) as client:
            response = await client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        return data.get("code") == "Ok"
    except (httpx.HTTPError, ValueError):
        return False
