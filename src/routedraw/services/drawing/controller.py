"""Map controller: owns the drawing session, committed routes and map overlays."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from ...config import Settings, settings as default_settings
from ...errors import ConfigurationMissing, DegenerateRoute, GeocodingFailed
from ...models.domain import DistanceEstimate, GeoPoint, RouteRecord
from .. import geospatial
from ..export.serializer import ExportDocument, serialize
from ..geocoding import GeocodeCandidate, NominatimGeocoder
from ..routing.adapter import RouteFindingAdapter
from ..routing.osrm_client import OSRMClient
from .collection import RouteCollection
from .overlays import OverlayKind, OverlayRegistry
from .session import DrawingSession
from .widget import KEY_DOWN, POINTER_DOWN, POINTER_MOVE, MapWidget

logger = logging.getLogger(__name__)

PRIMARY_BUTTON = 0
COMMIT_KEY = "Enter"


class MapController:
    """Everything one map view needs, with an explicit ``init``/``teardown`` lifecycle.

    Pointer and key events arrive through listeners registered on the map
    widget. All state changes happen inside those handlers on the event loop;
    the only suspension points are distance lookups, so no locking is needed.
    """

    def __init__(
        self,
        widget: MapWidget,
        adapter: RouteFindingAdapter | None = None,
        geocoder: NominatimGeocoder | None = None,
        config: Settings | None = None,
    ) -> None:
        self.widget = widget
        self.adapter = adapter
        self.geocoder = geocoder
        self.config = config or default_settings
        self.session = DrawingSession()
        self.routes = RouteCollection()
        self.overlays = OverlayRegistry()
        self.last_record: RouteRecord | None = None
        self.initialized = False
        self._listeners: list[int] = []
        self._move_listener: int | None = None
        self._pending: set[asyncio.Task] = set()
        self._owned_backend: OSRMClient | None = None
        # Bumped by clear() so commits finishing afterwards are dropped.
        self._epoch = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def init(self) -> None:
        if self.initialized:
            return
        if not self.config.routing_api_key:
            logger.error("Routing API key is missing; map initialization skipped.")
            raise ConfigurationMissing("Routing API key is missing. Set ROUTEDRAW_ROUTING_API_KEY.")

        if self.adapter is None:
            backend = None
            if self.config.use_routed_distance:
                backend = self._owned_backend = OSRMClient(config=self.config)
            self.adapter = RouteFindingAdapter(backend, enabled=self.config.use_routed_distance)
        if self.geocoder is None and self.config.enable_geocoding:
            self.geocoder = NominatimGeocoder(config=self.config)

        lat, lng = self.config.default_center
        self.widget.set_viewport(GeoPoint(lat, lng), self.config.default_zoom)
        self.widget.set_live_path([])
        self._listeners = [
            self.widget.add_listener(POINTER_DOWN, self.handle_pointer_down),
            self.widget.add_listener(KEY_DOWN, self.handle_key),
        ]
        self.initialized = True
        logger.info(
            f"Map controller initialized (commit trigger: {self.config.commit_trigger}, "
            f"routed distance: {self.adapter.enabled})"
        )

    async def teardown(self) -> None:
        self._detach_move_listener()
        for handle in self._listeners:
            self.widget.remove_listener(handle)
        self._listeners = []
        self.session.cancel()
        # Live updates may still hold the routing client.
        await self.wait_for_pending()
        if self._owned_backend is not None:
            await self._owned_backend.aclose()
            self._owned_backend = None
        self.initialized = False
        logger.info("Map controller torn down")

    def _ensure_ready(self) -> None:
        if not self.initialized:
            raise ConfigurationMissing("Map is not initialized.")

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------
    async def handle_pointer_down(self, point: GeoPoint, button: int = PRIMARY_BUTTON) -> RouteRecord | None:
        self._ensure_ready()
        if button != PRIMARY_BUTTON:
            return None
        if not self.session.is_active:
            self._start(point)
            return None
        if self.config.commit_trigger == "pointer":
            return await self.commit()
        return None

    async def handle_key(self, key: str) -> RouteRecord | None:
        self._ensure_ready()
        if key == COMMIT_KEY and self.session.is_active and self.config.commit_trigger == "enter":
            return await self.commit()
        return None

    def handle_pointer_move(self, point: GeoPoint) -> asyncio.Task:
        """Append a vertex, redraw the live line and start measuring the new path."""
        path = self.session.extend(point)
        self.widget.set_live_path(path)
        task = asyncio.get_running_loop().create_task(self._refresh_distance(self.session.generation, path))
        self._pending.add(task)
        task.add_done_callback(self._on_refresh_done)
        return task

    def _start(self, point: GeoPoint) -> None:
        self.session.start(point)
        self.widget.set_live_path([point])
        self._move_listener = self.widget.add_listener(POINTER_MOVE, self.handle_pointer_move)

    def _detach_move_listener(self) -> None:
        if self._move_listener is not None:
            self.widget.remove_listener(self._move_listener)
            self._move_listener = None

    async def _refresh_distance(self, generation: int, path: tuple[GeoPoint, ...]) -> bool:
        estimate = await self.adapter.path_distance(path)
        return self.session.apply_distance(generation, len(path), estimate)

    def _on_refresh_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Live distance update failed: {task.exception()!r}")

    async def wait_for_pending(self) -> None:
        """Wait for in-flight live distance updates."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    async def commit(self) -> RouteRecord | None:
        """Finish the active route. Degenerate routes are dropped unless configured otherwise."""
        self._ensure_ready()
        self._detach_move_listener()
        path = self.session.finish()
        self.widget.set_live_path([])

        try:
            self._check_degenerate(path)
        except DegenerateRoute as exc:
            if not self.config.keep_degenerate_routes:
                logger.info(f"Discarding route: {exc}")
                return None

        epoch = self._epoch
        slot = self.routes.reserve()
        distance = await self.adapter.path_distance(path)
        if epoch != self._epoch:
            logger.info("Map was cleared while the route was being measured; route dropped")
            return None

        record = RouteRecord.from_path(path, distance)
        self.routes.fill(slot, record)
        self.overlays.register(OverlayKind.ROUTE, self.widget.add_polyline(record.path))
        self.last_record = record
        logger.info(
            f"Committed route in slot {slot + 1}: {len(record.path)} points, "
            f"{record.distance.display} ({record.distance.provenance.value})"
        )
        return record

    @staticmethod
    def _check_degenerate(path: Sequence[GeoPoint]) -> None:
        if len(path) < 2:
            raise DegenerateRoute("route has a single point")
        if geospatial.path_distance(path) == 0.0:
            raise DegenerateRoute("route has zero length")

    def clear(self) -> None:
        """Drop the route in progress, every committed route and every overlay."""
        self._ensure_ready()
        self._detach_move_listener()
        self.session.cancel()
        self.routes.clear()
        removed = self.overlays.remove_all(self.widget.remove_overlay)
        self.widget.set_live_path([])
        self.last_record = None
        self._epoch += 1
        logger.info(f"Map cleared ({removed} overlays removed)")

    async def search(self, query: str) -> list[GeocodeCandidate]:
        """Center the map on the best match for an address and mark it."""
        self._ensure_ready()
        if self.geocoder is None:
            raise GeocodingFailed("Geocoding is disabled.")
        candidates = await self.geocoder.geocode(query)
        best = candidates[0]
        self.widget.set_viewport(best.point, self.config.search_zoom)
        self.overlays.register(OverlayKind.MARKER, self.widget.add_marker(best.point, best.formatted_address))
        logger.info(f"Centered map on '{best.formatted_address}'")
        return candidates

    def fit_viewport(self) -> GeoPoint | None:
        """Center the map on the committed routes, keeping the zoom level."""
        self._ensure_ready()
        points = [point for record in self.routes.all() for point in record.path]
        if not points:
            return None
        south, west, north, east = geospatial.path_bounds(points)
        center = GeoPoint((south + north) / 2, (west + east) / 2)
        self.widget.set_viewport(center, getattr(self.widget, "zoom", self.config.default_zoom))
        return center

    def export(self, fmt: str | None = None) -> ExportDocument:
        self._ensure_ready()
        document = serialize(self.routes.all(), fmt or self.config.export_format, config=self.config)
        logger.info(f"Exported {len(self.routes)} route(s) as {document.filename}")
        return document

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def live_distance(self) -> DistanceEstimate:
        return self.session.live_distance

    @property
    def is_listening_for_moves(self) -> bool:
        return self._move_listener is not None
