"""Map drawing endpoints.

The browser forwards pointer and key events here; the controller reacts
through the listeners it registered on the headless map widget.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ...errors import ConfigurationMissing, GeocodingFailed, SessionNotActive
from ...models.domain import RouteRecord
from ...schemas.drawing import (
    DistanceModel,
    EventResultModel,
    GeocodeCandidateModel,
    KeyEvent,
    MapStateModel,
    OverlayModel,
    PointerEvent,
    PointModel,
    RouteRecordModel,
    SearchRequest,
    SearchResponse,
    SelectedRouteModel,
    ViewportModel,
)
from ...services.drawing.controller import MapController
from ...services.drawing.widget import KEY_DOWN, POINTER_DOWN, POINTER_MOVE, dispatch_event

router = APIRouter(prefix="/map", tags=["map"])
logger = logging.getLogger(__name__)


def get_controller(request: Request) -> MapController:
    controller: MapController = request.app.state.controller
    if not controller.initialized:
        detail = getattr(request.app.state, "init_error", None) or "Map is not initialized."
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
    return controller


def _committed_model(controller: MapController, record: RouteRecord | None) -> RouteRecordModel | None:
    if record is None:
        return None
    return RouteRecordModel.from_record(len(controller.routes), record)


def _event_result(controller: MapController, results: list) -> EventResultModel:
    committed = next((result for result in results if isinstance(result, RouteRecord)), None)
    return EventResultModel(
        status=controller.session.status.value,
        committed=_committed_model(controller, committed),
    )


def _selected_route(controller: MapController) -> SelectedRouteModel | None:
    session = controller.session
    if session.is_active and session.start_point is not None:
        return SelectedRouteModel(
            start_point=PointModel.from_point(session.start_point),
            end_point=None,
            distance=session.live_distance.display,
        )
    record = controller.last_record
    if record is not None:
        return SelectedRouteModel(
            start_point=PointModel.from_point(record.start_point),
            end_point=PointModel.from_point(record.end_point),
            distance=record.distance.display,
        )
    return None


@router.get("/state", response_model=MapStateModel)
def map_state(controller: MapController = Depends(get_controller)) -> MapStateModel:
    widget = controller.widget
    return MapStateModel(
        status=controller.session.status.value,
        live_path=[PointModel.from_point(point) for point in controller.session.path],
        live_distance=DistanceModel.from_estimate(controller.live_distance),
        selected_route=_selected_route(controller),
        route_count=len(controller.routes),
        overlays=[OverlayModel(handle=entry.handle, kind=entry.kind.value) for entry in controller.overlays.entries()],
        viewport=ViewportModel(center=PointModel.from_point(widget.center), zoom=widget.zoom),
    )


@router.post("/pointer-down", response_model=EventResultModel)
async def pointer_down(event: PointerEvent, controller: MapController = Depends(get_controller)) -> EventResultModel:
    results = await dispatch_event(controller.widget, POINTER_DOWN, event.to_point(), event.button)
    return _event_result(controller, results)


@router.post("/pointer-move", response_model=EventResultModel)
async def pointer_move(event: PointerEvent, controller: MapController = Depends(get_controller)) -> EventResultModel:
    # Ignored while idle: the move listener only exists during drawing.
    results = await dispatch_event(controller.widget, POINTER_MOVE, event.to_point())
    return _event_result(controller, results)


@router.post("/key", response_model=EventResultModel)
async def key_down(event: KeyEvent, controller: MapController = Depends(get_controller)) -> EventResultModel:
    results = await dispatch_event(controller.widget, KEY_DOWN, event.key)
    return _event_result(controller, results)


@router.post("/commit", response_model=EventResultModel)
async def commit(controller: MapController = Depends(get_controller)) -> EventResultModel:
    try:
        record = await controller.commit()
    except SessionNotActive as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return EventResultModel(status=controller.session.status.value, committed=_committed_model(controller, record))


@router.post("/clear", response_model=EventResultModel)
def clear(controller: MapController = Depends(get_controller)) -> EventResultModel:
    controller.clear()
    return EventResultModel(status=controller.session.status.value)


@router.post("/fit", response_model=ViewportModel)
def fit(controller: MapController = Depends(get_controller)) -> ViewportModel:
    center = controller.fit_viewport()
    if center is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No routes have been drawn yet.")
    return ViewportModel(center=PointModel.from_point(center), zoom=controller.widget.zoom)


@router.post("/search", response_model=SearchResponse)
async def search(payload: SearchRequest, controller: MapController = Depends(get_controller)) -> SearchResponse:
    try:
        candidates = await controller.search(payload.query)
    except GeocodingFailed as exc:
        logger.info(f"Search for '{payload.query}' failed: {exc}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=GeocodingFailed.user_message) from exc
    return SearchResponse(
        results=[
            GeocodeCandidateModel(point=PointModel.from_point(c.point), formatted_address=c.formatted_address)
            for c in candidates
        ]
    )


@router.get("/routes", response_model=list[RouteRecordModel])
def list_routes(controller: MapController = Depends(get_controller)) -> list[RouteRecordModel]:
    return [RouteRecordModel.from_record(index, record) for index, record in enumerate(controller.routes.all(), start=1)]


@router.post("/init", response_model=MapStateModel)
def init_map(request: Request) -> MapStateModel:
    """Retry initialization, e.g. after the API key was provided."""
    controller: MapController = request.app.state.controller
    try:
        controller.init()
    except ConfigurationMissing as exc:
        request.app.state.init_error = str(exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    request.app.state.init_error = None
    return map_state(controller)
