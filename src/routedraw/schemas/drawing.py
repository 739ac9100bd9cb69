"""Map drawing request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import DistanceEstimate, GeoPoint, RouteRecord


class PointModel(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    @classmethod
    def from_point(cls, point: GeoPoint) -> "PointModel":
        return cls(lat=point.lat, lng=point.lng)

    def to_point(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lng=self.lng)


class PointerEvent(PointModel):
    button: int = Field(default=0, ge=0, description="Mouse button; 0 is the primary button.")


class KeyEvent(BaseModel):
    key: str


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1)


class DistanceModel(BaseModel):
    meters: float
    display: str
    provenance: str

    @classmethod
    def from_estimate(cls, estimate: DistanceEstimate) -> "DistanceModel":
        return cls(meters=estimate.meters, display=estimate.display, provenance=estimate.provenance.value)


class RouteRecordModel(BaseModel):
    route_id: str
    start_point: PointModel
    end_point: PointModel
    distance: DistanceModel
    points: List[PointModel]

    @classmethod
    def from_record(cls, index: int, record: RouteRecord) -> "RouteRecordModel":
        return cls(
            route_id=f"ROUTE_{index}",
            start_point=PointModel.from_point(record.start_point),
            end_point=PointModel.from_point(record.end_point),
            distance=DistanceModel.from_estimate(record.distance),
            points=[PointModel.from_point(point) for point in record.path],
        )


class SelectedRouteModel(BaseModel):
    """Details card for the route being drawn or the last committed one."""

    start_point: PointModel
    end_point: Optional[PointModel] = None
    distance: str


class OverlayModel(BaseModel):
    handle: int
    kind: str


class ViewportModel(BaseModel):
    center: PointModel
    zoom: int


class MapStateModel(BaseModel):
    status: str
    live_path: List[PointModel]
    live_distance: DistanceModel
    selected_route: Optional[SelectedRouteModel] = None
    route_count: int
    overlays: List[OverlayModel]
    viewport: ViewportModel


class EventResultModel(BaseModel):
    status: str
    committed: Optional[RouteRecordModel] = None


class GeocodeCandidateModel(BaseModel):
    point: PointModel
    formatted_address: str


class SearchResponse(BaseModel):
    results: List[GeocodeCandidateModel]
