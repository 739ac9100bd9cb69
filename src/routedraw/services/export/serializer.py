"""Plain, GTFS-style and GeoJSON exports of committed routes."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Sequence

from shapely.geometry import mapping

from ...config import Settings, settings as default_settings
from ...models.domain import RouteRecord, format_distance_km
from ...persistence.filesystem import FileStorage
from ..geospatial import path_geometry

EXPORT_FORMATS = ("plain", "gtfs", "geojson")
PLAIN_FILENAME = "drawn-routes.json"
BUS_ROUTE_TYPE = 3


@dataclass(frozen=True)
class ExportDocument:
    filename: str
    payload: Dict[str, Any]
    media_type: str = "application/json"

    def to_json(self) -> str:
        return json.dumps(self.payload, indent=2, ensure_ascii=False)


def to_plain(records: Sequence[RouteRecord]) -> Dict[str, Any]:
    return {
        "paths": [
            {
                "points": [point.as_dict() for point in record.path],
                "distance": format_distance_km(record.distance.meters),
            }
            for record in records
        ]
    }


def to_gtfs(records: Sequence[RouteRecord], config: Settings | None = None) -> Dict[str, Any]:
    """Build the GTFS-like bundle: one agency, then a route and a shape per record.

    Identifiers come from the 1-based position of each record, so ``ROUTE_1``
    is always the first route committed.
    """
    config = config or default_settings
    routes: List[Dict[str, Any]] = []
    shapes: List[Dict[str, Any]] = []
    for index, record in enumerate(records, start=1):
        routes.append(
            {
                "route_id": f"ROUTE_{index}",
                "route_short_name": f"R{index}",
                "route_long_name": f"Route {index}",
                "route_type": BUS_ROUTE_TYPE,
                "route_color": config.route_color,
            }
        )
        shapes.append(
            {
                "shape_id": f"SHAPE_{index}",
                "distance": format_distance_km(record.distance.meters),
                "points": [
                    {
                        "shape_pt_lat": point.lat,
                        "shape_pt_lon": point.lng,
                        "shape_pt_sequence": sequence,
                    }
                    for sequence, point in enumerate(record.path, start=1)
                ],
            }
        )
    return {
        "agency": {
            "agency_id": config.agency_id,
            "agency_name": config.agency_name,
            "agency_url": config.agency_url,
            "agency_timezone": config.agency_timezone,
        },
        "routes": routes,
        "shapes": shapes,
    }


def to_geojson(records: Sequence[RouteRecord]) -> Dict[str, Any]:
    features = []
    for index, record in enumerate(records, start=1):
        features.append(
            {
                "type": "Feature",
                "geometry": mapping(path_geometry(record.path)),
                "properties": {
                    "route_id": f"ROUTE_{index}",
                    "distance": format_distance_km(record.distance.meters),
                    "provenance": record.distance.provenance.value,
                },
            }
        )
    return {"type": "FeatureCollection", "features": features}


def serialize(
    records: Sequence[RouteRecord],
    fmt: str,
    *,
    config: Settings | None = None,
    today: date | None = None,
) -> ExportDocument:
    """Convert committed routes into an export document with a suggested filename."""
    stamp = (today or date.today()).isoformat()
    if fmt == "plain":
        return ExportDocument(PLAIN_FILENAME, to_plain(records))
    if fmt == "gtfs":
        return ExportDocument(f"gtfs-routes-{stamp}.json", to_gtfs(records, config))
    if fmt == "geojson":
        return ExportDocument(f"drawn-routes-{stamp}.geojson", to_geojson(records), "application/geo+json")
    raise ValueError(f"Unknown export format '{fmt}'. Expected one of: {', '.join(EXPORT_FORMATS)}")


def save_export(document: ExportDocument, storage: FileStorage | None = None) -> Path:
    """Write an export document under the ``exports`` directory of the data root."""
    storage = storage or FileStorage()
    path = storage.export_root / document.filename
    storage.write_json(path, document.payload)
    return path
