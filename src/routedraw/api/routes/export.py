"""Route export endpoints."""

from __future__ import annotations

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response

from ...services.drawing.controller import MapController
from ...services.export.serializer import save_export
from ...persistence.filesystem import FileStorage
from .drawing import get_controller

router = APIRouter(prefix="/exports", tags=["exports"])
logger = logging.getLogger(__name__)


@router.get("", status_code=status.HTTP_200_OK)
def export_routes(
    format: Optional[Literal["plain", "gtfs", "geojson"]] = Query(
        default=None, description="Export shape; defaults to the configured format."
    ),
    persist: bool = Query(default=False, description="Also write the file under the data root."),
    controller: MapController = Depends(get_controller),
) -> Response:
    """Download the committed routes as a JSON document."""
    document = controller.export(format)
    headers = {"Content-Disposition": f'attachment; filename="{document.filename}"'}
    if persist:
        try:
            path = save_export(document, FileStorage(root=controller.config.data_root))
        except OSError as exc:
            logger.exception(f"Error saving export {document.filename}: {exc}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to save export: {str(exc)}",
            ) from exc
        headers["X-Export-Path"] = str(path)
    return Response(
        content=document.to_json().encode("utf-8"),
        media_type=f"{document.media_type}; charset=utf-8",
        headers=headers,
    )
