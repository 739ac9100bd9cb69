"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root(request: Request) -> dict:
    """Simple health check endpoint that doesn't call any external service."""
    controller = request.app.state.controller
    return {
        "status": "ok",
        "map_initialized": controller.initialized,
        "error": getattr(request.app.state, "init_error", None),
    }


@router.get("/health/routing", status_code=status.HTTP_200_OK)
async def health_routing(request: Request) -> dict:
    """Check routing service reachability."""
    from ...services.routing.osrm_client import check_health

    config = request.app.state.controller.config
    healthy = await check_health(config.osrm_base_url, config=config)
    return {"service": "osrm", "healthy": healthy, "base_url": config.osrm_base_url}
