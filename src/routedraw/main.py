"""FastAPI application entry point."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import drawing, export, health
from .config import Settings, settings as default_settings
from .errors import ConfigurationMissing
from .services.drawing.controller import MapController
from .services.drawing.widget import HeadlessMapWidget


def create_app(config: Settings | None = None, controller: MapController | None = None) -> FastAPI:
    config = config or default_settings
    controller = controller or MapController(HeadlessMapWidget(), config=config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.controller.teardown()

    app = FastAPI(title=config.app_name, lifespan=lifespan)
    app.state.controller = controller
    app.state.init_error = None
    try:
        controller.init()
    except ConfigurationMissing as exc:
        # Reported once; map endpoints answer 503 until /map/init succeeds.
        app.state.init_error = str(exc)

    if config.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(config.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Root endpoint for diagnostics
    @app.get("/")
    def root():
        return {
            "service": config.app_name,
            "status": "running" if controller.initialized else "unconfigured",
            "api_prefix": config.api_prefix,
            "health": f"{config.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=config.api_prefix)
    app.include_router(drawing.router, prefix=config.api_prefix)
    app.include_router(export.router, prefix=config.api_prefix)
    return app


app = create_app()
