"""
FastAPI application entry point.
Builds the app, loads the Drive credential once and wires the routes.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from drive_gallery import __version__
from drive_gallery.api.router import build_api_router
from drive_gallery.auth.credentials import init_drive_client
from drive_gallery.config import Settings
from drive_gallery.errors import GalleryError, gallery_error_handler, unhandled_error_handler
from drive_gallery.middleware.metrics_middleware import MetricsMiddleware
from drive_gallery.utils.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.
    The Drive client is already built by create_app(); only log here.
    """
    settings: Settings = app.state.settings
    logger.info(
        f"Gallery server listening on port {settings.port} (proxying Drive)",
        extra={
            "event": "startup",
            "drive_configured": app.state.drive_client is not None,
            "upload_enabled": settings.enable_upload
        }
    )
    yield
    logger.info("Gallery server shutting down", extra={"event": "shutdown"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create the FastAPI application."""
    settings = settings or Settings()

    # Configure structured JSON logging
    configure_logging("drive-gallery", settings.log_level)

    app = FastAPI(
        title="Drive Gallery API",
        description="Lists and streams images from a Google Drive folder",
        version=__version__,
        lifespan=lifespan
    )

    # Resolved once; None means "not configured" and the service still starts
    app.state.settings = settings
    app.state.drive_client = init_drive_client(settings)

    # CORS middleware (for the gallery front end)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Metrics middleware (must be after CORS to track all requests)
    app.add_middleware(MetricsMiddleware)

    app.add_exception_handler(GalleryError, gallery_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(build_api_router(settings.enable_upload), prefix="/api")

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "Drive Gallery API",
            "version": __version__,
            "environment": settings.environment
        }

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(
            content=generate_latest(),
            media_type=CONTENT_TYPE_LATEST
        )

    return app


def run() -> None:
    """Run the API with uvicorn (console script `drive-gallery`)."""
    settings = Settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
