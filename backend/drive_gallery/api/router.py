"""
API router aggregator.
Includes all route modules.
"""
from fastapi import APIRouter
from drive_gallery.api import health, images, uploads


def build_api_router(enable_upload: bool = False) -> APIRouter:
    """
    Assemble the /api routes.

    The upload route only exists when enable_upload is set; otherwise
    POST /api/upload is unknown to the router.
    """
    api_router = APIRouter()

    api_router.include_router(health.router, prefix="/health", tags=["health"])
    api_router.include_router(images.router, tags=["images"])
    if enable_upload:
        api_router.include_router(uploads.router, tags=["uploads"])

    return api_router
