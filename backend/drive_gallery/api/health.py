"""
Health check endpoint.
Reports liveness and whether the Drive client is configured.
"""
from typing import Optional

from fastapi import APIRouter, Depends

from drive_gallery.api.dependencies import get_drive_client
from drive_gallery.schemas.image import HealthResponse
from drive_gallery.storage.drive_client import DriveClient

router = APIRouter()


@router.get("", response_model=HealthResponse)
async def health_check(drive: Optional[DriveClient] = Depends(get_drive_client)):
    """
    Health check endpoint.
    Never fails; driveConfigured is false when no credential was loaded.
    """
    return HealthResponse(ok=True, drive_configured=drive is not None)
