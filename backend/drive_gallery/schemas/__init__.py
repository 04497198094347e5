"""
Pydantic schemas for request/response validation.
"""
from drive_gallery.schemas.image import (
    DriveFile,
    ImageDescriptor,
    UploadedFile,
    UploadResponse,
    HealthResponse,
)

__all__ = [
    "DriveFile",
    "ImageDescriptor",
    "UploadedFile",
    "UploadResponse",
    "HealthResponse",
]
