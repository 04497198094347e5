"""
Pydantic schemas for Drive records and gallery responses.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class DriveFile(BaseModel):
    """File resource as returned by the Drive v3 API (subset of fields)."""
    id: str
    name: str
    mime_type: Optional[str] = Field(None, alias="mimeType")
    thumbnail_link: Optional[str] = Field(None, alias="thumbnailLink")
    web_view_link: Optional[str] = Field(None, alias="webViewLink")
    icon_link: Optional[str] = Field(None, alias="iconLink")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ImageDescriptor(BaseModel):
    """Client-facing image entry; links route back through this service."""
    id: str = Field(..., description="Drive file ID")
    name: str = Field(..., description="File name")
    mime_type: str = Field(..., alias="mimeType", description="MIME type (always image/*)")
    url: str = Field(..., description="Proxy URL serving the full image")
    thumb: str = Field(..., description="Drive thumbnail link, or the proxy URL")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "1AbCdEfGhIjKlMnOpQrStUvWxYz",
                "name": "sunset.png",
                "mimeType": "image/png",
                "url": "/api/image/1AbCdEfGhIjKlMnOpQrStUvWxYz",
                "thumb": "https://lh3.googleusercontent.com/drive-storage/..."
            }
        }
    )


class UploadedFile(BaseModel):
    """File created in Drive by the upload endpoint."""
    id: str
    name: str


class UploadResponse(BaseModel):
    """Response schema for POST /api/upload."""
    ok: bool = True
    file: UploadedFile

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "ok": True,
                "file": {"id": "1AbCdEfGhIjKlMnOpQrStUvWxYz", "name": "sunset.png"}
            }
        }
    )


class HealthResponse(BaseModel):
    """Response schema for GET /api/health."""
    ok: bool = True
    drive_configured: bool = Field(..., alias="driveConfigured")

    model_config = ConfigDict(populate_by_name=True)
