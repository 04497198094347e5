"""
Gallery service: folder resolution and reshaping of Drive records.
"""
from typing import Iterable, List, Optional

from drive_gallery.errors import BadRequest, ServiceUnavailable
from drive_gallery.schemas.image import DriveFile, ImageDescriptor
from drive_gallery.storage.drive_client import DriveClient

IMAGE_ROUTE_PREFIX = "/api/image"


class GalleryService:
    """Stateless helpers shared by the gallery endpoints."""

    @staticmethod
    def require_client(drive: Optional[DriveClient], message: str = "Drive client not configured") -> DriveClient:
        """Return the Drive client or fail if credentials were never loaded."""
        if drive is None:
            raise ServiceUnavailable(message)
        return drive

    @staticmethod
    def resolve_folder(requested: Optional[str], default: Optional[str], message: str) -> str:
        """Request-supplied folder ID wins over the configured default."""
        folder_id = (requested or "").strip() or default
        if not folder_id:
            raise BadRequest(message)
        return folder_id

    @staticmethod
    def image_url(file_id: str) -> str:
        return f"{IMAGE_ROUTE_PREFIX}/{file_id}"

    @classmethod
    def to_descriptor(cls, record: DriveFile) -> ImageDescriptor:
        url = cls.image_url(record.id)
        return ImageDescriptor(
            id=record.id,
            name=record.name,
            mime_type=record.mime_type,
            url=url,
            thumb=record.thumbnail_link or url,
        )

    @classmethod
    def to_descriptors(cls, records: Iterable[DriveFile]) -> List[ImageDescriptor]:
        return [cls.to_descriptor(record) for record in records]
