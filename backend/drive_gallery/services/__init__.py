"""
Service layer for gallery logic.
"""
from drive_gallery.services.gallery_service import GalleryService

__all__ = ["GalleryService"]
