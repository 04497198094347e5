"""
Storage module for the Google Drive v3 API.

The gallery never hands Drive links or credentials to clients: listings
point back at this service and file bytes are proxied through it.
"""
from drive_gallery.storage.drive_client import DriveClient, MediaStream

__all__ = ["DriveClient", "MediaStream"]
