"""
FastAPI dependencies shared by the API routes.

The Drive client and settings are built once in create_app() and kept on
app.state; tests replace them through app.dependency_overrides.
"""
from typing import Optional

from fastapi import Request

from drive_gallery.config import Settings
from drive_gallery.storage.drive_client import DriveClient


def get_drive_client(request: Request) -> Optional[DriveClient]:
    """Drive client for this app, or None when credentials are not configured."""
    return request.app.state.drive_client


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with."""
    return request.app.state.settings
