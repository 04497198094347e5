"""
Image endpoints.

- GET /images - list image files in a Drive folder
- GET /image/{file_id} - proxy a file's bytes from Drive

Clients never talk to Drive directly: every url/thumb in the listing points
back at the proxy endpoint (or at Drive's own thumbnail link).
"""
import logging
from typing import AsyncIterator, List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Path, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from drive_gallery.api.dependencies import get_app_settings, get_drive_client
from drive_gallery.config import Settings
from drive_gallery.errors import StreamError
from drive_gallery.schemas.image import ImageDescriptor
from drive_gallery.services.gallery_service import GalleryService
from drive_gallery.storage.drive_client import DEFAULT_MIME_TYPE, DriveClient, MediaStream

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/images", response_model=List[ImageDescriptor])
async def list_images(
    folder_id: Optional[str] = Query(None, alias="folderId", description="Drive folder ID (defaults to DRIVE_FOLDER_ID)"),
    drive: Optional[DriveClient] = Depends(get_drive_client),
    settings: Settings = Depends(get_app_settings)
):
    """
    List image files in a Drive folder.

    Returns at most LIST_PAGE_SIZE (200) entries; there is no pagination.
    An empty folder yields an empty list.
    """
    drive = GalleryService.require_client(drive, "Drive client not configured on server.")
    folder_id = GalleryService.resolve_folder(
        folder_id,
        settings.drive_folder_id,
        "folderId is required (or set DRIVE_FOLDER_ID in .env)"
    )

    records = await run_in_threadpool(drive.list_images, folder_id)
    return GalleryService.to_descriptors(records)


async def _pipe(drive: DriveClient, stream: MediaStream) -> AsyncIterator[bytes]:
    """
    Copy chunks from Drive to the response.

    Headers are already sent when this runs, so a Drive failure only ends
    the body early. The download buffer is closed on every exit path,
    including cancellation when the client disconnects.
    """
    try:
        while True:
            chunk = await run_in_threadpool(drive.read_chunk, stream)
            if chunk is None:
                break
            if chunk:
                yield chunk
    except StreamError as e:
        logger.error(
            f"Stream error for {stream.file_id} after {stream.bytes_read} bytes: {e.details}",
            extra={"event": "stream_error", "file_id": stream.file_id, "bytes_read": stream.bytes_read}
        )
    finally:
        stream.close()


@router.get("/image/{file_id}")
async def get_image(
    file_id: str = Path(..., description="Drive file ID"),
    drive: Optional[DriveClient] = Depends(get_drive_client)
):
    """
    Stream a file's content from Drive.

    The Content-Type is taken from the file's Drive metadata and set before
    any bytes are written.
    """
    drive = GalleryService.require_client(drive)

    metadata = await run_in_threadpool(drive.get_metadata, file_id)
    stream = await run_in_threadpool(drive.open_media, file_id)

    headers = {}
    if metadata.name:
        headers["Content-Disposition"] = f"inline; filename*=UTF-8''{quote(metadata.name)}"

    return StreamingResponse(
        _pipe(drive, stream),
        media_type=metadata.mime_type or DEFAULT_MIME_TYPE,
        headers=headers,
        # Also closes the stream when the body is never iterated
        background=BackgroundTask(stream.close)
    )
