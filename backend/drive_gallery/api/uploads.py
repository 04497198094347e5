"""
Upload endpoint (only registered when ENABLE_UPLOAD is set).

POST /upload - multipart field `image` plus optional form field `folderId`.

Flow:
1. Spool the uploaded bytes to a temporary file
2. Create the file in the Drive folder from that temporary file
3. Delete the temporary file, whatever happened in step 2

The destination folder is whatever the client sends; the service account's
Drive permissions are the only access boundary.
"""
import logging
import os
import shutil
import tempfile
import time
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool

from drive_gallery.api.dependencies import get_app_settings, get_drive_client
from drive_gallery.config import Settings
from drive_gallery.errors import BadRequest, TemporaryStorageError
from drive_gallery.schemas.image import UploadResponse
from drive_gallery.services.gallery_service import GalleryService
from drive_gallery.storage.drive_client import DriveClient
from drive_gallery.utils.logging import log_upload_completed
from drive_gallery.utils.metrics import uploaded_bytes_total

logger = logging.getLogger(__name__)

router = APIRouter()


def _spool_to_temp_file(upload: UploadFile, tmp_dir: Optional[str]) -> str:
    """Copy an upload to a new temporary file and return its path."""
    suffix = os.path.splitext(upload.filename or "")[1]
    upload.file.seek(0)
    with tempfile.NamedTemporaryFile(
        mode="wb", prefix="upload_", suffix=suffix, dir=tmp_dir, delete=False
    ) as temp_file:
        try:
            shutil.copyfileobj(upload.file, temp_file)
        except Exception:
            temp_file.close()
            _remove_temp_file(temp_file.name)
            raise
        return temp_file.name


def _remove_temp_file(path: str) -> None:
    """Best-effort delete; a failure is logged, never reported to the caller."""
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Failed to delete temporary upload {path}: {e}")


@router.post("/upload", response_model=UploadResponse)
async def upload_image(
    image: Optional[UploadFile] = File(None, description="Image file to upload"),
    folder_id: Optional[str] = Form(None, alias="folderId", description="Drive folder ID (defaults to DRIVE_FOLDER_ID)"),
    drive: Optional[DriveClient] = Depends(get_drive_client),
    settings: Settings = Depends(get_app_settings)
):
    """
    Upload an image into a Drive folder.

    Returns the Drive-assigned ID and name of the new file.
    """
    drive = GalleryService.require_client(drive)
    if image is None or not image.filename:
        raise BadRequest("image file required (multipart/form-data field `image`)")
    folder_id = GalleryService.resolve_folder(
        folder_id,
        settings.drive_folder_id,
        "folderId required (or set DRIVE_FOLDER_ID)"
    )

    start_time = time.time()
    try:
        temp_path = await run_in_threadpool(_spool_to_temp_file, image, settings.upload_tmp_dir)
    except OSError as e:
        raise TemporaryStorageError("upload failed", str(e)) from e
    try:
        size_bytes = os.path.getsize(temp_path)
        uploaded = await run_in_threadpool(
            drive.upload_file,
            temp_path,
            image.filename,
            folder_id,
            image.content_type
        )
    finally:
        await run_in_threadpool(_remove_temp_file, temp_path)

    uploaded_bytes_total.inc(size_bytes)
    log_upload_completed(
        logger,
        file_id=uploaded.id,
        folder_id=folder_id,
        name=uploaded.name,
        size_bytes=size_bytes,
        duration_ms=(time.time() - start_time) * 1000
    )
    return UploadResponse(ok=True, file=uploaded)
