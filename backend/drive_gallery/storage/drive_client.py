"""
Google Drive v3 client.

Wraps the googleapiclient Drive resource behind the few operations the
gallery needs: list images in a folder, read file metadata, stream file
content and create a file from a local upload.

All methods are blocking; API handlers call them through
run_in_threadpool. httplib2 transports are not thread safe, so every call
executes on a fresh AuthorizedHttp built by the client's http factory while
the discovery-built resource itself is shared read-only.
"""
import io
import logging
import os
import time
from typing import Callable, List, Optional

import httplib2
import google_auth_httplib2
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseDownload, MediaIoBaseUpload

from drive_gallery.errors import StreamError, UpstreamError
from drive_gallery.schemas.image import DriveFile, UploadedFile
from drive_gallery.utils.logging import log_drive_failure, log_drive_request
from drive_gallery.utils.metrics import (
    drive_failures_total,
    drive_latency_seconds,
    drive_requests_total,
)

logger = logging.getLogger(__name__)

LIST_FIELDS = "files(id,name,mimeType,thumbnailLink,webViewLink,iconLink)"
METADATA_FIELDS = "mimeType,name"
CREATE_FIELDS = "id,name"
DEFAULT_MIME_TYPE = "application/octet-stream"


def _describe(error: Exception) -> str:
    """Provider diagnostic passed through to API callers."""
    if isinstance(error, HttpError):
        reason = getattr(error, "reason", None)
        if reason:
            return str(reason)
    return str(error)


def escape_query_value(value: str) -> str:
    """Escape a value for use inside a single-quoted Drive query literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def build_image_query(folder_id: str) -> str:
    """Drive query selecting non-trashed image files directly inside a folder."""
    return (
        f"'{escape_query_value(folder_id)}' in parents "
        "and mimeType contains 'image/' and trashed = false"
    )


class MediaStream:
    """
    An open, chunked download of one file's content.

    The first chunk is fetched by DriveClient.open_media before the stream is
    handed out; read_chunk() returns it first and then pulls the remaining
    chunks from Drive. Returns None once the download is complete.
    """

    def __init__(self, downloader: MediaIoBaseDownload, buffer: io.BytesIO, file_id: str):
        self._downloader = downloader
        self._buffer = buffer
        self._done = False
        self._pending: Optional[bytes] = None
        self.file_id = file_id
        self.bytes_read = 0

    def prefetch(self) -> None:
        """Fetch the first chunk now so open failures surface early."""
        self._pending = self._next_chunk()

    def read_chunk(self) -> Optional[bytes]:
        if self._pending is not None:
            chunk, self._pending = self._pending, None
            return chunk
        return self._next_chunk()

    def _next_chunk(self) -> Optional[bytes]:
        if self._done:
            return None
        _status, self._done = self._downloader.next_chunk()
        data = self._buffer.getvalue()
        self._buffer.seek(0)
        self._buffer.truncate()
        self.bytes_read += len(data)
        return data

    @property
    def closed(self) -> bool:
        return self._buffer.closed

    def close(self) -> None:
        self._done = True
        self._buffer.close()


class DriveClient:
    """
    Authenticated Google Drive client handle.

    Created once at startup (see drive_gallery.auth.credentials) and never
    mutated afterwards.
    """

    def __init__(
        self,
        service,
        http_factory: Optional[Callable[[], object]] = None,
        page_size: int = 200,
        chunk_size: int = 1024 * 1024,
    ):
        """
        Args:
            service: Drive v3 resource from googleapiclient.discovery.build
            http_factory: Returns a fresh authorized transport per call;
                None executes on the resource's own transport
            page_size: Maximum number of files returned by list_images
            chunk_size: Download/upload chunk size in bytes
        """
        self._service = service
        self._http_factory = http_factory
        self.page_size = page_size
        self.chunk_size = chunk_size

    @classmethod
    def from_credentials(cls, credentials, **kwargs) -> "DriveClient":
        """Build a client from google-auth credentials."""
        service = build("drive", "v3", credentials=credentials, cache_discovery=False)

        def http_factory():
            return google_auth_httplib2.AuthorizedHttp(credentials, http=httplib2.Http())

        return cls(service, http_factory=http_factory, **kwargs)

    def _http(self):
        return self._http_factory() if self._http_factory else None

    def _execute(self, request, operation: str, failure_message: str, **log_fields):
        """Execute an API request, recording metrics and wrapping failures."""
        drive_requests_total.labels(operation=operation).inc()
        start_time = time.time()
        try:
            result = request.execute(http=self._http())
        except HttpError as e:
            drive_failures_total.labels(operation=operation).inc()
            log_drive_failure(
                logger, operation, _describe(e),
                duration_ms=(time.time() - start_time) * 1000,
                status=getattr(e.resp, "status", None),
                **log_fields
            )
            raise UpstreamError(failure_message, _describe(e)) from e
        except Exception as e:
            drive_failures_total.labels(operation=operation).inc()
            log_drive_failure(
                logger, operation, str(e),
                duration_ms=(time.time() - start_time) * 1000,
                include_traceback=True,
                **log_fields
            )
            raise UpstreamError(failure_message, str(e)) from e

        duration = time.time() - start_time
        drive_latency_seconds.labels(operation=operation).observe(duration)
        log_drive_request(logger, operation, duration_ms=duration * 1000, **log_fields)
        return result

    def list_images(self, folder_id: str) -> List[DriveFile]:
        """
        List non-trashed image files in a folder.

        Only the first page (page_size results) is returned.

        Raises:
            UpstreamError: If the Drive call fails
        """
        request = self._service.files().list(
            q=build_image_query(folder_id),
            fields=LIST_FIELDS,
            pageSize=self.page_size,
        )
        response = self._execute(request, "list", "failed to list files", folder_id=folder_id)
        files = [DriveFile.model_validate(item) for item in response.get("files") or []]

        # "contains 'image/'" is a substring match, keep only real image types
        return [f for f in files if (f.mime_type or "").startswith("image/")]

    def get_metadata(self, file_id: str) -> DriveFile:
        """
        Fetch name and MIME type for a file.

        Raises:
            UpstreamError: If the file is missing or inaccessible
        """
        request = self._service.files().get(fileId=file_id, fields=METADATA_FIELDS)
        response = self._execute(request, "metadata", "failed to fetch file", file_id=file_id)
        return DriveFile.model_validate({"id": file_id, "name": "", **response})

    def open_media(self, file_id: str) -> MediaStream:
        """
        Start downloading a file's content and fetch the first chunk.

        Raises:
            UpstreamError: If the download cannot be started
        """
        buffer = io.BytesIO()
        request = self._service.files().get_media(fileId=file_id)
        http = self._http()
        if http is not None:
            request.http = http
        downloader = MediaIoBaseDownload(buffer, request, chunksize=self.chunk_size)
        stream = MediaStream(downloader, buffer, file_id)

        drive_requests_total.labels(operation="media").inc()
        start_time = time.time()
        try:
            stream.prefetch()
        except Exception as e:
            stream.close()
            drive_failures_total.labels(operation="media").inc()
            log_drive_failure(
                logger, "media", _describe(e),
                duration_ms=(time.time() - start_time) * 1000,
                file_id=file_id
            )
            raise UpstreamError("failed to fetch file", _describe(e)) from e

        drive_latency_seconds.labels(operation="media").observe(time.time() - start_time)
        log_drive_request(logger, "media", duration_ms=(time.time() - start_time) * 1000, file_id=file_id)
        return stream

    def read_chunk(self, stream: MediaStream) -> Optional[bytes]:
        """
        Read the next chunk of an open stream.

        Raises:
            StreamError: If Drive fails mid-transfer
        """
        try:
            return stream.read_chunk()
        except Exception as e:
            drive_failures_total.labels(operation="media").inc()
            log_drive_failure(
                logger, "media", _describe(e),
                file_id=stream.file_id,
                bytes_read=stream.bytes_read
            )
            raise StreamError("stream interrupted", _describe(e)) from e

    def upload_file(self, path: str, name: str, folder_id: str, mime_type: Optional[str] = None) -> UploadedFile:
        """
        Create a file in a folder from a local file.

        Raises:
            UpstreamError: If the Drive create call fails
        """
        metadata = {"name": name, "parents": [folder_id]}
        with open(path, "rb") as fh:
            media = MediaIoBaseUpload(
                fh,
                mimetype=mime_type or DEFAULT_MIME_TYPE,
                chunksize=self.chunk_size,
                resumable=True,
            )
            request = self._service.files().create(body=metadata, media_body=media, fields=CREATE_FIELDS)
            response = self._execute(
                request, "upload", "upload failed",
                folder_id=folder_id,
                size_bytes=os.fstat(fh.fileno()).st_size
            )
        return UploadedFile(id=response["id"], name=response.get("name", name))
