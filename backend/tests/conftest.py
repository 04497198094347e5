"""
Test configuration and fixtures.
Replaces the Drive client with an in-memory fake so no Google API is called.
"""
import io
import pytest
from typing import AsyncGenerator, Dict, List, Optional

from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from drive_gallery.api.dependencies import get_drive_client
from drive_gallery.config import Settings
from drive_gallery.errors import UpstreamError
from drive_gallery.main import create_app
from drive_gallery.schemas.image import DriveFile, UploadedFile
from drive_gallery.storage.drive_client import DriveClient, MediaStream


class FakeDownloader:
    """Stands in for MediaIoBaseDownload: writes chunks of `data` into `fd`."""

    def __init__(self, fd, data: bytes, chunksize: int, fail_at: Optional[int] = None):
        self._fd = fd
        self._data = data
        self._chunksize = chunksize
        self._fail_at = fail_at
        self._position = 0
        self.calls = 0

    def next_chunk(self, num_retries=0):
        call = self.calls
        self.calls += 1
        if self._fail_at is not None and call >= self._fail_at:
            raise ConnectionResetError("Connection reset by peer")
        chunk = self._data[self._position:self._position + self._chunksize]
        self._fd.write(chunk)
        self._position += len(chunk)
        return None, self._position >= len(self._data)


class FakeDriveClient(DriveClient):
    """
    In-memory Drive folder.

    Mimics the server side of the Drive query used by list_images:
    parent match, `mimeType contains 'image/'`, not trashed.
    """

    def __init__(self, chunk_size: int = 4):
        super().__init__(service=None, chunk_size=chunk_size)
        self.files: List[dict] = []
        self.contents: Dict[str, bytes] = {}
        self.stream_fail_at: Dict[str, int] = {}
        self.opened_streams: List[MediaStream] = []
        self.fail_list = False
        self.fail_upload = False
        self.uploaded_paths: List[str] = []
        self._next_id = 1

    def add_file(
        self,
        name: str,
        mime_type: str,
        folder_id: str = "F1",
        content: bytes = b"",
        trashed: bool = False,
        thumbnail_link: Optional[str] = None,
        file_id: Optional[str] = None
    ) -> str:
        file_id = file_id or f"file-{self._next_id}"
        self._next_id += 1
        self.files.append({
            "id": file_id,
            "name": name,
            "mimeType": mime_type,
            "parents": [folder_id],
            "trashed": trashed,
            "thumbnailLink": thumbnail_link,
        })
        self.contents[file_id] = content
        return file_id

    def _find(self, file_id: str) -> dict:
        for record in self.files:
            if record["id"] == file_id:
                return record
        raise UpstreamError("failed to fetch file", f"File not found: {file_id}.")

    def list_images(self, folder_id: str) -> List[DriveFile]:
        if self.fail_list:
            raise UpstreamError("failed to list files", "The caller does not have permission")
        return [
            DriveFile.model_validate(record)
            for record in self.files
            if folder_id in record["parents"]
            and "image/" in record["mimeType"]
            and not record["trashed"]
        ]

    def get_metadata(self, file_id: str) -> DriveFile:
        return DriveFile.model_validate(self._find(file_id))

    def open_media(self, file_id: str) -> MediaStream:
        self._find(file_id)
        buffer = io.BytesIO()
        downloader = FakeDownloader(
            buffer,
            self.contents[file_id],
            self.chunk_size,
            fail_at=self.stream_fail_at.get(file_id)
        )
        stream = MediaStream(downloader, buffer, file_id)
        stream.prefetch()
        self.opened_streams.append(stream)
        return stream

    def upload_file(self, path: str, name: str, folder_id: str, mime_type: Optional[str] = None) -> UploadedFile:
        self.uploaded_paths.append(path)
        with open(path, "rb") as fh:
            content = fh.read()
        if self.fail_upload:
            raise UpstreamError("upload failed", "Insufficient permissions for the specified parent")
        file_id = self.add_file(name, mime_type or "application/octet-stream", folder_id, content)
        return UploadedFile(id=file_id, name=name)


def make_settings(**overrides) -> Settings:
    """Settings isolated from the environment and any .env file."""
    values = {
        "service_account_json": None,
        "google_application_credentials": None,
        "drive_folder_id": "F1",
        "enable_upload": True,
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def fake_drive() -> FakeDriveClient:
    """Fake Drive folder F1 holding one PNG and one PDF."""
    drive = FakeDriveClient()
    drive.add_file("cat.png", "image/png", content=b"\x89PNG-cat-bytes", file_id="png-1",
                   thumbnail_link="https://lh3.googleusercontent.com/thumb-png-1")
    drive.add_file("report.pdf", "application/pdf", content=b"%PDF-1.7", file_id="pdf-1")
    return drive


@pytest.fixture
def upload_dir(tmp_path):
    """Directory receiving temporary upload files."""
    directory = tmp_path / "uploads"
    directory.mkdir()
    return directory


@pytest.fixture
def settings(upload_dir) -> Settings:
    return make_settings(upload_tmp_dir=str(upload_dir))


@pytest.fixture
def app(settings: Settings, fake_drive: FakeDriveClient) -> FastAPI:
    """App with the fake Drive client injected."""
    app = create_app(settings)
    app.dependency_overrides[get_drive_client] = lambda: fake_drive
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def unconfigured_client(upload_dir) -> AsyncGenerator[AsyncClient, None]:
    """Client for an app started without any service account credential."""
    app = create_app(make_settings(upload_tmp_dir=str(upload_dir)))

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def settings_factory(upload_dir):
    """Build isolated Settings with per-test overrides."""
    def factory(**overrides) -> Settings:
        overrides.setdefault("upload_tmp_dir", str(upload_dir))
        return make_settings(**overrides)
    return factory
