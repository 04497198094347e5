"""
Error taxonomy for the gallery API.

Every request-time failure is raised as a GalleryError subclass and turned
into a JSON body of the form {"error": ..., "details": ...} by
gallery_error_handler, registered in create_app(). Anything else that escapes
a route is caught by unhandled_error_handler and reported as a generic 500.
"""
import logging
from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class GalleryError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ConfigurationError(GalleryError):
    """Missing or malformed credential/folder configuration."""


class BadRequest(GalleryError):
    """A required request input is missing."""

    status_code = status.HTTP_400_BAD_REQUEST


class ServiceUnavailable(GalleryError):
    """The Drive client was never initialized (no credential at startup)."""


class UpstreamError(GalleryError):
    """The Drive API call itself failed (network, auth, permission, not found)."""


class TemporaryStorageError(GalleryError):
    """The local temporary file for an upload could not be written."""


class StreamError(GalleryError):
    """
    Failure while proxying bytes after the response has started.

    Never serialized: by the time it is raised the status line and headers
    have already been sent, so it is logged and the body is cut short.
    """


async def gallery_error_handler(request: Request, exc: GalleryError) -> JSONResponse:
    """Convert a GalleryError into a structured JSON response."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"{request.method} {request.url.path} failed: {exc.message}"
        + (f" ({exc.details})" if exc.details else ""),
        extra={"event": "request_failed", "error": exc.message, "status": exc.status_code}
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler so unexpected failures still return a JSON body."""
    logger.error(
        f"{request.method} {request.url.path} failed unexpectedly: {exc}",
        extra={"event": "request_failed", "error": type(exc).__name__, "status": 500},
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "internal server error", "details": str(exc)}
    )
