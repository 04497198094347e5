"""
Production logging utility for structured JSON logging.

Provides event-specific logging functions with mandatory fields:
- timestamp (ISO8601)
- level
- service
- event

Optional fields (included when applicable):
- file_id
- folder_id
- operation
- duration_ms

Usage:
    from drive_gallery.utils.logging import configure_logging, log_drive_request

    configure_logging('drive-gallery', 'INFO')
    log_drive_request(logger, operation='list', folder_id='abc', duration_ms=45.2)
"""
import logging
import sys
from typing import Optional, Dict, Any
from pythonjsonlogger import jsonlogger


class StructuredLogger:
    """Structured JSON logger with mandatory fields."""

    _service_name = None
    _configured = False

    @classmethod
    def configure(cls, service_name: str, log_level: str = "INFO"):
        """
        Configure structured JSON logging for the application.

        Args:
            service_name: Service identifier
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        if cls._configured:
            return  # Already configured

        cls._service_name = service_name

        # Remove default handlers
        root_logger = logging.getLogger()
        root_logger.handlers = []

        formatter = jsonlogger.JsonFormatter(
            '%(timestamp)s %(levelname)s %(name)s %(message)s',
            timestamp=True,
            json_ensure_ascii=False
        )

        # Console handler (for docker logs)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)

        root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        # Add service name to all log records via filter
        class ServiceFilter(logging.Filter):
            def filter(self, record):
                record.service = cls._service_name
                return True

        handler.addFilter(ServiceFilter())
        cls._configured = True


def _build_log_extra(
    event: str,
    file_id: Optional[str] = None,
    folder_id: Optional[str] = None,
    duration_ms: Optional[float] = None,
    **kwargs
) -> Dict[str, Any]:
    """
    Build extra fields for structured logging.

    Args:
        event: Event name (mandatory)
        file_id: Optional Drive file ID
        folder_id: Optional Drive folder ID
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields

    Returns:
        Dictionary of extra fields
    """
    extra = {
        "event": event,
        **kwargs
    }

    if file_id:
        extra["file_id"] = file_id
    if folder_id:
        extra["folder_id"] = folder_id
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)

    return extra


def log_drive_request(
    logger: logging.Logger,
    operation: str,
    duration_ms: Optional[float] = None,
    file_id: Optional[str] = None,
    folder_id: Optional[str] = None,
    **kwargs
):
    """
    Log a completed Drive API request.

    Args:
        logger: Logger instance
        operation: Operation name (list, metadata, media, upload) (required)
        duration_ms: Optional duration in milliseconds
        file_id: Optional Drive file ID
        folder_id: Optional Drive folder ID
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="drive_request",
        file_id=file_id,
        folder_id=folder_id,
        duration_ms=duration_ms,
        operation=operation,
        **kwargs
    )

    logger.info(f"Drive request: {operation}", extra=extra)


def log_drive_failure(
    logger: logging.Logger,
    operation: str,
    error: str,
    duration_ms: Optional[float] = None,
    file_id: Optional[str] = None,
    folder_id: Optional[str] = None,
    include_traceback: bool = False,
    **kwargs
):
    """
    Log a failed Drive API request.

    Args:
        logger: Logger instance
        operation: Operation name (required)
        error: Error message (required)
        duration_ms: Optional duration in milliseconds
        file_id: Optional Drive file ID
        folder_id: Optional Drive folder ID
        include_traceback: Whether to include stack trace
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="drive_failure",
        file_id=file_id,
        folder_id=folder_id,
        duration_ms=duration_ms,
        operation=operation,
        error=str(error),
        **kwargs
    )

    message = f"Drive failure: {operation} - {error}"

    if include_traceback:
        exc_info = sys.exc_info()
        if exc_info[0] is not None:
            logger.error(message, extra=extra, exc_info=exc_info)
            return
    logger.error(message, extra=extra)


def log_upload_completed(
    logger: logging.Logger,
    file_id: str,
    folder_id: str,
    name: str,
    size_bytes: Optional[int] = None,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """
    Log an upload that reached Drive.

    Args:
        logger: Logger instance
        file_id: Drive-assigned file ID (required)
        folder_id: Destination folder ID (required)
        name: Uploaded file name (required)
        size_bytes: Optional size of the uploaded file
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="upload_completed",
        file_id=file_id,
        folder_id=folder_id,
        duration_ms=duration_ms,
        file_name=name,
        **kwargs
    )
    if size_bytes is not None:
        extra["size_bytes"] = size_bytes

    logger.info(f"Upload completed: {name} -> {file_id}", extra=extra)


def configure_logging(service_name: str, log_level: str = "INFO"):
    """Configure logging (alias for StructuredLogger.configure)."""
    StructuredLogger.configure(service_name, log_level)
