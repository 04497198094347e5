"""
Service account credential loading for the Google Drive client.
Resolves the credential source once at application startup.
"""
import json
import logging
import os
from dataclasses import dataclass
from typing import Optional, Union

from google.oauth2 import service_account

from drive_gallery.config import Settings
from drive_gallery.errors import ConfigurationError
from drive_gallery.storage.drive_client import DriveClient

logger = logging.getLogger(__name__)

DRIVE_SCOPES = [
    "https://www.googleapis.com/auth/drive.readonly",
    "https://www.googleapis.com/auth/drive.file",
]

REQUIRED_KEYS = ("client_email", "private_key")


@dataclass(frozen=True)
class InlineCredential:
    """Service account JSON passed directly in SERVICE_ACCOUNT_JSON."""
    raw_json: str


@dataclass(frozen=True)
class FileCredential:
    """Path to a service account JSON file (GOOGLE_APPLICATION_CREDENTIALS)."""
    path: str


@dataclass(frozen=True)
class MissingCredential:
    """Neither source is configured."""


CredentialSource = Union[InlineCredential, FileCredential, MissingCredential]


def resolve_credential_source(settings: Settings) -> CredentialSource:
    """
    Pick the credential source from settings.

    Inline JSON takes precedence over a file path.
    """
    if settings.service_account_json:
        return InlineCredential(settings.service_account_json)
    if settings.google_application_credentials:
        return FileCredential(settings.google_application_credentials)
    return MissingCredential()


def load_service_account_info(source: CredentialSource) -> dict:
    """
    Read and parse the service account document.

    Raises:
        ConfigurationError: If no source is configured, the JSON is malformed,
            the file cannot be read, or required keys are missing.
    """
    if isinstance(source, InlineCredential):
        try:
            info = json.loads(source.raw_json)
        except json.JSONDecodeError as e:
            raise ConfigurationError("Failed to parse SERVICE_ACCOUNT_JSON", str(e)) from e
        origin = "SERVICE_ACCOUNT_JSON"
    elif isinstance(source, FileCredential):
        path = os.path.abspath(os.path.expanduser(source.path))
        try:
            with open(path, encoding="utf-8") as fh:
                info = json.load(fh)
        except OSError as e:
            raise ConfigurationError(f"Cannot read service account file: {path}", str(e)) from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Service account file is not valid JSON: {path}", str(e)) from e
        origin = path
    else:
        raise ConfigurationError(
            "No service account credentials found. "
            "Set SERVICE_ACCOUNT_JSON or GOOGLE_APPLICATION_CREDENTIALS"
        )

    if not isinstance(info, dict):
        raise ConfigurationError(f"Service account credentials from {origin} must be a JSON object")

    missing = [key for key in REQUIRED_KEYS if not info.get(key)]
    if missing:
        raise ConfigurationError(
            f"Service account credentials from {origin} are missing: {', '.join(missing)}"
        )

    logger.info(f"Loaded service account credentials from {origin}")
    return info


def build_credentials(info: dict) -> service_account.Credentials:
    """Create scoped service account credentials from a parsed key document."""
    try:
        return service_account.Credentials.from_service_account_info(info, scopes=DRIVE_SCOPES)
    except ValueError as e:
        # Raised by google-auth for an unusable private key
        raise ConfigurationError("Invalid service account credentials", str(e)) from e


def init_drive_client(settings: Settings) -> Optional[DriveClient]:
    """
    Build the process-wide Drive client.

    Never raises for configuration problems: a missing or broken credential
    is logged as a warning and None is returned so the service still starts
    and /api/health reports driveConfigured=false.
    """
    if not settings.drive_folder_id:
        logger.warning(
            "DRIVE_FOLDER_ID not set. Set it in .env to list images from your folder."
        )

    try:
        info = load_service_account_info(resolve_credential_source(settings))
        credentials = build_credentials(info)
    except ConfigurationError as e:
        detail = f" ({e.details})" if e.details else ""
        logger.warning(
            f"Service account credentials not configured; Drive endpoints will fail: {e.message}{detail}"
        )
        return None

    try:
        client = DriveClient.from_credentials(
            credentials,
            page_size=settings.list_page_size,
            chunk_size=settings.stream_chunk_size,
        )
    except Exception as e:
        logger.error(f"Failed to initialize Drive client: {e}")
        return None

    logger.info(f"Drive client initialized for {info['client_email']}")
    return client
