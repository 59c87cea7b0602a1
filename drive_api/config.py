"""Configuration settings for the drive API server."""

import os

from drive_common.constants import API_KEY_PREFIX, DEFAULT_API_PORT, GIB, MIB


def _env_list(name: str, default: tuple) -> tuple:
    raw = os.environ.get(name)
    if not raw:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


DATABASE_PATH = os.environ.get("DRIVE_DATABASE_PATH", "/app/data/drive.db")

API_HOST = os.environ.get("DRIVE_API_HOST", "0.0.0.0")

API_PORT = int(os.environ.get("DRIVE_API_PORT", str(DEFAULT_API_PORT)))

API_PUBLIC_URL = os.environ.get("DRIVE_API_PUBLIC_URL", f"http://localhost:{API_PORT}")

API_KEY_PREFIX = os.environ.get("DRIVE_API_KEY_PREFIX", API_KEY_PREFIX)

# Upload limits
STORAGE_QUOTA_BYTES = int(os.environ.get("DRIVE_STORAGE_QUOTA_BYTES", str(5 * GIB)))

MAX_FILES_PER_UPLOAD = int(os.environ.get("DRIVE_MAX_FILES_PER_UPLOAD", "10"))

MAX_FILE_SIZE_BYTES = int(os.environ.get("DRIVE_MAX_FILE_SIZE_BYTES", str(100 * MIB)))

DEFAULT_ALLOWED_MIME_TYPES = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
    "image/bmp",
    "application/pdf",
    "text/plain",
    "text/csv",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
)

ALLOWED_MIME_TYPES = _env_list("DRIVE_ALLOWED_MIME_TYPES", DEFAULT_ALLOWED_MIME_TYPES)

UPLOAD_MAX_ATTEMPTS = int(os.environ.get("DRIVE_UPLOAD_MAX_ATTEMPTS", "3"))

UPLOAD_RETRY_BASE_DELAY_SECONDS = float(os.environ.get("DRIVE_UPLOAD_RETRY_BASE_DELAY", "1.0"))

# Listing
DEFAULT_PAGE_SIZE = 50

MAX_PAGE_SIZE = 100

# Object storage
OBJECT_STORE_BACKEND = os.environ.get("DRIVE_OBJECT_STORE", "local")

OBJECT_KEY_PREFIX = os.environ.get("DRIVE_OBJECT_KEY_PREFIX", "drive")

LOCAL_STORAGE_ROOT = os.environ.get("DRIVE_LOCAL_STORAGE_ROOT", "/app/data/objects")

URL_SIGNING_SECRET = os.environ.get("DRIVE_URL_SIGNING_SECRET", "change-me")

SIGNED_URL_TTL_SECONDS = int(os.environ.get("DRIVE_SIGNED_URL_TTL_SECONDS", "3600"))

S3_BUCKET = os.environ.get("DRIVE_S3_BUCKET", "drive")

S3_ENDPOINT_URL = os.environ.get("DRIVE_S3_ENDPOINT_URL") or None

S3_REGION = os.environ.get("DRIVE_S3_REGION", "auto")

S3_ACCESS_KEY_ID = os.environ.get("DRIVE_S3_ACCESS_KEY_ID") or None

S3_SECRET_ACCESS_KEY = os.environ.get("DRIVE_S3_SECRET_ACCESS_KEY") or None

# Folders
FOLDER_DELETE_POLICY = os.environ.get("DRIVE_FOLDER_DELETE_POLICY", "reject")

FOLDER_NAME_MAX_LENGTH = 255

FILE_NAME_MAX_LENGTH = 255

# Trash retention, 0 disables purging
TRASH_RETENTION_DAYS = int(os.environ.get("DRIVE_TRASH_RETENTION_DAYS", "30"))

TRASH_PURGE_INTERVAL_SECONDS = int(os.environ.get("DRIVE_TRASH_PURGE_INTERVAL_SECONDS", str(6 * 3600)))
