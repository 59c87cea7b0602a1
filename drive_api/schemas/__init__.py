"""Pydantic schemas for API requests and responses."""

from drive_api.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
)
from drive_api.schemas.common import CamelModel, ErrorResponse, MessageResponse
from drive_api.schemas.files import (
    FileListResponse,
    FileResponse,
    FileUpdateRequest,
    PaginationResponse,
    SignedUrlResponse,
    UploadError,
    UploadResponse,
)
from drive_api.schemas.folders import (
    FolderCreateRequest,
    FolderDeleteResponse,
    FolderListResponse,
    FolderResponse,
    FolderUpdateRequest,
)
from drive_api.schemas.user import UserResponse

__all__ = [
    "CamelModel",
    "ErrorResponse",
    "FileListResponse",
    "FileResponse",
    "FileUpdateRequest",
    "FolderCreateRequest",
    "FolderDeleteResponse",
    "FolderListResponse",
    "FolderResponse",
    "FolderUpdateRequest",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "PaginationResponse",
    "RegisterRequest",
    "RegisterResponse",
    "SignedUrlResponse",
    "UploadError",
    "UploadResponse",
    "UserResponse",
]
