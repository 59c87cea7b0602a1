"""Pydantic schemas for file endpoints."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from drive_api.database import MAX_ROW_ID
from drive_api.repositories.file_repository import File
from drive_api.schemas.common import CamelModel
from drive_api.services.query_engine import ListingResult


class FileResponse(CamelModel):
    """Response model for one file's metadata."""
    id: int
    name: str
    original_name: str
    mime_type: str
    size: int
    folder_id: Optional[int] = None
    user_id: str
    is_starred: bool
    is_trashed: bool
    trashed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_file(cls, file: File) -> "FileResponse":
        return cls(
            id=file.id,
            name=file.name,
            original_name=file.original_name,
            mime_type=file.mime_type,
            size=file.size,
            folder_id=file.folder_id,
            user_id=file.user_id,
            is_starred=file.is_starred,
            is_trashed=file.is_trashed,
            trashed_at=file.trashed_at,
            created_at=file.created_at,
            updated_at=file.updated_at,
        )


class UploadError(CamelModel):
    name: str
    error: str


class UploadResponse(CamelModel):
    """Response model for a batch upload; status is success, partial or failed."""
    status: str
    uploaded_files: List[FileResponse]
    errors: List[UploadError]


class PaginationResponse(CamelModel):
    page: int
    limit: int
    total_count: int
    total_pages: int
    has_next: bool
    has_prev: bool


class FileListResponse(CamelModel):
    """Response model for file listing and search."""
    files: List[FileResponse]
    pagination: PaginationResponse
    view: str
    search_query: Optional[str] = None

    @classmethod
    def from_result(cls, result: ListingResult) -> "FileListResponse":
        p = result.pagination
        return cls(
            files=[FileResponse.from_file(f) for f in result.files],
            pagination=PaginationResponse(
                page=p.page,
                limit=p.limit,
                total_count=p.total_count,
                total_pages=p.total_pages,
                has_next=p.has_next,
                has_prev=p.has_prev,
            ),
            view=result.view.value,
            search_query=result.search_query,
        )


class FileUpdateRequest(CamelModel):
    """
    Request model for updating a file. Only fields present in the body are
    applied; an explicit "folderId": null moves the file to the root.
    """
    name: Optional[str] = None
    is_starred: Optional[bool] = None
    is_trashed: Optional[bool] = None
    folder_id: Optional[int] = Field(None, ge=1, le=MAX_ROW_ID)

    def changes(self) -> Dict[str, Any]:
        changes = {}
        for field_name in self.model_fields_set:
            value = getattr(self, field_name)
            if value is None and field_name != "folder_id":
                continue
            changes[field_name] = value
        return changes


class SignedUrlResponse(CamelModel):
    """Response model for a signed download or preview URL."""
    url: str
    expires_at: datetime
