"""File operation API routes."""

import os
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from fastapi.responses import RedirectResponse

from drive_api.auth import get_current_user
from drive_api.dependencies import get_file_service, get_query_engine, get_upload_service
from drive_api.object_store import DISPOSITION_ATTACHMENT, DISPOSITION_INLINE
from drive_api.routes.params import file_id_path, parse_optional_id
from drive_api.schemas.common import MessageResponse
from drive_api.schemas.files import (
    FileListResponse,
    FileResponse,
    FileUpdateRequest,
    SignedUrlResponse,
    UploadError,
    UploadResponse,
)
from drive_api.services.file_service import FileService
from drive_api.services.query_engine import FileQueryEngine, ListingRequest
from drive_api.services.upload_service import UploadService
from drive_api.services.upload_validator import UploadCandidate
from drive_api.types import BatchStatus

router = APIRouter(prefix="/files", tags=["Files"])

UPLOAD_STATUS_CODES = {
    BatchStatus.SUCCESS: status.HTTP_200_OK,
    BatchStatus.PARTIAL: status.HTTP_207_MULTI_STATUS,
    BatchStatus.FAILED: status.HTTP_502_BAD_GATEWAY,
}

DEFAULT_MIME_TYPE = "application/octet-stream"


def _upload_size(upload: UploadFile) -> int:
    """Size of a spooled upload without reading it into memory."""
    if upload.size is not None:
        return upload.size
    upload.file.seek(0, os.SEEK_END)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


@router.post("", response_model=UploadResponse)
async def upload_files(
    response: Response,
    files: Optional[List[UploadFile]] = File(None),
    folder_id: Optional[str] = Form(None, alias="folderId"),
    current_user: str = Depends(get_current_user),
    upload_service: UploadService = Depends(get_upload_service),
):
    """
    Upload one or more files, optionally into a folder.

    Parameters:
        - files: Files to upload (multipart/form-data, repeated)
        - folderId: Target folder id (optional, root if omitted)
        - Authorization header: Bearer <api_key> (required)

    Returns:
        - 200 status=success: every file stored
        - 207 status=partial: some files stored, errors lists the rest
        - 502 status=failed: no file could be stored

    Raises:
        - 400: No files, too many files, invalid files or folder not owned
        - 401: Invalid or missing API Key
        - 413: Storage quota exceeded
    """
    target_folder = parse_optional_id(folder_id, "folderId")

    candidates = [
        UploadCandidate(
            name=upload.filename or "file",
            mime_type=upload.content_type or DEFAULT_MIME_TYPE,
            size=_upload_size(upload),
            reader=upload.read,
        )
        for upload in files or []
    ]

    result = await upload_service.upload(current_user, candidates, target_folder)

    response.status_code = UPLOAD_STATUS_CODES[result.status]
    return UploadResponse(
        status=result.status.value,
        uploaded_files=[FileResponse.from_file(f) for f in result.uploaded_files],
        errors=[UploadError(**e) for e in result.errors],
    )


@router.get("", response_model=FileListResponse)
async def list_files(
    view: Optional[str] = Query(None, description="my-drive, recent, starred, trash or search"),
    folder_id: Optional[str] = Query(None, alias="folderId"),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    search: Optional[str] = Query(None),
    current_user: str = Depends(get_current_user),
    query_engine: FileQueryEngine = Depends(get_query_engine),
):
    """
    List or search the current user's files.

    Parameters:
        - view: Listing mode (unknown values fall back to my-drive)
        - folderId: Folder for the my-drive view (root if omitted)
        - page, limit: Pagination (limit capped at 100)
        - sortBy: name, size, createdAt or updatedAt
        - sortOrder: asc or desc
        - search: Name or MIME type substring; overrides view when non-empty

    Returns:
        - files, pagination, view, searchQuery
    """
    request = ListingRequest.from_params(
        view=view,
        folder_id=parse_optional_id(folder_id, "folderId"),
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        search=search,
        max_page_size=query_engine.max_page_size,
    )
    result = query_engine.list_files(current_user, request)
    return FileListResponse.from_result(result)


@router.get("/{file_id}", response_model=FileResponse)
async def get_file(
    file_id: int = Depends(file_id_path),
    current_user: str = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    """
    Get one file's metadata.

    Raises:
        - 404: File not found (or not owned)
    """
    return FileResponse.from_file(file_service.get_file(current_user, file_id))


async def _signed_url_response(
    file_service: FileService,
    user_id: str,
    file_id: int,
    disposition: str,
    redirect: bool,
):
    signed = await file_service.signed_url(user_id, file_id, disposition)
    if redirect:
        return RedirectResponse(signed.url, status_code=status.HTTP_302_FOUND)
    return SignedUrlResponse(url=signed.url, expires_at=signed.expires_at)


@router.get("/{file_id}/download", response_model=SignedUrlResponse)
async def download_file(
    file_id: int = Depends(file_id_path),
    redirect: bool = Query(True),
    current_user: str = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    """
    Redirect to a time-limited download URL for a file.

    Parameters:
        - redirect: false returns {url, expiresAt} instead of a 302

    Raises:
        - 404: File not found (or not owned)
        - 410: File is in the trash
    """
    return await _signed_url_response(file_service, current_user, file_id, DISPOSITION_ATTACHMENT, redirect)


@router.get("/{file_id}/preview", response_model=SignedUrlResponse)
async def preview_file(
    file_id: int = Depends(file_id_path),
    redirect: bool = Query(True),
    current_user: str = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    """
    Redirect to a time-limited inline URL for previewing a file.

    Raises:
        - 404: File not found (or not owned)
        - 410: File is in the trash
    """
    return await _signed_url_response(file_service, current_user, file_id, DISPOSITION_INLINE, redirect)


@router.put("/{file_id}", response_model=FileResponse)
async def update_file(
    request: FileUpdateRequest,
    file_id: int = Depends(file_id_path),
    current_user: str = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    """
    Rename, star/unstar, trash/restore or move a file.

    Parameters:
        - name, isStarred, isTrashed, folderId (null moves to root)

    Raises:
        - 400: Invalid name or target folder not owned
        - 404: File not found (or not owned)
    """
    file = file_service.update_file(current_user, file_id, request.changes())
    return FileResponse.from_file(file)


@router.delete("/{file_id}", response_model=MessageResponse)
async def delete_file(
    file_id: int = Depends(file_id_path),
    current_user: str = Depends(get_current_user),
    file_service: FileService = Depends(get_file_service),
):
    """
    Permanently delete a file and its stored object.

    Raises:
        - 404: File not found (or not owned)
    """
    file = await file_service.delete_file(current_user, file_id)
    return MessageResponse(message="File deleted successfully", id=file.id)
