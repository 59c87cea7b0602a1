"""Folder API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from drive_api.auth import get_current_user
from drive_api.dependencies import get_folder_service
from drive_api.exceptions import ValidationError
from drive_api.routes.params import folder_id_path, parse_optional_id
from drive_api.schemas.folders import (
    FolderCreateRequest,
    FolderDeleteResponse,
    FolderListResponse,
    FolderResponse,
    FolderUpdateRequest,
)
from drive_api.services.folder_service import FolderService
from drive_api.types import FolderDeletePolicy

router = APIRouter(prefix="/folders", tags=["Folders"])


@router.post("", response_model=FolderResponse, status_code=status.HTTP_201_CREATED)
async def create_folder(
    request: FolderCreateRequest,
    current_user: str = Depends(get_current_user),
    folder_service: FolderService = Depends(get_folder_service),
):
    """
    Create a folder at the root or under parentId.

    Raises:
        - 400: Invalid name or parent folder not owned
    """
    folder = folder_service.create_folder(current_user, request.name, request.parent_id)
    return FolderResponse.from_folder(folder)


@router.get("", response_model=FolderListResponse)
async def list_folders(
    parent_id: Optional[str] = Query(None, alias="parentId"),
    current_user: str = Depends(get_current_user),
    folder_service: FolderService = Depends(get_folder_service),
):
    """
    List folders directly under parentId (root if omitted), ordered by name.
    """
    folders = folder_service.list_folders(current_user, parse_optional_id(parent_id, "parentId"))
    return FolderListResponse(folders=[FolderResponse.from_folder(f) for f in folders])


@router.get("/{folder_id}", response_model=FolderResponse)
async def get_folder(
    folder_id: int = Depends(folder_id_path),
    current_user: str = Depends(get_current_user),
    folder_service: FolderService = Depends(get_folder_service),
):
    return FolderResponse.from_folder(folder_service.get_folder(current_user, folder_id))


@router.put("/{folder_id}", response_model=FolderResponse)
async def update_folder(
    request: FolderUpdateRequest,
    folder_id: int = Depends(folder_id_path),
    current_user: str = Depends(get_current_user),
    folder_service: FolderService = Depends(get_folder_service),
):
    """
    Rename and/or move a folder; "parentId": null moves it to the root.

    Raises:
        - 400: Invalid name, parent not owned, or move into own subtree
        - 404: Folder not found (or not owned)
    """
    folder = folder_service.update_folder(current_user, folder_id, request.changes())
    return FolderResponse.from_folder(folder)


@router.delete("/{folder_id}", response_model=FolderDeleteResponse)
async def delete_folder(
    folder_id: int = Depends(folder_id_path),
    policy: Optional[str] = Query(None, description="reject, cascade or orphan"),
    current_user: str = Depends(get_current_user),
    folder_service: FolderService = Depends(get_folder_service),
):
    """
    Delete a folder. The configured policy decides what happens to its
    contents unless overridden with ?policy=.

    Raises:
        - 400: Unknown policy
        - 404: Folder not found (or not owned)
        - 409: Folder not empty (reject policy)
    """
    delete_policy = None
    if policy:
        try:
            delete_policy = FolderDeletePolicy(policy.strip().lower())
        except ValueError:
            raise ValidationError("Invalid folder delete policy", details={"policy": policy})

    deletion = await folder_service.delete_folder(current_user, folder_id, delete_policy)
    return FolderDeleteResponse.from_deletion(deletion)
