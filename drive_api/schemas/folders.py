"""Pydantic schemas for folder endpoints."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from drive_api.database import MAX_ROW_ID
from drive_api.repositories.folder_repository import Folder
from drive_api.schemas.common import CamelModel
from drive_api.services.folder_service import FolderDeletion


class FolderCreateRequest(CamelModel):
    """Request model for creating a folder."""
    name: str
    parent_id: Optional[int] = Field(None, ge=1, le=MAX_ROW_ID)


class FolderUpdateRequest(CamelModel):
    """
    Request model for renaming or moving a folder; an explicit
    "parentId": null moves the folder to the root.
    """
    name: Optional[str] = None
    parent_id: Optional[int] = Field(None, ge=1, le=MAX_ROW_ID)

    def changes(self) -> Dict[str, Any]:
        changes = {}
        if "name" in self.model_fields_set and self.name is not None:
            changes["name"] = self.name
        if "parent_id" in self.model_fields_set:
            changes["parent_id"] = self.parent_id
        return changes


class FolderResponse(CamelModel):
    """Response model for one folder."""
    id: int
    name: str
    parent_id: Optional[int] = None
    user_id: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_folder(cls, folder: Folder) -> "FolderResponse":
        return cls(
            id=folder.id,
            name=folder.name,
            parent_id=folder.parent_id,
            user_id=folder.user_id,
            created_at=folder.created_at,
            updated_at=folder.updated_at,
        )


class FolderListResponse(CamelModel):
    folders: List[FolderResponse]


class FolderDeleteResponse(CamelModel):
    """Response model for folder deletion, with what happened to its contents."""
    message: str
    id: int
    policy: str
    deleted_folders: int
    deleted_files: int
    moved_folders: int
    moved_files: int

    @classmethod
    def from_deletion(cls, deletion: FolderDeletion) -> "FolderDeleteResponse":
        return cls(
            message="Folder deleted successfully",
            id=deletion.folder_id,
            policy=deletion.policy.value,
            deleted_folders=deletion.deleted_folders,
            deleted_files=deletion.deleted_files,
            moved_folders=deletion.moved_folders,
            moved_files=deletion.moved_files,
        )
