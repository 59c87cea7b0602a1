"""Folder service: hierarchy maintenance and delete policies."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union

from drive_api.config import FOLDER_DELETE_POLICY, FOLDER_NAME_MAX_LENGTH
from drive_api.exceptions import FolderNotEmptyError, NotFoundError, ValidationError
from drive_api.repositories.folder_repository import Folder
from drive_api.repositories.interfaces import FileRepository, FolderRepository
from drive_api.services.file_service import FileService
from drive_api.types import FolderDeletePolicy
from drive_api.utils import name_problem, utc_now
from drive_common.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FolderDeletion:
    folder_id: int
    policy: FolderDeletePolicy
    deleted_folders: int = 0
    deleted_files: int = 0
    moved_folders: int = 0
    moved_files: int = 0


class FolderService:
    def __init__(
        self,
        folder_repo: FolderRepository,
        file_repo: FileRepository,
        file_service: FileService,
        delete_policy: Union[str, FolderDeletePolicy] = FOLDER_DELETE_POLICY,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.folder_repo = folder_repo
        self.file_repo = file_repo
        self.file_service = file_service
        self.delete_policy = FolderDeletePolicy(delete_policy)
        self.clock = clock

    @staticmethod
    def _clean_name(name: Optional[str]) -> str:
        problem = name_problem(name, FOLDER_NAME_MAX_LENGTH)
        if problem:
            raise ValidationError(problem, details={"name": name})
        return name.strip()

    def _require_parent(self, user_id: str, parent_id: Optional[int]) -> None:
        if parent_id is not None and self.folder_repo.get_by_id(parent_id, user_id) is None:
            logger.warning(f"Parent folder {parent_id} not owned [user_id={user_id}]")
            raise ValidationError("Parent folder not found", details={"parentId": parent_id})

    def get_folder(self, user_id: str, folder_id: int) -> Folder:
        folder = self.folder_repo.get_by_id(folder_id, user_id)
        if folder is None:
            raise NotFoundError(f"Folder {folder_id} not found")
        return folder

    def create_folder(self, user_id: str, name: str, parent_id: Optional[int] = None) -> Folder:
        clean = self._clean_name(name)
        self._require_parent(user_id, parent_id)
        return self.folder_repo.create(clean, user_id, parent_id, self.clock())

    def list_folders(self, user_id: str, parent_id: Optional[int] = None) -> List[Folder]:
        """
        Folders directly under parent_id (or at the root), ordered by name.
        """
        if parent_id is not None:
            self.get_folder(user_id, parent_id)
        return self.folder_repo.list_by_parent(user_id, parent_id)

    def update_folder(self, user_id: str, folder_id: int, changes: Dict[str, Any]) -> Folder:
        """
        Rename and/or move a folder.

        Args:
            changes: Subset of name, parent_id; an explicit parent_id of None
                     moves the folder to the root

        Raises:
            NotFoundError: If the folder is not the user's
            ValidationError: Bad name, parent not owned, or a move that would
                             put the folder inside itself
        """
        unknown = set(changes) - {"name", "parent_id"}
        if unknown:
            raise ValidationError("Unknown folder fields", details=sorted(unknown))

        self.get_folder(user_id, folder_id)
        updates = dict(changes)

        if "name" in updates:
            updates["name"] = self._clean_name(updates["name"])

        new_parent = updates.get("parent_id")
        if new_parent is not None:
            self._require_parent(user_id, new_parent)
            if new_parent in self.folder_repo.list_descendant_ids(folder_id, user_id):
                raise ValidationError(
                    "A folder cannot be moved into itself or one of its subfolders",
                    details={"parentId": new_parent},
                )

        if not updates:
            return self.get_folder(user_id, folder_id)

        folder = self.folder_repo.update(folder_id, user_id, updates, self.clock())
        if folder is None:
            raise NotFoundError(f"Folder {folder_id} not found")
        logger.info(f"Folder {folder_id} updated ({', '.join(sorted(changes))}) [user_id={user_id}]")
        return folder

    async def delete_folder(
        self,
        user_id: str,
        folder_id: int,
        policy: Optional[FolderDeletePolicy] = None,
    ) -> FolderDeletion:
        """
        Delete a folder according to a contents policy.

        reject: only empty folders may be deleted.
        cascade: the whole subtree goes, files hard-deleted with their objects.
        orphan: direct child folders and files move to the root.

        Raises:
            NotFoundError: If the folder is not the user's
            FolderNotEmptyError: Under reject, when the folder has contents
        """
        policy = policy or self.delete_policy
        folder = self.get_folder(user_id, folder_id)
        file_count, folder_count = self.folder_repo.count_children(folder_id, user_id)

        if policy is FolderDeletePolicy.REJECT:
            if file_count or folder_count:
                raise FolderNotEmptyError(folder_id, file_count, folder_count)
            self.folder_repo.delete(folder_id, user_id)
            logger.info(f"Folder {folder_id} '{folder.name}' deleted [user_id={user_id}]")
            return FolderDeletion(folder_id=folder_id, policy=policy, deleted_folders=1)

        if policy is FolderDeletePolicy.ORPHAN:
            now = self.clock()
            moved_folders = self.folder_repo.reparent_children(folder_id, user_id, None, now)
            moved_files = self.file_repo.move_folder_files_to_root(folder_id, user_id, now)
            self.folder_repo.delete(folder_id, user_id)
            logger.info(
                f"Folder {folder_id} deleted, {moved_folders} folders and {moved_files} files "
                f"moved to root [user_id={user_id}]"
            )
            return FolderDeletion(
                folder_id=folder_id,
                policy=policy,
                deleted_folders=1,
                moved_folders=moved_folders,
                moved_files=moved_files,
            )

        subtree = self.folder_repo.list_descendant_ids(folder_id, user_id)
        files = self.file_repo.list_by_folders(subtree, user_id)
        for file in files:
            self.file_repo.delete(file.id, user_id)
            await self.file_service.remove_object(file.object_key)
        deleted_folders = self.folder_repo.delete_many(subtree, user_id)

        logger.info(
            f"Folder {folder_id} deleted with {deleted_folders - 1} subfolders and "
            f"{len(files)} files [user_id={user_id}]"
        )
        return FolderDeletion(
            folder_id=folder_id,
            policy=policy,
            deleted_folders=deleted_folders,
            deleted_files=len(files),
        )
