"""File service for single-file reads, updates, deletes and signed URLs."""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from drive_api.config import FILE_NAME_MAX_LENGTH, SIGNED_URL_TTL_SECONDS
from drive_api.exceptions import FileTrashedError, NotFoundError, ObjectNotFoundError, ValidationError
from drive_api.object_store import DISPOSITION_ATTACHMENT, ObjectStore
from drive_api.repositories.file_repository import File
from drive_api.repositories.interfaces import FileRepository, FolderRepository
from drive_api.retry import RetryExhaustedError, RetryPolicy
from drive_api.utils import name_problem, utc_now
from drive_common.logging_config import get_logger

logger = get_logger(__name__)

UPDATABLE_FIELDS = ("name", "is_starred", "is_trashed", "folder_id")


@dataclass(frozen=True)
class SignedUrl:
    url: str
    expires_at: datetime


class FileService:
    def __init__(
        self,
        file_repo: FileRepository,
        folder_repo: FolderRepository,
        object_store: ObjectStore,
        delete_retry: Optional[RetryPolicy] = None,
        url_ttl_seconds: int = SIGNED_URL_TTL_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.file_repo = file_repo
        self.folder_repo = folder_repo
        self.object_store = object_store
        self.delete_retry = delete_retry or RetryPolicy()
        self.url_ttl_seconds = url_ttl_seconds
        self.clock = clock

    def get_file(self, user_id: str, file_id: int) -> File:
        """
        Raises:
            NotFoundError: If the file does not exist or belongs to another user
        """
        file = self.file_repo.get_by_id(file_id, user_id)
        if file is None:
            logger.debug(f"File {file_id} not found [user_id={user_id}]")
            raise NotFoundError(f"File {file_id} not found")
        return file

    def update_file(self, user_id: str, file_id: int, changes: Dict[str, Any]) -> File:
        """
        Rename, star/unstar, trash/restore or move a file.

        Args:
            changes: Subset of name, is_starred, is_trashed, folder_id; an
                     explicit folder_id of None moves the file to the root

        Raises:
            NotFoundError: If the file is not the user's
            ValidationError: Bad name, unknown field, or target folder not owned
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError("Unknown file fields", details=sorted(unknown))

        self.get_file(user_id, file_id)
        updates = dict(changes)
        now = self.clock()

        if "name" in updates:
            problem = name_problem(updates["name"], FILE_NAME_MAX_LENGTH)
            if problem:
                raise ValidationError(problem, details={"name": updates["name"]})
            updates["name"] = updates["name"].strip()

        if updates.get("folder_id") is not None:
            if self.folder_repo.get_by_id(updates["folder_id"], user_id) is None:
                logger.warning(
                    f"Move rejected: folder {updates['folder_id']} not owned [user_id={user_id}]"
                )
                raise ValidationError("Folder not found", details={"folderId": updates["folder_id"]})

        if "is_trashed" in updates:
            updates["is_trashed"] = bool(updates["is_trashed"])
            updates["trashed_at"] = now if updates["is_trashed"] else None

        if "is_starred" in updates:
            updates["is_starred"] = bool(updates["is_starred"])

        if not updates:
            return self.get_file(user_id, file_id)

        file = self.file_repo.update(file_id, user_id, updates, now)
        if file is None:
            raise NotFoundError(f"File {file_id} not found")

        logger.info(f"File {file_id} updated ({', '.join(sorted(changes))}) [user_id={user_id}]")
        return file

    async def remove_object(self, object_key: str) -> bool:
        """
        Best-effort object deletion with retries.

        Returns:
            True if the object is gone, False if it was left behind
        """
        try:
            await self.delete_retry.run(
                lambda: asyncio.to_thread(self.object_store.delete, object_key),
                description=f"Delete of object {object_key}",
            )
            return True
        except ObjectNotFoundError:
            return True
        except RetryExhaustedError as e:
            logger.warning(f"Object {object_key} left orphaned after {e.attempts} delete attempts")
            return False
        except Exception as e:
            logger.warning(f"Object {object_key} left orphaned: {e}")
            return False

    async def delete_file(self, user_id: str, file_id: int) -> File:
        """
        Hard-delete a file: metadata row first, then the stored object.

        A failure to delete the object leaves an orphan but the file is gone
        from the user's drive either way.
        """
        file = self.get_file(user_id, file_id)
        if not self.file_repo.delete(file_id, user_id):
            raise NotFoundError(f"File {file_id} not found")

        await self.remove_object(file.object_key)
        logger.info(f"File {file_id} deleted [user_id={user_id}]")
        return file

    async def signed_url(
        self,
        user_id: str,
        file_id: int,
        disposition: str = DISPOSITION_ATTACHMENT,
    ) -> SignedUrl:
        """
        Issue a time-limited URL for downloading or previewing a file.

        Raises:
            NotFoundError: If the file is not the user's
            FileTrashedError: If the file is in the trash
        """
        file = self.get_file(user_id, file_id)
        if file.is_trashed:
            raise FileTrashedError(f"File {file_id} is in the trash")

        expires_at = self.clock() + timedelta(seconds=self.url_ttl_seconds)
        url = await asyncio.to_thread(
            self.object_store.signed_url,
            file.object_key,
            self.url_ttl_seconds,
            file.name,
            disposition,
        )
        logger.debug(f"Signed {disposition} URL for file {file_id} [user_id={user_id}]")
        return SignedUrl(url=url, expires_at=expires_at)
