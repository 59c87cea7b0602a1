"""Capability sets the services depend on, independent of the storage engine."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Tuple

from drive_api.repositories.file_repository import File, FileOrdering, FilePredicate
from drive_api.repositories.folder_repository import Folder
from drive_api.repositories.user_repository import User


class UserRepository(Protocol):
    def create_user(
        self,
        user_id: str,
        username: str,
        password_hash: str,
        api_key: str,
        created_at: datetime,
    ) -> User:
        ...

    def get_by_username(self, username: str) -> Optional[User]:
        ...

    def get_by_api_key(self, api_key: str) -> Optional[User]:
        ...

    def get_by_user_id(self, user_id: str) -> Optional[User]:
        ...

    def update_api_key(self, user_id: str, new_api_key: str, updated_at: datetime) -> None:
        ...


class FolderRepository(Protocol):
    def create(self, name: str, user_id: str, parent_id: Optional[int], created_at: datetime) -> Folder:
        ...

    def get_by_id(self, folder_id: int, user_id: str) -> Optional[Folder]:
        ...

    def list_by_parent(self, user_id: str, parent_id: Optional[int]) -> List[Folder]:
        ...

    def update(
        self,
        folder_id: int,
        user_id: str,
        changes: Dict[str, Any],
        updated_at: datetime,
    ) -> Optional[Folder]:
        ...

    def count_children(self, folder_id: int, user_id: str) -> Tuple[int, int]:
        ...

    def list_descendant_ids(self, folder_id: int, user_id: str) -> List[int]:
        ...

    def reparent_children(
        self,
        folder_id: int,
        user_id: str,
        new_parent_id: Optional[int],
        updated_at: datetime,
    ) -> int:
        ...

    def delete_many(self, folder_ids: List[int], user_id: str) -> int:
        ...

    def delete(self, folder_id: int, user_id: str) -> bool:
        ...


class FileRepository(Protocol):
    def create(
        self,
        name: str,
        original_name: str,
        mime_type: str,
        size: int,
        path: str,
        object_key: str,
        user_id: str,
        folder_id: Optional[int],
        created_at: datetime,
    ) -> File:
        ...

    def get_by_id(self, file_id: int, user_id: str) -> Optional[File]:
        ...

    def update(
        self,
        file_id: int,
        user_id: str,
        changes: Dict[str, Any],
        updated_at: datetime,
    ) -> Optional[File]:
        ...

    def delete(self, file_id: int, user_id: str) -> bool:
        ...

    def find_page(
        self,
        predicate: FilePredicate,
        ordering: FileOrdering,
        limit: int,
        offset: int,
    ) -> List[File]:
        ...

    def count(self, predicate: FilePredicate) -> int:
        ...

    def sum_live_size(self, user_id: str) -> int:
        ...

    def list_by_folders(self, folder_ids: List[int], user_id: str) -> List[File]:
        ...

    def move_folder_files_to_root(self, folder_id: int, user_id: str, updated_at: datetime) -> int:
        ...

    def list_trashed_before(self, cutoff: datetime, limit: int = 500) -> List[File]:
        ...
