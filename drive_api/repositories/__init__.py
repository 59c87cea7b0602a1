"""Repositories over the SQLite metadata store."""

from drive_api.repositories.file_repository import (
    File,
    FileOrdering,
    FilePredicate,
    SqliteFileRepository,
)
from drive_api.repositories.folder_repository import Folder, SqliteFolderRepository
from drive_api.repositories.interfaces import FileRepository, FolderRepository, UserRepository
from drive_api.repositories.user_repository import SqliteUserRepository, User

__all__ = [
    "File",
    "FileOrdering",
    "FilePredicate",
    "FileRepository",
    "Folder",
    "FolderRepository",
    "SqliteFileRepository",
    "SqliteFolderRepository",
    "SqliteUserRepository",
    "User",
    "UserRepository",
]
