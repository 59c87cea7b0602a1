"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal, Optional, Tuple, Union


@dataclass(frozen=True)
class RegisterCommand:
    """Register a new user account."""

    username: str
    password: str
    command: Literal["register"] = "register"


@dataclass(frozen=True)
class LoginCommand:
    """Login with username and password."""

    username: str
    password: str
    command: Literal["login"] = "login"


@dataclass(frozen=True)
class UploadCommand:
    """Upload local files, optionally into a folder."""

    paths: Tuple[str, ...]
    folder_id: Optional[int] = None
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class ListCommand:
    """List files of a view."""

    view: str = "my-drive"
    folder_id: Optional[int] = None
    page: int = 1
    limit: Optional[int] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    command: Literal["ls"] = "ls"


@dataclass(frozen=True)
class SearchCommand:
    """Search file names and MIME types."""

    query: str
    page: int = 1
    limit: Optional[int] = None
    command: Literal["search"] = "search"


@dataclass(frozen=True)
class FoldersCommand:
    """List folders under a parent (root when unset)."""

    parent_id: Optional[int] = None
    command: Literal["folders"] = "folders"


@dataclass(frozen=True)
class MkdirCommand:
    """Create a folder."""

    name: str
    parent_id: Optional[int] = None
    command: Literal["mkdir"] = "mkdir"


@dataclass(frozen=True)
class RenameCommand:
    """Rename a file."""

    file_id: int
    name: str
    command: Literal["rename"] = "rename"


@dataclass(frozen=True)
class MoveCommand:
    """Move a file into a folder, or to the root when folder_id is None."""

    file_id: int
    folder_id: Optional[int]
    command: Literal["mv"] = "mv"


@dataclass(frozen=True)
class StarCommand:
    """Star or unstar a file."""

    file_id: int
    starred: bool
    command: Literal["star"] = "star"


@dataclass(frozen=True)
class TrashCommand:
    """Move a file to the trash or restore it."""

    file_id: int
    trashed: bool
    command: Literal["trash"] = "trash"


@dataclass(frozen=True)
class RemoveCommand:
    """Permanently delete a file."""

    file_id: int
    command: Literal["rm"] = "rm"


@dataclass(frozen=True)
class RemoveFolderCommand:
    """Delete a folder, optionally overriding the server's delete policy."""

    folder_id: int
    policy: Optional[str] = None
    command: Literal["rmdir"] = "rmdir"


@dataclass(frozen=True)
class DownloadCommand:
    """Download a file by id."""

    file_id: int
    output_path: Optional[str] = None
    command: Literal["download"] = "download"


@dataclass(frozen=True)
class UsageCommand:
    """Show storage usage."""

    command: Literal["usage"] = "usage"


CommandRequest = Union[
    RegisterCommand,
    LoginCommand,
    UploadCommand,
    ListCommand,
    SearchCommand,
    FoldersCommand,
    MkdirCommand,
    RenameCommand,
    MoveCommand,
    StarCommand,
    TrashCommand,
    RemoveCommand,
    RemoveFolderCommand,
    DownloadCommand,
    UsageCommand,
]
