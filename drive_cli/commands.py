"""Command handler functions for CLI operations."""

from typing import Optional

from drive_cli.config import Config, default_config_path
from drive_cli.drive_client import DriveClient
from drive_cli.models import (
    CommandRequest,
    DownloadCommand,
    FoldersCommand,
    ListCommand,
    LoginCommand,
    MkdirCommand,
    MoveCommand,
    RegisterCommand,
    RemoveCommand,
    RemoveFolderCommand,
    RenameCommand,
    SearchCommand,
    StarCommand,
    TrashCommand,
    UploadCommand,
    UsageCommand,
)
from drive_common.logging_config import get_logger

logger = get_logger(__name__)


_client: Optional[DriveClient] = None


def get_client() -> DriveClient:
    """
    Get or create global DriveClient instance.
    """
    global _client
    if _client is None:
        logger.debug("Creating new DriveClient instance")
        _client = DriveClient(Config(default_config_path()))
    return _client


def handle_register(cmd: RegisterCommand, client: Optional[DriveClient] = None) -> str:
    """
    Handle 'register' command.

    Args:
        cmd: RegisterCommand with username and password
        client: Optional DriveClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    client = client or get_client()
    return client.register(cmd.username, cmd.password)


def handle_login(cmd: LoginCommand, client: Optional[DriveClient] = None) -> str:
    """
    Handle 'login' command.
    """
    client = client or get_client()
    return client.login(cmd.username, cmd.password)


def handle_upload(cmd: UploadCommand, client: Optional[DriveClient] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with local paths and optional folder id
        client: Optional DriveClient for dependency injection (testing)

    Returns:
        One line per file plus a batch summary
    """
    client = client or get_client()
    logger.info(f"Handling upload command: paths={list(cmd.paths)}, folder_id={cmd.folder_id}")
    return client.upload(list(cmd.paths), cmd.folder_id)


def handle_ls(cmd: ListCommand, client: Optional[DriveClient] = None) -> str:
    client = client or get_client()
    return client.list_files(
        view=cmd.view,
        folder_id=cmd.folder_id,
        page=cmd.page,
        limit=cmd.limit,
        sort_by=cmd.sort_by,
        sort_order=cmd.sort_order,
    )


def handle_search(cmd: SearchCommand, client: Optional[DriveClient] = None) -> str:
    client = client or get_client()
    return client.search(cmd.query, page=cmd.page, limit=cmd.limit)


def handle_folders(cmd: FoldersCommand, client: Optional[DriveClient] = None) -> str:
    client = client or get_client()
    return client.list_folders(cmd.parent_id)


def handle_mkdir(cmd: MkdirCommand, client: Optional[DriveClient] = None) -> str:
    client = client or get_client()
    return client.create_folder(cmd.name, cmd.parent_id)


def handle_rename(cmd: RenameCommand, client: Optional[DriveClient] = None) -> str:
    client = client or get_client()
    return client.update_file(cmd.file_id, {'name': cmd.name}, "Renamed file {id} to {name}")


def handle_move(cmd: MoveCommand, client: Optional[DriveClient] = None) -> str:
    client = client or get_client()
    destination = f"folder {cmd.folder_id}" if cmd.folder_id is not None else "root"
    return client.update_file(
        cmd.file_id, {'folderId': cmd.folder_id}, f"Moved {{name}} to {destination}"
    )


def handle_star(cmd: StarCommand, client: Optional[DriveClient] = None) -> str:
    client = client or get_client()
    action = "Starred" if cmd.starred else "Unstarred"
    return client.update_file(cmd.file_id, {'isStarred': cmd.starred}, f"{action} {{name}}")


def handle_trash(cmd: TrashCommand, client: Optional[DriveClient] = None) -> str:
    client = client or get_client()
    action = "Moved {name} to trash" if cmd.trashed else "Restored {name}"
    return client.update_file(cmd.file_id, {'isTrashed': cmd.trashed}, action)


def handle_rm(cmd: RemoveCommand, client: Optional[DriveClient] = None) -> str:
    client = client or get_client()
    return client.delete_file(cmd.file_id)


def handle_rmdir(cmd: RemoveFolderCommand, client: Optional[DriveClient] = None) -> str:
    client = client or get_client()
    return client.delete_folder(cmd.folder_id, cmd.policy)


def handle_download(cmd: DownloadCommand, client: Optional[DriveClient] = None) -> str:
    """
    Handle 'download' command.

    Args:
        cmd: DownloadCommand with file id and optional output path
        client: Optional DriveClient for dependency injection (testing)

    Returns:
        Success message with saved location, or error message
    """
    client = client or get_client()
    logger.info(f"Handling download command: file_id={cmd.file_id}, output_path={cmd.output_path}")
    return client.download(cmd.file_id, cmd.output_path)


def handle_usage(cmd: UsageCommand, client: Optional[DriveClient] = None) -> str:
    client = client or get_client()
    return client.usage()


HANDLERS = {
    RegisterCommand: handle_register,
    LoginCommand: handle_login,
    UploadCommand: handle_upload,
    ListCommand: handle_ls,
    SearchCommand: handle_search,
    FoldersCommand: handle_folders,
    MkdirCommand: handle_mkdir,
    RenameCommand: handle_rename,
    MoveCommand: handle_move,
    StarCommand: handle_star,
    TrashCommand: handle_trash,
    RemoveCommand: handle_rm,
    RemoveFolderCommand: handle_rmdir,
    DownloadCommand: handle_download,
    UsageCommand: handle_usage,
}


def dispatch_command(cmd_obj: CommandRequest, client: Optional[DriveClient] = None) -> str:
    """Dispatch parsed command to appropriate handler."""
    handler = HANDLERS.get(type(cmd_obj))
    if handler is None:
        return f"Unknown command type: {type(cmd_obj)}"
    return handler(cmd_obj, client)
