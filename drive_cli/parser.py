"""Command parser for CLI input."""

import shlex
from typing import Dict, List, Optional, Tuple

from drive_cli.constants import SORT_ORDERS, SORTS, VIEWS
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

ROOT_ALIASES = ("root", "/", "null")
FOLDER_POLICIES = ("reject", "cascade", "orphan")


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object for the named command

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0].lower()
    parser = _PARSERS.get(command_name)
    if parser is None:
        raise ParseError(f"Unknown command: {command_name}")
    return parser(tokens[1:])


def _split_options(args: List[str], allowed: Tuple[str, ...]) -> Tuple[List[str], Dict[str, str]]:
    """
    Separate --name value options from positional arguments.

    Raises:
        ParseError: On an unknown option or an option without a value
    """
    positional = []
    options = {}
    i = 0
    while i < len(args):
        arg = args[i]
        if arg.startswith("--"):
            name = arg[2:]
            if name not in allowed:
                raise ParseError(f"Unknown option: {arg}")
            if i + 1 >= len(args):
                raise ParseError(f"Option {arg} requires a value")
            options[name] = args[i + 1]
            i += 2
            continue
        positional.append(arg)
        i += 1
    return positional, options


def _parse_int(value: str, what: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise ParseError(f"{what} must be a number, got '{value}'")
    if number < 1:
        raise ParseError(f"{what} must be at least 1")
    return number


def _parse_folder(value: Optional[str]) -> Optional[int]:
    """Parse a folder id; 'root' and friends mean the root."""
    if value is None or value.lower() in ROOT_ALIASES:
        return None
    return _parse_int(value, "Folder id")


def _parse_register(args: List[str]) -> RegisterCommand:
    """Parse 'register username password' command."""
    if len(args) != 2:
        raise ParseError("register requires exactly 2 arguments: username password")
    return RegisterCommand(username=args[0], password=args[1])


def _parse_login(args: List[str]) -> LoginCommand:
    """Parse 'login username password' command."""
    if len(args) != 2:
        raise ParseError("login requires exactly 2 arguments: username password")
    return LoginCommand(username=args[0], password=args[1])


def _parse_upload(args: List[str]) -> UploadCommand:
    """Parse 'upload path... [--folder ID]' command."""
    paths, options = _split_options(args, ("folder",))
    if not paths:
        raise ParseError("upload requires at least one file")
    return UploadCommand(paths=tuple(paths), folder_id=_parse_folder(options.get("folder")))


def _parse_ls(args: List[str]) -> ListCommand:
    """Parse 'ls [view] [--folder ID] [--page N] [--limit N] [--sort F] [--order O]'."""
    positional, options = _split_options(args, ("folder", "page", "limit", "sort", "order"))
    if len(positional) > 1:
        raise ParseError("ls accepts at most one view")

    view = positional[0].lower() if positional else "my-drive"
    if view not in VIEWS:
        raise ParseError(f"Unknown view '{view}'. Choose from: {', '.join(VIEWS)}")

    sort_by = options.get("sort")
    if sort_by is not None and sort_by not in SORTS:
        raise ParseError(f"Unknown sort field '{sort_by}'. Choose from: {', '.join(SORTS)}")

    sort_order = options.get("order")
    if sort_order is not None:
        sort_order = sort_order.lower()
        if sort_order not in SORT_ORDERS:
            raise ParseError("Sort order must be asc or desc")

    return ListCommand(
        view=view,
        folder_id=_parse_folder(options.get("folder")),
        page=_parse_int(options["page"], "Page") if "page" in options else 1,
        limit=_parse_int(options["limit"], "Limit") if "limit" in options else None,
        sort_by=sort_by,
        sort_order=sort_order,
    )


def _parse_search(args: List[str]) -> SearchCommand:
    """Parse 'search query [--page N] [--limit N]'; multiple words form one query."""
    positional, options = _split_options(args, ("page", "limit"))
    query = " ".join(positional).strip()
    if not query:
        raise ParseError("search requires a query")
    return SearchCommand(
        query=query,
        page=_parse_int(options["page"], "Page") if "page" in options else 1,
        limit=_parse_int(options["limit"], "Limit") if "limit" in options else None,
    )


def _parse_folders(args: List[str]) -> FoldersCommand:
    positional, options = _split_options(args, ("parent",))
    if positional:
        raise ParseError("folders takes no positional arguments")
    return FoldersCommand(parent_id=_parse_folder(options.get("parent")))


def _parse_mkdir(args: List[str]) -> MkdirCommand:
    positional, options = _split_options(args, ("parent",))
    if len(positional) != 1:
        raise ParseError("mkdir requires exactly 1 argument: name")
    return MkdirCommand(name=positional[0], parent_id=_parse_folder(options.get("parent")))


def _parse_rename(args: List[str]) -> RenameCommand:
    if len(args) != 2:
        raise ParseError("rename requires exactly 2 arguments: file_id name")
    return RenameCommand(file_id=_parse_int(args[0], "File id"), name=args[1])


def _parse_mv(args: List[str]) -> MoveCommand:
    if len(args) != 2:
        raise ParseError("mv requires exactly 2 arguments: file_id folder_id|root")
    return MoveCommand(file_id=_parse_int(args[0], "File id"), folder_id=_parse_folder(args[1]))


def _single_id(args: List[str], command: str) -> int:
    if len(args) != 1:
        raise ParseError(f"{command} requires exactly 1 argument: file_id")
    return _parse_int(args[0], "File id")


def _parse_rmdir(args: List[str]) -> RemoveFolderCommand:
    positional, options = _split_options(args, ("policy",))
    if len(positional) != 1:
        raise ParseError("rmdir requires exactly 1 argument: folder_id")
    policy = options.get("policy")
    if policy is not None:
        policy = policy.lower()
        if policy not in FOLDER_POLICIES:
            raise ParseError(f"Unknown policy '{policy}'. Choose from: {', '.join(FOLDER_POLICIES)}")
    return RemoveFolderCommand(folder_id=_parse_int(positional[0], "Folder id"), policy=policy)


def _parse_download(args: List[str]) -> DownloadCommand:
    """Parse 'download file_id [output_path]' command."""
    if len(args) < 1 or len(args) > 2:
        raise ParseError("download requires 1-2 arguments: file_id [output_path]")
    output_path = args[1] if len(args) == 2 else None
    return DownloadCommand(file_id=_parse_int(args[0], "File id"), output_path=output_path)


def _parse_usage(args: List[str]) -> UsageCommand:
    if args:
        raise ParseError("usage takes no arguments")
    return UsageCommand()


_PARSERS = {
    "register": _parse_register,
    "login": _parse_login,
    "upload": _parse_upload,
    "ls": _parse_ls,
    "search": _parse_search,
    "folders": _parse_folders,
    "mkdir": _parse_mkdir,
    "rename": _parse_rename,
    "mv": _parse_mv,
    "star": lambda args: StarCommand(file_id=_single_id(args, "star"), starred=True),
    "unstar": lambda args: StarCommand(file_id=_single_id(args, "unstar"), starred=False),
    "trash": lambda args: TrashCommand(file_id=_single_id(args, "trash"), trashed=True),
    "restore": lambda args: TrashCommand(file_id=_single_id(args, "restore"), trashed=False),
    "rm": lambda args: RemoveCommand(file_id=_single_id(args, "rm")),
    "rmdir": _parse_rmdir,
    "download": _parse_download,
    "usage": _parse_usage,
}
