"""Tests for CLI command handlers."""

from unittest.mock import Mock

import pytest

from drive_cli.commands import (
    dispatch_command,
    handle_download,
    handle_login,
    handle_ls,
    handle_move,
    handle_register,
    handle_star,
    handle_trash,
    handle_upload,
)
from drive_cli.drive_client import DriveClient
from drive_cli.models import (
    DownloadCommand,
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


@pytest.fixture
def mock_client():
    return Mock(spec=DriveClient)


def test_handle_register(mock_client):
    """Test register command handler with mocked client."""
    mock_client.register.return_value = "Registration successful!"

    cmd = RegisterCommand(username='testuser', password='password123')
    result = handle_register(cmd, client=mock_client)

    assert 'Registration successful' in result
    mock_client.register.assert_called_once_with('testuser', 'password123')


def test_handle_login(mock_client):
    mock_client.login.return_value = "Login successful!"

    result = handle_login(LoginCommand(username='testuser', password='pw'), client=mock_client)

    assert 'Login successful' in result
    mock_client.login.assert_called_once_with('testuser', 'pw')


def test_handle_upload(mock_client):
    mock_client.upload.return_value = "Upload complete"

    result = handle_upload(UploadCommand(paths=('a.txt', 'b.pdf'), folder_id=3), client=mock_client)

    assert result == "Upload complete"
    mock_client.upload.assert_called_once_with(['a.txt', 'b.pdf'], 3)


def test_handle_ls(mock_client):
    mock_client.list_files.return_value = "View: recent"

    handle_ls(ListCommand(view='recent', limit=20, sort_by='size', sort_order='asc'), client=mock_client)

    mock_client.list_files.assert_called_once_with(
        view='recent', folder_id=None, page=1, limit=20, sort_by='size', sort_order='asc'
    )


def test_handle_move_to_root(mock_client):
    handle_move(MoveCommand(file_id=4, folder_id=None), client=mock_client)

    mock_client.update_file.assert_called_once_with(4, {'folderId': None}, "Moved {name} to root")


def test_handle_move_to_folder(mock_client):
    handle_move(MoveCommand(file_id=4, folder_id=9), client=mock_client)

    mock_client.update_file.assert_called_once_with(4, {'folderId': 9}, "Moved {name} to folder 9")


@pytest.mark.parametrize("starred,template", [(True, "Starred {name}"), (False, "Unstarred {name}")])
def test_handle_star(mock_client, starred, template):
    handle_star(StarCommand(file_id=2, starred=starred), client=mock_client)

    mock_client.update_file.assert_called_once_with(2, {'isStarred': starred}, template)


@pytest.mark.parametrize("trashed,template", [(True, "Moved {name} to trash"), (False, "Restored {name}")])
def test_handle_trash(mock_client, trashed, template):
    handle_trash(TrashCommand(file_id=2, trashed=trashed), client=mock_client)

    mock_client.update_file.assert_called_once_with(2, {'isTrashed': trashed}, template)


def test_handle_download(mock_client):
    mock_client.download.return_value = "Downloaded a.txt"

    result = handle_download(DownloadCommand(file_id=1, output_path='out/'), client=mock_client)

    assert result == "Downloaded a.txt"
    mock_client.download.assert_called_once_with(1, 'out/')


@pytest.mark.parametrize("cmd,method,args", [
    (SearchCommand(query='tax'), 'search', ('tax',)),
    (MkdirCommand(name='Photos', parent_id=2), 'create_folder', ('Photos', 2)),
    (RenameCommand(file_id=5, name='x.txt'), 'update_file', (5, {'name': 'x.txt'}, "Renamed file {id} to {name}")),
    (RemoveCommand(file_id=5), 'delete_file', (5,)),
    (RemoveFolderCommand(folder_id=6, policy='cascade'), 'delete_folder', (6, 'cascade')),
    (UsageCommand(), 'usage', ()),
])
def test_dispatch_routes_to_client(mock_client, cmd, method, args):
    getattr(mock_client, method).return_value = "ok"

    assert dispatch_command(cmd, client=mock_client) == "ok"
    called_args = getattr(mock_client, method).call_args.args
    assert called_args[:len(args)] == args


def test_dispatch_unknown_type(mock_client):
    assert dispatch_command("not a command", client=mock_client).startswith("Unknown command type")
