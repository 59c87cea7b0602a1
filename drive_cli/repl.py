"""REPL with prompt_toolkit for user interaction."""

import os
import sys

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, InMemoryHistory

from drive_cli.commands import dispatch_command
from drive_cli.completer import DriveCompleter
from drive_cli.config import default_config_path
from drive_cli.constants import (
    HELP_TEXT,
    LOGO,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from drive_cli.parser import ParseError, parse_command
from drive_common.logging_config import get_logger

logger = get_logger(__name__)


def clear_screen() -> None:
    """Clear the terminal screen (cross-platform)."""
    if sys.platform == "win32":
        os.system("cls")
    else:
        os.system("clear")


def show_welcome() -> None:
    print(LOGO)
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


def _history():
    history_path = default_config_path().parent / "history"
    try:
        history_path.parent.mkdir(parents=True, exist_ok=True)
        return FileHistory(str(history_path))
    except OSError:
        return InMemoryHistory()


def repl_loop() -> None:
    """Start interactive REPL with prompt_toolkit."""
    session: PromptSession = PromptSession(
        completer=DriveCompleter(), history=_history(), style=STYLE
    )

    clear_screen()
    show_welcome()

    while True:
        try:
            user_input = session.prompt([("class:prompt", PROMPT_TEXT)])
            command = user_input.strip()

            if not command:
                continue

            if command == "exit":
                print("Goodbye!")
                break

            if command == "help":
                print(HELP_TEXT)
                continue

            if command == "clear":
                clear_screen()
                show_welcome()
                continue

            cmd_obj = parse_command(user_input)
            print(dispatch_command(cmd_obj))

        except ParseError as e:
            print(f"Error: {e}")
        except KeyboardInterrupt:
            continue
        except EOFError:
            print("\nGoodbye!")
            break
