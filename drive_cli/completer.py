"""Custom completer for the drive CLI."""

from pathlib import Path
from typing import Iterable

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from drive_cli.constants import COMMANDS, SORT_ORDERS, SORTS, VIEWS

LS_OPTIONS = ("--folder", "--page", "--limit", "--sort", "--order")


class DriveCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Local path completion for 'upload' arguments
    - View names and sort option values for 'ls'
    """

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_words(COMMANDS, tokens[0] if tokens else "")
            return

        command = tokens[0].lower()
        current_word = "" if is_typing_new_token else tokens[-1]
        previous = tokens[-1] if is_typing_new_token else (tokens[-2] if len(tokens) > 1 else "")

        if command == "upload":
            if previous != "--folder":
                yield from self._complete_paths(current_word)
        elif command == "ls":
            if previous == "--sort":
                yield from self._complete_words(SORTS, current_word)
            elif previous == "--order":
                yield from self._complete_words(SORT_ORDERS, current_word)
            elif current_word.startswith("-"):
                yield from self._complete_words(LS_OPTIONS, current_word)
            elif len(tokens) == 1 or (len(tokens) == 2 and not is_typing_new_token):
                yield from self._complete_words(VIEWS, current_word)

    def _complete_words(self, words: Iterable[str], partial: str) -> Iterable[Completion]:
        """Complete fixed words matching the partial input."""
        partial_lower = partial.lower()
        for word in words:
            if word.startswith(partial_lower):
                yield Completion(word, start_position=-len(partial))

    def _complete_paths(self, partial: str) -> Iterable[Completion]:
        """
        Complete local file and directory paths relative to the working directory.
        """
        prefix = partial.rpartition("/")[2]
        head = partial[:len(partial) - len(prefix)]
        base = Path(head).expanduser() if head else Path.cwd()
        if not base.is_dir():
            return

        try:
            entries = sorted(base.iterdir(), key=lambda p: p.name.lower())
        except OSError:
            return

        for entry in entries:
            if entry.name.startswith(".") and not prefix.startswith("."):
                continue
            if not entry.name.lower().startswith(prefix.lower()):
                continue
            suffix = "/" if entry.is_dir() else ""
            yield Completion(f"{head}{entry.name}{suffix}", start_position=-len(partial))
