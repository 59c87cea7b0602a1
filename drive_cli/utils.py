"""Utility functions for CLI output."""

from typing import List, Sequence

from drive_cli.constants import GREEN, RESET


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"


def format_timestamp(value: str) -> str:
    """Shorten an ISO timestamp to 'YYYY-MM-DD HH:MM'."""
    if not value:
        return ""
    return value.replace('T', ' ')[:16]


def format_table(headers: Sequence[str], rows: List[Sequence[str]]) -> str:
    """
    Render rows as a left-aligned plain-text table.
    """
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    def render(cells: Sequence[str]) -> str:
        return "  ".join(cell.ljust(widths[i]) for i, cell in enumerate(cells)).rstrip()

    lines = [render(headers), render(['-' * w for w in widths])]
    lines.extend(render(row) for row in rows)
    return "\n".join(lines)


def format_file_rows(files: List[dict]) -> str:
    """Format file metadata dicts from the API as a table."""
    rows = []
    for f in files:
        marker = "*" if f.get("isStarred") else " "
        rows.append([
            str(f['id']),
            f"{marker} {f['name']}",
            f.get('mimeType', ''),
            format_file_size(f.get('size', 0)),
            format_timestamp(f.get('updatedAt', '')),
        ])
    return format_table(["ID", "  Name", "Type", "Size", "Modified"], rows)


def format_usage(used: int, total: int, percentage: float) -> str:
    """Render storage usage with a simple bar."""
    width = 30
    filled = min(width, int(round(width * percentage / 100)))
    bar = f"{GREEN}{'#' * filled}{RESET}{'.' * (width - filled)}"
    return f"[{bar}] {format_file_size(used)} of {format_file_size(total)} used ({percentage:.2f}%)"
