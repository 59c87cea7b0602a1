"""Helpers for lenient query and form parameters."""

from typing import Optional

from drive_api.database import MAX_ROW_ID
from drive_api.exceptions import NotFoundError, ValidationError


def parse_optional_id(value: Optional[str], field: str) -> Optional[int]:
    """
    Parse an optional numeric id; empty, 'null' and 'root' mean no id.

    Raises:
        ValidationError: If the value is not an integer in [1, MAX_ROW_ID]
    """
    if value is None:
        return None
    value = value.strip()
    if value.lower() in ("", "null", "root"):
        return None
    try:
        parsed = int(value)
    except ValueError:
        raise ValidationError(f"Invalid {field}", details={field: value})
    if not 1 <= parsed <= MAX_ROW_ID:
        raise ValidationError(f"Invalid {field}", details={field: value})
    return parsed


def file_id_path(file_id: int) -> int:
    """
    Path parameter for /files/{file_id}; ids no row can have are not found.
    """
    if not 1 <= file_id <= MAX_ROW_ID:
        raise NotFoundError(f"File {file_id} not found")
    return file_id


def folder_id_path(folder_id: int) -> int:
    """
    Path parameter for /folders/{folder_id}; ids no row can have are not found.
    """
    if not 1 <= folder_id <= MAX_ROW_ID:
        raise NotFoundError(f"Folder {folder_id} not found")
    return folder_id
