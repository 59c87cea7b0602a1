"""Utility helper functions for the drive API."""

import re
import uuid
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Optional

_UNSAFE_OBJECT_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """
    Current time as a timezone-aware UTC datetime.
    """
    return datetime.now(timezone.utc)


def to_timestamp(value: datetime) -> str:
    """
    Serialize a datetime for storage.

    Fixed-width ISO strings keep lexicographic order equal to time order,
    which the listing queries rely on when sorting by timestamp columns.
    """
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f+00:00")


def from_timestamp(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromisoformat(value)


def sanitize_object_name(original_name: str, strip_extension: bool = False) -> str:
    """
    Reduce a user-supplied filename to characters safe inside an object key.

    Args:
        original_name: Filename as uploaded
        strip_extension: Drop the extension (for stores that append their own)

    Returns:
        Sanitized name, never empty
    """
    name = PurePosixPath(original_name.replace("\\", "/")).name
    if strip_extension:
        suffix = PurePosixPath(name).suffix
        if suffix and suffix != name:
            name = name[: -len(suffix)]
    cleaned = _UNSAFE_OBJECT_CHARS.sub("_", name).strip("._")
    return cleaned or "file"


def build_object_key(
    prefix: str,
    user_id: str,
    original_name: str,
    now: datetime,
    strip_extension: bool = False,
) -> str:
    """
    Build a user-scoped, collision-resistant object key.

    Format: {prefix}/{user_id}/{epoch_millis}-{short_uuid}-{sanitized_name}
    """
    millis = int(now.timestamp() * 1000)
    unique = uuid.uuid4().hex[:8]
    name = sanitize_object_name(original_name, strip_extension=strip_extension)
    parts = [p for p in (prefix.strip("/"), user_id) if p]
    return "/".join(parts + [f"{millis}-{unique}-{name}"])


def escape_like(term: str) -> str:
    """
    Escape LIKE wildcards so a search term matches literally (ESCAPE '\\').
    """
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


INVALID_NAME_CHARS = '<>:"/\\|?*'


def name_problem(name: Optional[str], max_length: int) -> Optional[str]:
    """
    Describe why a file or folder name is unacceptable.

    Returns:
        A human-readable reason, or None if the name is valid
    """
    if name is None or not name.strip():
        return "Name must not be empty"
    if len(name) > max_length:
        return f"Name must be at most {max_length} characters"
    bad = sorted({ch for ch in name if ch in INVALID_NAME_CHARS})
    if bad:
        return f"Name contains invalid characters: {' '.join(bad)}"
    return None
