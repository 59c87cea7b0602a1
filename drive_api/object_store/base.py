"""Object store interface used by the upload pipeline and file routes."""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable
from urllib.parse import quote

DISPOSITION_ATTACHMENT = "attachment"
DISPOSITION_INLINE = "inline"


@dataclass(frozen=True)
class StoredObject:
    """
    Result of a successful put: the key to address the object with and the
    canonical location recorded on the file row.
    """
    key: str
    location: str
    size: int


@runtime_checkable
class ObjectStore(Protocol):
    """
    Opaque blob storage with time-limited signed retrieval URLs.

    Implementations are synchronous; callers on the event loop wrap them in
    asyncio.to_thread.
    """

    appends_extension: bool

    def put(self, key: str, data: bytes, content_type: str) -> StoredObject:
        ...

    def delete(self, key: str) -> None:
        ...

    def signed_url(
        self,
        key: str,
        expires_in: int,
        filename: str,
        disposition: str = DISPOSITION_ATTACHMENT,
    ) -> str:
        ...

    def ping(self) -> bool:
        ...


def content_disposition(disposition: str, filename: str) -> str:
    """
    Build a Content-Disposition header value.

    Non-ASCII names use the RFC 5987 filename* form.
    """
    safe = filename.replace("\\", "_").replace('"', "'")
    try:
        safe.encode("ascii")
    except UnicodeEncodeError:
        return f"{disposition}; filename*=utf-8''{quote(safe)}"
    return f'{disposition}; filename="{safe}"'
