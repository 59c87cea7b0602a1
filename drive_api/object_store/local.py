"""Object store backed by a local directory, with HMAC-signed URLs."""

import hashlib
import hmac
import time
from pathlib import Path
from typing import Optional
from urllib.parse import quote, urlencode

from drive_api.exceptions import ObjectNotFoundError, ObjectStoreError, ObjectStoreUnavailableError
from drive_api.object_store.base import DISPOSITION_ATTACHMENT, StoredObject
from drive_common.logging_config import get_logger

logger = get_logger(__name__)


class LocalObjectStore:
    """
    Stores objects as files under a root directory.

    Signed URLs point back at the API's /objects route, which checks the
    expiry and signature before serving bytes.
    """

    appends_extension = False

    def __init__(self, root: str, secret: str, public_base_url: str):
        self.root = Path(root)
        self._secret = secret.encode("utf-8")
        self.public_base_url = public_base_url.rstrip("/")

    def _path_for(self, key: str) -> Path:
        root = self.root.resolve()
        path = (root / key).resolve()
        try:
            path.relative_to(root)
        except ValueError:
            raise ObjectStoreError(f"Object key escapes storage root: {key}")
        return path

    def put(self, key: str, data: bytes, content_type: str) -> StoredObject:
        """
        Write object bytes to disk.

        Raises:
            ObjectStoreUnavailableError: If the write fails
        """
        path = self._path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise ObjectStoreUnavailableError(f"Failed to write object {key}: {e}") from e

        logger.debug(f"Stored object {key} ({len(data)} bytes, {content_type})")
        return StoredObject(key=key, location=str(path), size=len(data))

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug(f"Object already absent: {key}")
        except OSError as e:
            raise ObjectStoreUnavailableError(f"Failed to delete object {key}: {e}") from e

    def open_path(self, key: str) -> Path:
        """
        Resolve the on-disk path of an existing object.

        Raises:
            ObjectNotFoundError: If the object does not exist
        """
        path = self._path_for(key)
        if not path.is_file():
            raise ObjectNotFoundError(f"Object not found: {key}")
        return path

    def _signature(self, key: str, expires: int, disposition: str, filename: str) -> str:
        message = f"{key}\n{expires}\n{disposition}\n{filename}".encode("utf-8")
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

    def signed_url(
        self,
        key: str,
        expires_in: int,
        filename: str,
        disposition: str = DISPOSITION_ATTACHMENT,
    ) -> str:
        expires = int(time.time()) + expires_in
        query = urlencode({
            "expires": expires,
            "disposition": disposition,
            "filename": filename,
            "signature": self._signature(key, expires, disposition, filename),
        })
        return f"{self.public_base_url}/objects/{quote(key)}?{query}"

    def verify_signature(
        self,
        key: str,
        expires: int,
        disposition: str,
        filename: str,
        signature: str,
        now: Optional[float] = None,
    ) -> bool:
        """
        Check a signed URL's parameters; False if expired or tampered with.
        """
        current = time.time() if now is None else now
        if expires < current:
            return False
        expected = self._signature(key, expires, disposition, filename)
        return hmac.compare_digest(expected, signature)

    def ping(self) -> bool:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            return self.root.is_dir()
        except OSError as e:
            logger.warning(f"Local object store unavailable: {e}")
            return False
