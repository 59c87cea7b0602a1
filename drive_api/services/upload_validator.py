"""Upload request validation, run before any quota check or object store call."""

from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence

from drive_api.config import ALLOWED_MIME_TYPES, MAX_FILE_SIZE_BYTES, MAX_FILES_PER_UPLOAD
from drive_api.exceptions import InvalidFileError, TooManyFilesError, ValidationError
from drive_common.logging_config import get_logger

logger = get_logger(__name__)

REASON_TOO_LARGE = "too large"
REASON_UNSUPPORTED_TYPE = "unsupported type"


@dataclass(frozen=True)
class UploadCandidate:
    """
    One file of an upload request: declared name, MIME type and byte size,
    plus the bytes themselves.

    Request handlers pass a reader instead of data so the bytes are only
    pulled into memory once the batch has passed validation.
    """
    name: str
    mime_type: str
    size: int
    data: bytes = b""
    reader: Optional[Callable[[], Awaitable[bytes]]] = None

    @classmethod
    def from_bytes(cls, name: str, mime_type: str, data: bytes) -> "UploadCandidate":
        return cls(name=name, mime_type=mime_type, size=len(data), data=data)

    async def load(self) -> "UploadCandidate":
        if self.reader is None:
            return self
        return replace(self, data=await self.reader(), reader=None)


class UploadValidator:
    def __init__(
        self,
        max_files: int = MAX_FILES_PER_UPLOAD,
        max_file_size: int = MAX_FILE_SIZE_BYTES,
        allowed_mime_types: Iterable[str] = ALLOWED_MIME_TYPES,
    ):
        self.max_files = max_files
        self.max_file_size = max_file_size
        allowed = [mime.strip().lower() for mime in allowed_mime_types]
        self._exact_types = {mime for mime in allowed if not mime.endswith("/*")}
        self._wildcard_types = {mime[:-1] for mime in allowed if mime.endswith("/*")}

    def is_allowed_type(self, mime_type: Optional[str]) -> bool:
        """
        Check a MIME type against the allow-list; 'image/*' style entries
        match a whole top-level type. Parameters such as charset are ignored.
        """
        if not mime_type:
            return False
        base = mime_type.split(";", 1)[0].strip().lower()
        if base in self._exact_types:
            return True
        return any(base.startswith(prefix) for prefix in self._wildcard_types)

    def rejection_reasons(self, candidate: UploadCandidate) -> List[str]:
        reasons = []
        if candidate.size > self.max_file_size:
            reasons.append(REASON_TOO_LARGE)
        if not self.is_allowed_type(candidate.mime_type):
            reasons.append(REASON_UNSUPPORTED_TYPE)
        return reasons

    def validate(
        self,
        candidates: Sequence[UploadCandidate],
        folder_id: Optional[int] = None,
    ) -> Sequence[UploadCandidate]:
        """
        Validate an upload batch without side effects.

        Args:
            candidates: Files of the request
            folder_id: Optional target folder id

        Returns:
            The candidates, unchanged

        Raises:
            ValidationError: If no files were sent or the folder id is malformed
            TooManyFilesError: If the batch exceeds max_files
            InvalidFileError: Listing every file that is too large or of an
                              unsupported type
        """
        if not candidates:
            raise ValidationError("No files uploaded")

        if len(candidates) > self.max_files:
            logger.warning(f"Upload rejected: {len(candidates)} files exceeds limit of {self.max_files}")
            raise TooManyFilesError(received=len(candidates), max_files=self.max_files)

        if folder_id is not None and folder_id < 1:
            raise ValidationError("Invalid folder id", details={"folderId": folder_id})

        invalid_files = []
        for candidate in candidates:
            reasons = self.rejection_reasons(candidate)
            if reasons:
                invalid_files.append({"name": candidate.name, "reasons": reasons})

        if invalid_files:
            logger.warning(f"Upload rejected: {len(invalid_files)} invalid files")
            raise InvalidFileError(invalid_files)

        return candidates
