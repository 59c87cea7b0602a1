"""Custom exception classes for the drive API."""

from typing import Any, Dict, List, Optional


class DriveException(Exception):
    """
    Base exception class for all drive errors.
    """
    code = "INTERNAL_ERROR"

    def extra(self) -> Dict[str, Any]:
        """
        Additional fields merged into the JSON error body.
        """
        return {}


class AuthRequiredError(DriveException):
    """
    Raised when a request carries no API key or an unknown one.
    """
    code = "AUTH_REQUIRED"


class UserAlreadyExistsError(DriveException):
    """
    Raised when attempting to register a username that already exists.
    """
    code = "USER_ALREADY_EXISTS"


class InvalidCredentialsError(DriveException):
    """
    Raised when login credentials are invalid.
    """
    code = "INVALID_CREDENTIALS"


class ValidationError(DriveException):
    """
    Raised when client input breaks a shape or ownership rule.
    """
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.details = details

    def extra(self) -> Dict[str, Any]:
        return {"details": self.details}


class TooManyFilesError(ValidationError):
    """
    Raised when an upload batch holds more files than allowed per request.
    """
    code = "TOO_MANY_FILES"

    def __init__(self, received: int, max_files: int):
        super().__init__(
            f"Too many files: received {received}, at most {max_files} allowed per upload",
            details={"received": received, "maxFiles": max_files},
        )
        self.received = received
        self.max_files = max_files


class InvalidFileError(ValidationError):
    """
    Raised once per batch, listing every file that is too large or of an
    unsupported type.
    """
    code = "INVALID_FILE"

    def __init__(self, invalid_files: List[Dict[str, Any]]):
        names = ", ".join(entry["name"] for entry in invalid_files)
        super().__init__(f"Invalid files: {names}", details=invalid_files)
        self.invalid_files = invalid_files


class QuotaExceededError(DriveException):
    """
    Raised when an upload batch would take a user over the storage quota.
    """
    code = "QUOTA_EXCEEDED"

    def __init__(self, current_usage: int, limit: int, requested: int):
        super().__init__(
            f"Storage quota exceeded: {current_usage} bytes used, "
            f"{requested} bytes requested, limit is {limit} bytes"
        )
        self.current_usage = current_usage
        self.limit = limit
        self.requested = requested

    def extra(self) -> Dict[str, Any]:
        return {
            "currentUsage": self.current_usage,
            "limit": self.limit,
            "requested": self.requested,
        }


class NotFoundError(DriveException):
    """
    Raised when a file or folder does not exist or belongs to another user.
    """
    code = "NOT_FOUND"


class FileTrashedError(DriveException):
    """
    Raised when a trashed file is requested for download or preview.
    """
    code = "FILE_TRASHED"


class FolderNotEmptyError(DriveException):
    """
    Raised when deleting a non-empty folder under the reject policy.
    """
    code = "FOLDER_NOT_EMPTY"

    def __init__(self, folder_id: int, file_count: int, folder_count: int):
        super().__init__(
            f"Folder {folder_id} is not empty ({file_count} files, {folder_count} folders)"
        )
        self.folder_id = folder_id
        self.file_count = file_count
        self.folder_count = folder_count

    def extra(self) -> Dict[str, Any]:
        return {"fileCount": self.file_count, "folderCount": self.folder_count}


class UploadFailedError(DriveException):
    """
    Raised when a single file's external upload exhausts its retries.
    """
    code = "UPLOAD_FAILED"

    def __init__(self, file_name: str, attempts: int, cause: Exception):
        super().__init__(f"Upload of '{file_name}' failed after {attempts} attempts: {cause}")
        self.file_name = file_name
        self.attempts = attempts
        self.cause = cause


class ObjectStoreError(DriveException):
    """
    Raised when the object store rejects a request.
    """
    code = "OBJECT_STORE_ERROR"


class ObjectStoreUnavailableError(ObjectStoreError):
    """
    Raised when the object store is unreachable or reports a transient failure.
    """
    code = "OBJECT_STORE_UNAVAILABLE"


class ObjectNotFoundError(ObjectStoreError):
    """
    Raised when an object key does not exist in the object store.
    """
    code = "OBJECT_NOT_FOUND"


class InternalError(DriveException):
    """
    Raised on unexpected metadata store failures.
    """
    code = "INTERNAL_ERROR"


class AccessDeniedError(DriveException):
    """
    Raised when a signed object URL is expired or its signature does not match.
    """
    code = "ACCESS_DENIED"
