"""Enumerations for listing views, sorting, upload batches and folder deletion."""

from enum import Enum
from typing import Optional


class View(str, Enum):
    """
    Query mode over a user's files.
    """
    MY_DRIVE = "my-drive"
    RECENT = "recent"
    STARRED = "starred"
    TRASH = "trash"
    SEARCH = "search"

    @classmethod
    def parse(cls, value: Optional[str]) -> "View":
        """
        Parse a view name leniently ('My Drive', 'my_drive', 'Recent', ...).

        Unknown or missing names fall back to MY_DRIVE.
        """
        if not value:
            return cls.MY_DRIVE
        normalized = value.strip().lower().replace(" ", "-").replace("_", "-")
        if normalized == "mydrive":
            normalized = "my-drive"
        for view in cls:
            if view.value == normalized:
                return view
        return cls.MY_DRIVE


class SortField(str, Enum):
    NAME = "name"
    SIZE = "size"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["SortField"]:
        """
        Parse a sort field name; unknown names fall back to NAME, None stays None.
        """
        if value is None or value == "":
            return None
        for field in cls:
            if field.value.lower() == value.strip().lower():
                return field
        return cls.NAME


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["SortOrder"]:
        if value is None:
            return None
        normalized = value.strip().lower()
        if normalized in (cls.ASC.value, cls.DESC.value):
            return cls(normalized)
        return None


class FolderDeletePolicy(str, Enum):
    """
    What deleting a folder does to its contents.
    """
    REJECT = "reject"
    CASCADE = "cascade"
    ORPHAN = "orphan"


class UploadState(str, Enum):
    PENDING = "pending"
    UPLOADING = "uploading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class BatchStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"
