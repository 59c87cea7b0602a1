"""Service layer for business logic."""

from drive_api.services.auth_service import AuthService
from drive_api.services.file_service import FileService, SignedUrl
from drive_api.services.folder_service import FolderDeletion, FolderService
from drive_api.services.query_engine import FileQueryEngine, ListingRequest, ListingResult, Pagination
from drive_api.services.quota_service import QuotaService, UsageSummary
from drive_api.services.upload_pipeline import UploadBatchResult, UploadOutcome, UploadPipeline
from drive_api.services.upload_service import UploadService
from drive_api.services.upload_validator import UploadCandidate, UploadValidator

__all__ = [
    "AuthService",
    "FileQueryEngine",
    "FileService",
    "FolderDeletion",
    "FolderService",
    "ListingRequest",
    "ListingResult",
    "Pagination",
    "QuotaService",
    "SignedUrl",
    "UploadBatchResult",
    "UploadCandidate",
    "UploadOutcome",
    "UploadPipeline",
    "UploadService",
    "UploadValidator",
    "UsageSummary",
]
