"""Service wiring and the FastAPI dependencies that hand services to routes."""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from drive_api.config import FOLDER_DELETE_POLICY, STORAGE_QUOTA_BYTES
from drive_api.database import Database
from drive_api.object_store import ObjectStore
from drive_api.repositories.file_repository import SqliteFileRepository
from drive_api.repositories.folder_repository import SqliteFolderRepository
from drive_api.repositories.user_repository import SqliteUserRepository
from drive_api.retry import RetryPolicy
from drive_api.services.auth_service import AuthService
from drive_api.services.file_service import FileService
from drive_api.services.folder_service import FolderService
from drive_api.services.query_engine import FileQueryEngine
from drive_api.services.quota_service import QuotaService
from drive_api.services.upload_pipeline import UploadPipeline
from drive_api.services.upload_service import UploadService
from drive_api.services.upload_validator import UploadValidator


@dataclass
class Services:
    """
    Everything one application instance needs, built once at startup.
    """
    database: Database
    object_store: ObjectStore
    auth: AuthService
    files: FileService
    folders: FolderService
    queries: FileQueryEngine
    quota: QuotaService
    uploads: UploadService


def build_services(
    database: Database,
    object_store: ObjectStore,
    retry_policy: Optional[RetryPolicy] = None,
    validator: Optional[UploadValidator] = None,
    quota_limit_bytes: Optional[int] = None,
    folder_delete_policy: Optional[str] = None,
) -> Services:
    """
    Wire repositories and services around one database and object store.
    """
    retry_policy = retry_policy or RetryPolicy()
    user_repo = SqliteUserRepository(database)
    folder_repo = SqliteFolderRepository(database)
    file_repo = SqliteFileRepository(database)

    if quota_limit_bytes is None:
        quota_limit_bytes = STORAGE_QUOTA_BYTES
    quota = QuotaService(file_repo, quota_limit_bytes)
    files = FileService(file_repo, folder_repo, object_store, delete_retry=retry_policy)
    folders = FolderService(
        folder_repo, file_repo, files, delete_policy=folder_delete_policy or FOLDER_DELETE_POLICY
    )
    pipeline = UploadPipeline(object_store, file_repo, retry_policy=retry_policy)

    return Services(
        database=database,
        object_store=object_store,
        auth=AuthService(user_repo),
        files=files,
        folders=folders,
        queries=FileQueryEngine(file_repo),
        quota=quota,
        uploads=UploadService(validator or UploadValidator(), quota, pipeline, folder_repo),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_auth_service(request: Request) -> AuthService:
    return get_services(request).auth


def get_file_service(request: Request) -> FileService:
    return get_services(request).files


def get_folder_service(request: Request) -> FolderService:
    return get_services(request).folders


def get_query_engine(request: Request) -> FileQueryEngine:
    return get_services(request).queries


def get_quota_service(request: Request) -> QuotaService:
    return get_services(request).quota


def get_upload_service(request: Request) -> UploadService:
    return get_services(request).uploads


def get_object_store(request: Request) -> ObjectStore:
    return get_services(request).object_store
