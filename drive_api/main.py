"""Entry point for the drive API service."""

import asyncio
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from drive_api import config
from drive_api.database import Database
from drive_api.dependencies import Services, build_services
from drive_api.exceptions import (
    AccessDeniedError,
    AuthRequiredError,
    DriveException,
    FileTrashedError,
    FolderNotEmptyError,
    InvalidCredentialsError,
    NotFoundError,
    ObjectNotFoundError,
    ObjectStoreError,
    ObjectStoreUnavailableError,
    QuotaExceededError,
    UserAlreadyExistsError,
    ValidationError,
)
from drive_api.object_store import ObjectStore, build_object_store
from drive_api.retry import RetryPolicy
from drive_api.routes import auth_router, file_router, folder_router, object_router, user_router
from drive_api.services.upload_validator import UploadValidator
from drive_api.trash_purge import TrashPurger
from drive_common.logging_config import get_logger, setup_logging

setup_logging('drive_api')
logger = get_logger(__name__)


def _request_id(request: Request) -> str:
    return getattr(request.state, 'request_id', 'unknown')


def _error_response(request: Request, exc: DriveException, status_code: int) -> JSONResponse:
    content = {"error": str(exc), "code": exc.code}
    content.update(exc.extra())
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


async def auth_required_handler(request: Request, exc: AuthRequiredError):
    logger.warning(
        f"Authentication required: {exc} [request_id={_request_id(request)}] path={request.url.path}"
    )
    return _error_response(request, exc, status.HTTP_401_UNAUTHORIZED)


async def invalid_credentials_handler(request: Request, exc: InvalidCredentialsError):
    logger.warning(
        f"Invalid credentials error: {exc} [request_id={_request_id(request)}] path={request.url.path}"
    )
    return _error_response(request, exc, status.HTTP_401_UNAUTHORIZED)


async def access_denied_handler(request: Request, exc: AccessDeniedError):
    logger.warning(
        f"Access denied: {exc} [request_id={_request_id(request)}] path={request.url.path}"
    )
    return _error_response(request, exc, status.HTTP_403_FORBIDDEN)


async def user_already_exists_handler(request: Request, exc: UserAlreadyExistsError):
    logger.warning(
        f"User already exists error: {exc} [request_id={_request_id(request)}] path={request.url.path}"
    )
    return _error_response(request, exc, status.HTTP_409_CONFLICT)


async def validation_error_handler(request: Request, exc: ValidationError):
    logger.warning(
        f"Validation error ({exc.code}): {exc} [request_id={_request_id(request)}] path={request.url.path}"
    )
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning(
        f"Malformed request: {exc.errors()} [request_id={_request_id(request)}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({
            "error": "Malformed request",
            "code": ValidationError.code,
            "details": exc.errors(),
        }),
    )


async def quota_exceeded_handler(request: Request, exc: QuotaExceededError):
    logger.warning(
        f"Quota exceeded error: {exc} [request_id={_request_id(request)}] path={request.url.path}"
    )
    return _error_response(request, exc, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE)


async def not_found_handler(request: Request, exc: NotFoundError):
    logger.warning(
        f"Not found error: {exc} [request_id={_request_id(request)}] path={request.url.path}"
    )
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND)


async def object_not_found_handler(request: Request, exc: ObjectNotFoundError):
    logger.warning(
        f"Object not found error: {exc} [request_id={_request_id(request)}] path={request.url.path}"
    )
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND)


async def file_trashed_handler(request: Request, exc: FileTrashedError):
    logger.warning(
        f"File trashed error: {exc} [request_id={_request_id(request)}] path={request.url.path}"
    )
    return _error_response(request, exc, status.HTTP_410_GONE)


async def folder_not_empty_handler(request: Request, exc: FolderNotEmptyError):
    logger.warning(
        f"Folder not empty error: {exc} [request_id={_request_id(request)}] path={request.url.path}"
    )
    return _error_response(request, exc, status.HTTP_409_CONFLICT)


async def object_store_unavailable_handler(request: Request, exc: ObjectStoreUnavailableError):
    logger.error(
        f"Object store unavailable error: {exc} [request_id={_request_id(request)}] path={request.url.path}",
        exc_info=True
    )
    return _error_response(request, exc, status.HTTP_503_SERVICE_UNAVAILABLE)


async def object_store_error_handler(request: Request, exc: ObjectStoreError):
    logger.error(
        f"Object store error: {exc} [request_id={_request_id(request)}] path={request.url.path}",
        exc_info=True
    )
    return _error_response(request, exc, status.HTTP_502_BAD_GATEWAY)


async def drive_exception_handler(request: Request, exc: DriveException):
    logger.error(
        f"Drive exception: {exc} [request_id={_request_id(request)}] path={request.url.path}",
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc), "code": "INTERNAL_ERROR"}
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled exception: {exc} [request_id={_request_id(request)}] path={request.url.path}",
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "code": "INTERNAL_ERROR"}
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthRequiredError, auth_required_handler)
    app.add_exception_handler(InvalidCredentialsError, invalid_credentials_handler)
    app.add_exception_handler(AccessDeniedError, access_denied_handler)
    app.add_exception_handler(UserAlreadyExistsError, user_already_exists_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(QuotaExceededError, quota_exceeded_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ObjectNotFoundError, object_not_found_handler)
    app.add_exception_handler(FileTrashedError, file_trashed_handler)
    app.add_exception_handler(FolderNotEmptyError, folder_not_empty_handler)
    app.add_exception_handler(ObjectStoreUnavailableError, object_store_unavailable_handler)
    app.add_exception_handler(ObjectStoreError, object_store_error_handler)
    app.add_exception_handler(DriveException, drive_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Initialize the database and run the trash purge task for the app's lifetime.
    """
    services: Services = app.state.services
    logger.info("Drive API starting up...")

    services.database.init_schema()
    logger.info("Database initialized")

    purger: TrashPurger = app.state.trash_purger
    if app.state.run_background_tasks:
        await purger.start()

    try:
        yield
    finally:
        logger.info("Drive API shutting down...")
        await purger.stop()


def create_app(
    database_path: Optional[str] = None,
    object_store: Optional[ObjectStore] = None,
    retry_policy: Optional[RetryPolicy] = None,
    validator: Optional[UploadValidator] = None,
    quota_limit_bytes: Optional[int] = None,
    folder_delete_policy: Optional[str] = None,
    run_background_tasks: bool = True,
) -> FastAPI:
    """
    Build an application around one database and object store.

    Every argument defaults to the environment configuration; tests pass
    a temporary database and a fake object store.
    """
    database = Database(database_path or config.DATABASE_PATH)
    services = build_services(
        database=database,
        object_store=object_store or build_object_store(),
        retry_policy=retry_policy,
        validator=validator,
        quota_limit_bytes=quota_limit_bytes,
        folder_delete_policy=folder_delete_policy,
    )

    app = FastAPI(
        title="Cloud Drive API",
        description="Personal cloud file storage with folders, views, search and quotas",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.services = services
    app.state.trash_purger = TrashPurger(services.files.file_repo, services.files)
    app.state.run_background_tasks = run_background_tasks

    app.middleware("http")(log_requests)
    register_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(file_router)
    app.include_router(folder_router)
    app.include_router(user_router)
    app.include_router(object_router)

    @app.get("/")
    async def root():
        """
        Root endpoint for health check.
        """
        return {"message": "Cloud Drive API", "status": "running"}

    @app.get("/health/ready")
    async def ready_check():
        """
        Readiness check endpoint.
        Verifies database and object store connectivity.
        """
        db_ok = services.database.ping()
        store_ok = await asyncio.to_thread(services.object_store.ping)

        ready = db_ok and store_ok
        status_code = status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE

        return JSONResponse(
            status_code=status_code,
            content={
                "ready": ready,
                "database": "ok" if db_ok else "error",
                "objectStore": "ok" if store_ok else "error",
            }
        )

    return app


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "drive_api.main:create_app",
        factory=True,
        host=config.API_HOST,
        port=config.API_PORT,
    )


if __name__ == "__main__":
    main()
