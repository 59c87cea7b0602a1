"""API routes."""

from drive_api.routes.auth_routes import router as auth_router
from drive_api.routes.file_routes import router as file_router
from drive_api.routes.folder_routes import router as folder_router
from drive_api.routes.object_routes import router as object_router
from drive_api.routes.user_routes import router as user_router

__all__ = [
    "auth_router",
    "file_router",
    "folder_router",
    "object_router",
    "user_router",
]
