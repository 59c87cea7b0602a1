"""Pydantic schemas for the current-user endpoint."""

from datetime import datetime

from drive_api.schemas.common import CamelModel


class UserResponse(CamelModel):
    """Profile and storage usage of the authenticated user."""
    user_id: str
    username: str
    created_at: datetime
    storage_used: int
    storage_total: int
    storage_percentage: float
