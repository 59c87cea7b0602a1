"""Pydantic schemas for authentication endpoints."""

from drive_api.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    """Request model for user registration."""
    username: str
    password: str


class RegisterResponse(CamelModel):
    """Response model for user registration."""
    api_key: str
    user_id: str


class LoginRequest(CamelModel):
    """Request model for user login."""
    username: str
    password: str


class LoginResponse(CamelModel):
    """Response model for user login."""
    api_key: str
