"""Authentication API routes."""

from fastapi import APIRouter, Depends, status

from drive_api.dependencies import get_auth_service
from drive_api.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
)
from drive_api.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Register a new user account.

    Parameters:
        - username: Unique username (must not already exist)
        - password: User password (will be hashed before storage)

    Returns:
        - apiKey: Generated API Key with 'drv_' prefix
        - userId: UUID of created user

    Raises:
        - 400: Missing username or password
        - 409: Username already exists
    """
    api_key, user_id = auth_service.register_user(request.username, request.password)
    return RegisterResponse(api_key=api_key, user_id=user_id)


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Authenticate user and generate new API Key.

    Returns:
        - apiKey: New API Key (replaces previous key)

    Raises:
        - 401: Invalid credentials
    """
    api_key = auth_service.login_user(request.username, request.password)
    return LoginResponse(api_key=api_key)
