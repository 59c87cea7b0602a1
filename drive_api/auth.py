"""Authentication and security utilities."""

import uuid
from typing import Optional

import bcrypt
from fastapi import Depends, Header

from drive_api.config import API_KEY_PREFIX
from drive_api.dependencies import get_auth_service
from drive_api.exceptions import AuthRequiredError
from drive_api.services.auth_service import AuthService

BEARER_PREFIX = "Bearer "


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Bcrypt hash of the password
    """
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Returns:
        True if password matches hash, False otherwise
    """
    return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))


def generate_api_key() -> str:
    """
    Generate a new API Key with the configured prefix.

    Returns:
        API Key string in format: {prefix}{uuid4}
    """
    return f"{API_KEY_PREFIX}{uuid.uuid4()}"


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    api_key = authorization[len(BEARER_PREFIX):].strip()
    return api_key or None


async def get_current_user(
    authorization: Optional[str] = Header(None),
    auth_service: AuthService = Depends(get_auth_service),
) -> str:
    """
    FastAPI dependency to validate the API Key and extract user_id.

    Args:
        authorization: Authorization header value (format: "Bearer <api_key>")

    Returns:
        user_id of the authenticated user

    Raises:
        AuthRequiredError: If the header is missing, malformed or the key is unknown
    """
    api_key = parse_bearer(authorization)
    if api_key is None:
        raise AuthRequiredError("Authentication required")

    user_id = auth_service.validate_api_key(api_key)
    if user_id is None:
        raise AuthRequiredError("Invalid API key")
    return user_id
