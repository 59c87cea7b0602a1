"""Authentication service for business logic."""

import sqlite3
from typing import Callable, Optional, Tuple

from drive_api.exceptions import InvalidCredentialsError, NotFoundError, UserAlreadyExistsError, ValidationError
from drive_api.repositories.interfaces import UserRepository
from drive_api.repositories.user_repository import User
from drive_api.utils import generate_uuid, utc_now
from drive_common.logging_config import get_logger

logger = get_logger(__name__)


class AuthService:
    def __init__(
        self,
        user_repo: UserRepository,
        hash_password: Optional[Callable[[str], str]] = None,
        verify_password: Optional[Callable[[str, str], bool]] = None,
        generate_api_key: Optional[Callable[[], str]] = None,
    ):
        from drive_api import auth

        self.user_repo = user_repo
        self.hash_password = hash_password or auth.hash_password
        self.verify_password = verify_password or auth.verify_password
        self.generate_api_key = generate_api_key or auth.generate_api_key

    def register_user(self, username: str, password: str) -> Tuple[str, str]:
        username = (username or "").strip()
        if not username or not password:
            raise ValidationError("Username and password are required")

        logger.info(f"Attempting to register user: {username}")
        if self.user_repo.get_by_username(username) is not None:
            logger.warning(f"Registration failed: username '{username}' already exists")
            raise UserAlreadyExistsError(f"Username '{username}' already exists")

        user_id = generate_uuid()
        api_key = self.generate_api_key()

        try:
            self.user_repo.create_user(
                user_id=user_id,
                username=username,
                password_hash=self.hash_password(password),
                api_key=api_key,
                created_at=utc_now(),
            )
        except sqlite3.IntegrityError:
            logger.warning(f"Registration failed due to integrity error: username '{username}'")
            raise UserAlreadyExistsError(f"Username '{username}' already exists")

        logger.info(f"Successfully registered user: {username} [user_id={user_id}]")
        return api_key, user_id

    def login_user(self, username: str, password: str) -> str:
        """
        Check credentials and rotate the user's API key.

        Returns:
            The new API key; the previous one stops working
        """
        logger.info(f"Login attempt for user: {username}")
        user = self.user_repo.get_by_username(username)
        if user is None:
            logger.warning(f"Login failed: username '{username}' not found")
            raise InvalidCredentialsError("Invalid username or password")

        if not self.verify_password(password, user.password_hash):
            logger.warning(f"Login failed: invalid password for username '{username}'")
            raise InvalidCredentialsError("Invalid username or password")

        new_api_key = self.generate_api_key()
        self.user_repo.update_api_key(user.user_id, new_api_key, utc_now())
        logger.info(f"Successfully logged in user: {username} [user_id={user.user_id}]")
        return new_api_key

    def validate_api_key(self, api_key: str) -> Optional[str]:
        user = self.user_repo.get_by_api_key(api_key)
        if user is None:
            logger.warning("API key validation failed: invalid key")
            return None
        return user.user_id

    def get_user(self, user_id: str) -> User:
        user = self.user_repo.get_by_user_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user
