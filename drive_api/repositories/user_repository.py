"""User repository for database operations."""

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from drive_api.database import Database
from drive_api.utils import from_timestamp, to_timestamp
from drive_common.logging_config import get_logger

logger = get_logger(__name__)

_USER_COLUMNS = "user_id, username, password_hash, api_key, created_at, key_updated_at"


@dataclass
class User:
    user_id: str
    username: str
    password_hash: str
    api_key: Optional[str]
    created_at: datetime
    key_updated_at: Optional[datetime]


def _row_to_user(row: sqlite3.Row) -> User:
    return User(
        user_id=row["user_id"],
        username=row["username"],
        password_hash=row["password_hash"],
        api_key=row["api_key"],
        created_at=from_timestamp(row["created_at"]),
        key_updated_at=from_timestamp(row["key_updated_at"]),
    )


class SqliteUserRepository:
    def __init__(self, db: Database):
        self.db = db

    def create_user(
        self,
        user_id: str,
        username: str,
        password_hash: str,
        api_key: str,
        created_at: datetime,
    ) -> User:
        logger.debug(f"Creating user: {username} [user_id={user_id}]")

        with self.db.connection() as conn:
            try:
                conn.execute(
                    f"INSERT INTO users ({_USER_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                    (user_id, username, password_hash, api_key,
                     to_timestamp(created_at), to_timestamp(created_at))
                )
                conn.commit()
            except sqlite3.Error as e:
                logger.error(f"Failed to create user {username}: {e}", exc_info=True)
                raise

        logger.info(f"User created successfully: {username} [user_id={user_id}]")
        return User(
            user_id=user_id,
            username=username,
            password_hash=password_hash,
            api_key=api_key,
            created_at=created_at,
            key_updated_at=created_at,
        )

    def get_by_username(self, username: str) -> Optional[User]:
        logger.debug(f"Fetching user by username: {username}")
        with self.db.connection() as conn:
            row = conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE username = ?",
                (username,)
            ).fetchone()

        if row is None:
            logger.debug(f"User not found: {username}")
            return None
        return _row_to_user(row)

    def get_by_api_key(self, api_key: str) -> Optional[User]:
        logger.debug("Fetching user by API key")
        with self.db.connection() as conn:
            row = conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE api_key = ?",
                (api_key,)
            ).fetchone()

        if row is None:
            logger.debug("User not found for provided API key")
            return None
        return _row_to_user(row)

    def get_by_user_id(self, user_id: str) -> Optional[User]:
        with self.db.connection() as conn:
            row = conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE user_id = ?",
                (user_id,)
            ).fetchone()

        return _row_to_user(row) if row is not None else None

    def update_api_key(self, user_id: str, new_api_key: str, updated_at: datetime) -> None:
        logger.debug(f"Updating API key [user_id={user_id}]")
        with self.db.connection() as conn:
            try:
                conn.execute(
                    "UPDATE users SET api_key = ?, key_updated_at = ? WHERE user_id = ?",
                    (new_api_key, to_timestamp(updated_at), user_id)
                )
                conn.commit()
            except sqlite3.Error as e:
                logger.error(f"Failed to update API key [user_id={user_id}]: {e}", exc_info=True)
                raise

        logger.info(f"API key updated successfully [user_id={user_id}]")
