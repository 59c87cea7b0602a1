"""Database schema and connection management for SQLite."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from drive_common.logging_config import get_logger

logger = get_logger(__name__)

# Largest value an SQLite INTEGER column can hold
MAX_ROW_ID = 2**63 - 1

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS users (
        user_id TEXT PRIMARY KEY,
        username TEXT UNIQUE NOT NULL,
        password_hash TEXT NOT NULL,
        api_key TEXT UNIQUE,
        created_at TEXT NOT NULL,
        key_updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS folders (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        parent_id INTEGER,
        user_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY(user_id) REFERENCES users(user_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS files (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        original_name TEXT NOT NULL,
        mime_type TEXT NOT NULL CHECK (length(mime_type) > 0),
        size INTEGER NOT NULL CHECK (size >= 0),
        path TEXT NOT NULL,
        object_key TEXT NOT NULL,
        folder_id INTEGER,
        user_id TEXT NOT NULL,
        is_starred INTEGER NOT NULL DEFAULT 0,
        is_trashed INTEGER NOT NULL DEFAULT 0,
        trashed_at TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY(user_id) REFERENCES users(user_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_folders_user_parent ON folders(user_id, parent_id)",
    "CREATE INDEX IF NOT EXISTS idx_files_user_folder ON files(user_id, is_trashed, folder_id)",
    "CREATE INDEX IF NOT EXISTS idx_files_user_updated ON files(user_id, is_trashed, updated_at)",
    "CREATE INDEX IF NOT EXISTS idx_files_user_starred ON files(user_id, is_starred, is_trashed)",
    "CREATE INDEX IF NOT EXISTS idx_files_trashed_at ON files(is_trashed, trashed_at)",
)


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


class Database:
    """
    Handle on one SQLite metadata database.

    Built once per application and handed to each repository, so tests can
    point a whole app at a temporary file.
    """

    def __init__(self, path: str):
        self.path = path

    def init_schema(self) -> None:
        """
        Create the database file and tables if they don't exist.
        """
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)

        with self.connection() as conn:
            cursor = conn.cursor()
            for statement in SCHEMA_STATEMENTS:
                cursor.execute(statement)
            conn.commit()

        logger.info(f"Database schema ready at {self.path}")

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Context manager for database connections.
        """
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        # NOCASE and LIKE fold ASCII letters only
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        finally:
            conn.close()

    def ping(self) -> bool:
        try:
            with self.connection() as conn:
                conn.execute("SELECT 1").fetchone()
            return True
        except sqlite3.Error as e:
            logger.warning(f"Database ping failed: {e}")
            return False

