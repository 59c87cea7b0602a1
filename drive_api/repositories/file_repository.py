"""File repository for database operations."""

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from drive_api.database import Database
from drive_api.utils import from_timestamp, to_timestamp
from drive_common.logging_config import get_logger

logger = get_logger(__name__)

_FILE_COLUMNS = (
    "id, name, original_name, mime_type, size, path, object_key, folder_id, user_id, "
    "is_starred, is_trashed, trashed_at, created_at, updated_at"
)
_UPDATABLE_COLUMNS = {"name", "folder_id", "is_starred", "is_trashed", "trashed_at"}
SORTABLE_COLUMNS = {"name", "size", "created_at", "updated_at"}


@dataclass
class File:
    id: int
    name: str
    original_name: str
    mime_type: str
    size: int
    path: str
    object_key: str
    user_id: str
    folder_id: Optional[int]
    is_starred: bool
    is_trashed: bool
    created_at: datetime
    updated_at: datetime
    trashed_at: Optional[datetime] = None


@dataclass(frozen=True)
class FilePredicate:
    """
    WHERE clause over the files table, always scoped to one owner.

    The same predicate drives both the page query and the count query so the
    two can never disagree.
    """
    user_id: str
    clauses: Tuple[str, ...] = ()
    params: Tuple[Any, ...] = ()

    def and_(self, clause: str, *params: Any) -> "FilePredicate":
        return FilePredicate(self.user_id, self.clauses + (clause,), self.params + params)

    def to_sql(self) -> Tuple[str, Tuple[Any, ...]]:
        sql = " AND ".join(("user_id = ?",) + self.clauses)
        return sql, (self.user_id,) + self.params


@dataclass(frozen=True)
class FileOrdering:
    column: str = "name"
    descending: bool = False
    case_insensitive: bool = False

    def to_sql(self) -> str:
        if self.column not in SORTABLE_COLUMNS:
            raise ValueError(f"Unsortable column: {self.column}")
        key = f"casefold({self.column})" if self.case_insensitive else self.column
        direction = "DESC" if self.descending else "ASC"
        return f"{key} {direction}, id ASC"


def _row_to_file(row: sqlite3.Row) -> File:
    return File(
        id=row["id"],
        name=row["name"],
        original_name=row["original_name"],
        mime_type=row["mime_type"],
        size=row["size"],
        path=row["path"],
        object_key=row["object_key"],
        user_id=row["user_id"],
        folder_id=row["folder_id"],
        is_starred=bool(row["is_starred"]),
        is_trashed=bool(row["is_trashed"]),
        created_at=from_timestamp(row["created_at"]),
        updated_at=from_timestamp(row["updated_at"]),
        trashed_at=from_timestamp(row["trashed_at"]),
    )


class SqliteFileRepository:
    """
    File metadata rows. Every read and write is scoped to the owning user,
    except the retention sweep which runs across all users.
    """

    def __init__(self, db: Database):
        self.db = db

    def create(
        self,
        name: str,
        original_name: str,
        mime_type: str,
        size: int,
        path: str,
        object_key: str,
        user_id: str,
        folder_id: Optional[int],
        created_at: datetime,
    ) -> File:
        stamp = to_timestamp(created_at)
        with self.db.connection() as conn:
            try:
                cursor = conn.execute(
                    """
                    INSERT INTO files (name, original_name, mime_type, size, path, object_key,
                                       folder_id, user_id, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (name, original_name, mime_type, size, path, object_key,
                     folder_id, user_id, stamp, stamp)
                )
                conn.commit()
            except sqlite3.Error as e:
                logger.error(f"Failed to create file row for {object_key}: {e}", exc_info=True)
                raise
            file_id = cursor.lastrowid

        logger.debug(f"File row created: {file_id} '{name}' [user_id={user_id}]")
        return File(
            id=file_id,
            name=name,
            original_name=original_name,
            mime_type=mime_type,
            size=size,
            path=path,
            object_key=object_key,
            user_id=user_id,
            folder_id=folder_id,
            is_starred=False,
            is_trashed=False,
            created_at=created_at,
            updated_at=created_at,
        )

    def get_by_id(self, file_id: int, user_id: str) -> Optional[File]:
        with self.db.connection() as conn:
            row = conn.execute(
                f"SELECT {_FILE_COLUMNS} FROM files WHERE id = ? AND user_id = ?",
                (file_id, user_id)
            ).fetchone()

        return _row_to_file(row) if row is not None else None

    def update(
        self,
        file_id: int,
        user_id: str,
        changes: Dict[str, Any],
        updated_at: datetime,
    ) -> Optional[File]:
        """
        Apply column changes to one file.

        Args:
            changes: Mapping of column name to new value; booleans are stored
                     as 0/1 and datetimes as timestamps

        Returns:
            The updated file, or None if it does not exist for this user
        """
        unknown = set(changes) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update file columns: {sorted(unknown)}")

        values = []
        for value in changes.values():
            if isinstance(value, bool):
                value = int(value)
            elif isinstance(value, datetime):
                value = to_timestamp(value)
            values.append(value)

        assignments = [f"{column} = ?" for column in changes] + ["updated_at = ?"]
        params = values + [to_timestamp(updated_at), file_id, user_id]

        with self.db.connection() as conn:
            cursor = conn.execute(
                f"UPDATE files SET {', '.join(assignments)} WHERE id = ? AND user_id = ?",
                params
            )
            conn.commit()
            if cursor.rowcount == 0:
                return None

        return self.get_by_id(file_id, user_id)

    def delete(self, file_id: int, user_id: str) -> bool:
        with self.db.connection() as conn:
            cursor = conn.execute(
                "DELETE FROM files WHERE id = ? AND user_id = ?",
                (file_id, user_id)
            )
            conn.commit()
            return cursor.rowcount == 1

    def find_page(
        self,
        predicate: FilePredicate,
        ordering: FileOrdering,
        limit: int,
        offset: int,
    ) -> List[File]:
        where, params = predicate.to_sql()
        with self.db.connection() as conn:
            rows = conn.execute(
                f"""
                SELECT {_FILE_COLUMNS} FROM files
                WHERE {where}
                ORDER BY {ordering.to_sql()}
                LIMIT ? OFFSET ?
                """,
                params + (limit, offset)
            ).fetchall()

        return [_row_to_file(row) for row in rows]

    def count(self, predicate: FilePredicate) -> int:
        where, params = predicate.to_sql()
        with self.db.connection() as conn:
            return conn.execute(
                f"SELECT COUNT(*) FROM files WHERE {where}",
                params
            ).fetchone()[0]

    def sum_live_size(self, user_id: str) -> int:
        """
        Total bytes of the user's files that are not in the trash.
        """
        with self.db.connection() as conn:
            return conn.execute(
                "SELECT COALESCE(SUM(size), 0) FROM files WHERE user_id = ? AND is_trashed = 0",
                (user_id,)
            ).fetchone()[0]

    def list_by_folders(self, folder_ids: List[int], user_id: str) -> List[File]:
        if not folder_ids:
            return []

        placeholders = ", ".join("?" for _ in folder_ids)
        with self.db.connection() as conn:
            rows = conn.execute(
                f"""
                SELECT {_FILE_COLUMNS} FROM files
                WHERE user_id = ? AND folder_id IN ({placeholders})
                ORDER BY id ASC
                """,
                [user_id] + list(folder_ids)
            ).fetchall()

        return [_row_to_file(row) for row in rows]

    def move_folder_files_to_root(self, folder_id: int, user_id: str, updated_at: datetime) -> int:
        with self.db.connection() as conn:
            cursor = conn.execute(
                "UPDATE files SET folder_id = NULL, updated_at = ? WHERE user_id = ? AND folder_id = ?",
                (to_timestamp(updated_at), user_id, folder_id)
            )
            conn.commit()
            return cursor.rowcount

    def list_trashed_before(self, cutoff: datetime, limit: int = 500) -> List[File]:
        """
        Trashed files, across all users, whose trash time is older than cutoff.
        """
        with self.db.connection() as conn:
            rows = conn.execute(
                f"""
                SELECT {_FILE_COLUMNS} FROM files
                WHERE is_trashed = 1 AND trashed_at IS NOT NULL AND trashed_at < ?
                ORDER BY trashed_at ASC, id ASC
                LIMIT ?
                """,
                (to_timestamp(cutoff), limit)
            ).fetchall()

        return [_row_to_file(row) for row in rows]
