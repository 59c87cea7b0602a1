"""Folder repository for database operations."""

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from drive_api.database import Database
from drive_api.utils import from_timestamp, to_timestamp
from drive_common.logging_config import get_logger

logger = get_logger(__name__)

_FOLDER_COLUMNS = "id, name, parent_id, user_id, created_at, updated_at"
_UPDATABLE_COLUMNS = {"name", "parent_id"}


@dataclass
class Folder:
    id: int
    name: str
    parent_id: Optional[int]
    user_id: str
    created_at: datetime
    updated_at: datetime


def _row_to_folder(row: sqlite3.Row) -> Folder:
    return Folder(
        id=row["id"],
        name=row["name"],
        parent_id=row["parent_id"],
        user_id=row["user_id"],
        created_at=from_timestamp(row["created_at"]),
        updated_at=from_timestamp(row["updated_at"]),
    )


def _parent_clause(parent_id: Optional[int]) -> Tuple[str, tuple]:
    if parent_id is None:
        return "parent_id IS NULL", ()
    return "parent_id = ?", (parent_id,)


class SqliteFolderRepository:
    """
    Folder rows, always addressed together with their owner's user_id.
    """

    def __init__(self, db: Database):
        self.db = db

    def create(
        self,
        name: str,
        user_id: str,
        parent_id: Optional[int],
        created_at: datetime,
    ) -> Folder:
        stamp = to_timestamp(created_at)
        with self.db.connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO folders (name, parent_id, user_id, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (name, parent_id, user_id, stamp, stamp)
            )
            conn.commit()
            folder_id = cursor.lastrowid

        logger.info(f"Folder created: {folder_id} '{name}' [user_id={user_id}]")
        return Folder(
            id=folder_id,
            name=name,
            parent_id=parent_id,
            user_id=user_id,
            created_at=created_at,
            updated_at=created_at,
        )

    def get_by_id(self, folder_id: int, user_id: str) -> Optional[Folder]:
        with self.db.connection() as conn:
            row = conn.execute(
                f"SELECT {_FOLDER_COLUMNS} FROM folders WHERE id = ? AND user_id = ?",
                (folder_id, user_id)
            ).fetchone()

        return _row_to_folder(row) if row is not None else None

    def list_by_parent(self, user_id: str, parent_id: Optional[int]) -> List[Folder]:
        clause, params = _parent_clause(parent_id)
        with self.db.connection() as conn:
            rows = conn.execute(
                f"""
                SELECT {_FOLDER_COLUMNS} FROM folders
                WHERE user_id = ? AND {clause}
                ORDER BY casefold(name) ASC, id ASC
                """,
                (user_id,) + params
            ).fetchall()

        return [_row_to_folder(row) for row in rows]

    def update(
        self,
        folder_id: int,
        user_id: str,
        changes: Dict[str, Any],
        updated_at: datetime,
    ) -> Optional[Folder]:
        """
        Apply column changes to one folder.

        Args:
            changes: Mapping of column name to new value; a None parent_id
                     moves the folder to the root

        Returns:
            The updated folder, or None if it does not exist for this user
        """
        unknown = set(changes) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update folder columns: {sorted(unknown)}")

        assignments = [f"{column} = ?" for column in changes] + ["updated_at = ?"]
        params = list(changes.values()) + [to_timestamp(updated_at), folder_id, user_id]

        with self.db.connection() as conn:
            cursor = conn.execute(
                f"UPDATE folders SET {', '.join(assignments)} WHERE id = ? AND user_id = ?",
                params
            )
            conn.commit()
            if cursor.rowcount == 0:
                return None

        return self.get_by_id(folder_id, user_id)

    def count_children(self, folder_id: int, user_id: str) -> Tuple[int, int]:
        """
        Count direct contents of a folder, trashed files included.

        Returns:
            Tuple of (file_count, folder_count)
        """
        with self.db.connection() as conn:
            file_count = conn.execute(
                "SELECT COUNT(*) FROM files WHERE user_id = ? AND folder_id = ?",
                (user_id, folder_id)
            ).fetchone()[0]
            folder_count = conn.execute(
                "SELECT COUNT(*) FROM folders WHERE user_id = ? AND parent_id = ?",
                (user_id, folder_id)
            ).fetchone()[0]

        return file_count, folder_count

    def list_descendant_ids(self, folder_id: int, user_id: str) -> List[int]:
        """
        Ids of a folder and every folder below it.
        """
        with self.db.connection() as conn:
            rows = conn.execute(
                """
                WITH RECURSIVE subtree(id) AS (
                    SELECT id FROM folders WHERE id = ? AND user_id = ?
                    UNION
                    SELECT f.id FROM folders f
                    JOIN subtree s ON f.parent_id = s.id
                    WHERE f.user_id = ?
                )
                SELECT id FROM subtree
                """,
                (folder_id, user_id, user_id)
            ).fetchall()

        return [row["id"] for row in rows]

    def reparent_children(
        self,
        folder_id: int,
        user_id: str,
        new_parent_id: Optional[int],
        updated_at: datetime,
    ) -> int:
        with self.db.connection() as conn:
            cursor = conn.execute(
                "UPDATE folders SET parent_id = ?, updated_at = ? WHERE user_id = ? AND parent_id = ?",
                (new_parent_id, to_timestamp(updated_at), user_id, folder_id)
            )
            conn.commit()
            moved = cursor.rowcount

        logger.debug(f"Moved {moved} child folders out of folder {folder_id} [user_id={user_id}]")
        return moved

    def delete_many(self, folder_ids: List[int], user_id: str) -> int:
        if not folder_ids:
            return 0

        placeholders = ", ".join("?" for _ in folder_ids)
        with self.db.connection() as conn:
            cursor = conn.execute(
                f"DELETE FROM folders WHERE user_id = ? AND id IN ({placeholders})",
                [user_id] + list(folder_ids)
            )
            conn.commit()
            deleted = cursor.rowcount

        logger.info(f"Deleted {deleted} folders [user_id={user_id}]")
        return deleted

    def delete(self, folder_id: int, user_id: str) -> bool:
        return self.delete_many([folder_id], user_id) == 1
