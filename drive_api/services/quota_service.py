"""Per-user storage quota accounting."""

import asyncio
import weakref
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from drive_api.config import STORAGE_QUOTA_BYTES
from drive_api.exceptions import QuotaExceededError
from drive_api.repositories.interfaces import FileRepository
from drive_common.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class UsageSummary:
    storage_used: int
    storage_total: int
    storage_percentage: float


class QuotaService:
    """
    Admits or rejects upload batches against a fixed per-user capacity.

    Usage is the sum of sizes of the user's files outside the trash and is
    re-read from the metadata store on every call.
    """

    def __init__(self, file_repo: FileRepository, limit_bytes: int = STORAGE_QUOTA_BYTES):
        self.file_repo = file_repo
        self.limit_bytes = limit_bytes
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def current_usage(self, user_id: str) -> int:
        return self.file_repo.sum_live_size(user_id)

    def admit(self, user_id: str, incoming_total_bytes: int) -> int:
        """
        Check that a batch fits in the user's remaining quota.

        Args:
            user_id: Owner of the batch
            incoming_total_bytes: Sum of the batch's file sizes

        Returns:
            Current usage at admission time

        Raises:
            QuotaExceededError: If usage plus the batch would exceed the limit
        """
        usage = self.current_usage(user_id)
        if usage + incoming_total_bytes > self.limit_bytes:
            logger.warning(
                f"Quota exceeded [user_id={user_id}]: used={usage} "
                f"requested={incoming_total_bytes} limit={self.limit_bytes}"
            )
            raise QuotaExceededError(
                current_usage=usage,
                limit=self.limit_bytes,
                requested=incoming_total_bytes,
            )
        return usage

    def usage_summary(self, user_id: str) -> UsageSummary:
        usage = self.current_usage(user_id)
        percentage = round(usage / self.limit_bytes * 100, 2) if self.limit_bytes else 0.0
        return UsageSummary(
            storage_used=usage,
            storage_total=self.limit_bytes,
            storage_percentage=percentage,
        )

    @asynccontextmanager
    async def admission(self, user_id: str) -> AsyncIterator[None]:
        """
        Serialize admission and record creation for one user's batches.

        Only batches within this process are serialized; separate server
        processes can still race past the limit together.
        """
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock

        async with lock:
            yield
