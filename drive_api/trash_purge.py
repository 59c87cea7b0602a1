"""Background task that permanently deletes files left in the trash too long."""

import asyncio
from datetime import datetime, timedelta
from typing import Callable, Optional

from drive_api.config import TRASH_PURGE_INTERVAL_SECONDS, TRASH_RETENTION_DAYS
from drive_api.repositories.interfaces import FileRepository
from drive_api.services.file_service import FileService
from drive_api.utils import utc_now
from drive_common.logging_config import get_logger

logger = get_logger(__name__)

PURGE_BATCH_SIZE = 500


class TrashPurger:
    """
    Periodically hard-deletes files trashed more than retention_days ago.

    Trashed files do not count against quota, so this bounds how long
    their bytes stay stored for free.
    """

    def __init__(
        self,
        file_repo: FileRepository,
        file_service: FileService,
        retention_days: int = TRASH_RETENTION_DAYS,
        interval_seconds: int = TRASH_PURGE_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.file_repo = file_repo
        self.file_service = file_service
        self.retention_days = retention_days
        self.interval_seconds = interval_seconds
        self.clock = clock
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def enabled(self) -> bool:
        return self.retention_days > 0

    async def start(self) -> None:
        """Start the background purge task."""
        if not self.enabled:
            logger.info("Trash retention disabled, purge task not started")
            return

        if self._running:
            logger.warning("Trash purge task already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(
            f"Started trash purge task (retention: {self.retention_days} days, "
            f"interval: {self.interval_seconds}s)"
        )

    async def stop(self) -> None:
        """Stop the background purge task."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Stopped trash purge task")

    async def _run(self) -> None:
        """Main loop for the purge task."""
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)

                if not self._running:
                    break

                await self.purge_cycle()

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in trash purge task: {e}", exc_info=True)

    async def purge_cycle(self) -> int:
        """
        Execute one purge cycle.

        Returns:
            Number of files permanently deleted
        """
        if not self.enabled:
            return 0

        cutoff = self.clock() - timedelta(days=self.retention_days)
        purged = 0
        orphaned = 0

        while True:
            expired = self.file_repo.list_trashed_before(cutoff, PURGE_BATCH_SIZE)
            if not expired:
                break

            for file in expired:
                if self.file_repo.delete(file.id, file.user_id):
                    purged += 1
                    if not await self.file_service.remove_object(file.object_key):
                        orphaned += 1

            if len(expired) < PURGE_BATCH_SIZE:
                break

        if purged:
            logger.info(f"Trash purge complete: {purged} files deleted, {orphaned} objects left orphaned")
        else:
            logger.debug("Trash purge found nothing to delete")
        return purged
