"""Per-file upload state machine with retries, fanned out over a batch."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import PurePosixPath
from typing import Callable, Dict, List, Optional, Sequence

from drive_api.config import OBJECT_KEY_PREFIX
from drive_api.exceptions import UploadFailedError
from drive_api.object_store import ObjectStore, StoredObject
from drive_api.repositories.file_repository import File
from drive_api.repositories.interfaces import FileRepository
from drive_api.retry import RetryExhaustedError, RetryPolicy
from drive_api.services.upload_validator import UploadCandidate
from drive_api.types import BatchStatus, UploadState
from drive_api.utils import build_object_key, utc_now
from drive_common.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class UploadOutcome:
    """
    Tracks one file through PENDING -> UPLOADING -> SUCCEEDED | FAILED.
    """
    candidate: UploadCandidate
    state: UploadState = UploadState.PENDING
    attempts: int = 0
    object_key: Optional[str] = None
    file: Optional[File] = None
    error: Optional[str] = None

    def start(self, object_key: str) -> None:
        if self.state is not UploadState.PENDING:
            raise RuntimeError(f"Cannot start upload in state {self.state.value}")
        self.object_key = object_key
        self.state = UploadState.UPLOADING

    def succeed(self, record: File) -> "UploadOutcome":
        if self.state is not UploadState.UPLOADING:
            raise RuntimeError(f"Cannot complete upload in state {self.state.value}")
        self.file = record
        self.state = UploadState.SUCCEEDED
        return self

    def fail(self, message: str) -> "UploadOutcome":
        if self.state is UploadState.SUCCEEDED:
            raise RuntimeError("Cannot fail an upload that already succeeded")
        self.error = message
        self.state = UploadState.FAILED
        return self


@dataclass
class UploadBatchResult:
    outcomes: List[UploadOutcome] = field(default_factory=list)

    @property
    def uploaded_files(self) -> List[File]:
        return [o.file for o in self.outcomes if o.state is UploadState.SUCCEEDED]

    @property
    def errors(self) -> List[Dict[str, str]]:
        return [
            {"name": o.candidate.name, "error": o.error or "Upload failed"}
            for o in self.outcomes
            if o.state is UploadState.FAILED
        ]

    @property
    def status(self) -> BatchStatus:
        succeeded = len(self.uploaded_files)
        if succeeded == len(self.outcomes):
            return BatchStatus.SUCCESS
        if succeeded == 0:
            return BatchStatus.FAILED
        return BatchStatus.PARTIAL


def display_name(original_name: str) -> str:
    """
    Strip any client-side directory components from an uploaded filename.
    """
    name = PurePosixPath(original_name.replace("\\", "/")).name
    return name or original_name


class UploadPipeline:
    """
    Moves validated, admitted files into the object store and records them.

    Only the object store write is retried. The metadata write runs once;
    if it fails after a successful store write the object is left behind
    and logged as an orphan.
    """

    def __init__(
        self,
        object_store: ObjectStore,
        file_repo: FileRepository,
        retry_policy: Optional[RetryPolicy] = None,
        key_prefix: str = OBJECT_KEY_PREFIX,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.object_store = object_store
        self.file_repo = file_repo
        self.retry_policy = retry_policy or RetryPolicy()
        self.key_prefix = key_prefix
        self.clock = clock

    async def _store(self, outcome: UploadOutcome) -> StoredObject:
        candidate = outcome.candidate

        def count_attempt(attempt: int) -> None:
            outcome.attempts = attempt

        return await self.retry_policy.run(
            lambda: asyncio.to_thread(
                self.object_store.put, outcome.object_key, candidate.data, candidate.mime_type
            ),
            description=f"Upload of '{candidate.name}'",
            on_attempt=count_attempt,
        )

    async def upload_one(
        self,
        candidate: UploadCandidate,
        user_id: str,
        folder_id: Optional[int] = None,
    ) -> UploadOutcome:
        """
        Drive a single file to a terminal state. Never raises for upload or
        metadata failures; they are captured on the outcome.
        """
        outcome = UploadOutcome(candidate=candidate)
        now = self.clock()
        outcome.start(build_object_key(
            self.key_prefix,
            user_id,
            candidate.name,
            now,
            strip_extension=self.object_store.appends_extension,
        ))

        try:
            stored = await self._store(outcome)
        except RetryExhaustedError as e:
            error = UploadFailedError(candidate.name, e.attempts, e.last_error)
            logger.error(f"{error} [user_id={user_id}]")
            return outcome.fail(str(error))
        except Exception as e:
            logger.error(
                f"Upload of '{candidate.name}' failed [user_id={user_id}]: {e}",
                exc_info=True
            )
            return outcome.fail(f"Upload of '{candidate.name}' failed: {e}")

        try:
            record = self.file_repo.create(
                name=display_name(candidate.name),
                original_name=candidate.name,
                mime_type=candidate.mime_type,
                size=candidate.size,
                path=stored.location,
                object_key=stored.key,
                user_id=user_id,
                folder_id=folder_id,
                created_at=now,
            )
        except Exception as e:
            logger.error(
                f"Metadata write failed for '{candidate.name}', object {stored.key} "
                f"left orphaned [user_id={user_id}]: {e}",
                exc_info=True
            )
            return outcome.fail(f"Failed to save metadata for '{candidate.name}': {e}")

        logger.info(
            f"Uploaded '{candidate.name}' as file {record.id} "
            f"({candidate.size} bytes, {outcome.attempts} attempts) [user_id={user_id}]"
        )
        return outcome.succeed(record)

    async def run(
        self,
        candidates: Sequence[UploadCandidate],
        user_id: str,
        folder_id: Optional[int] = None,
    ) -> UploadBatchResult:
        """
        Upload every file concurrently; waits until each one is terminal.
        """
        outcomes = await asyncio.gather(
            *(self.upload_one(candidate, user_id, folder_id) for candidate in candidates)
        )
        result = UploadBatchResult(outcomes=list(outcomes))
        logger.info(
            f"Upload batch {result.status.value}: {len(result.uploaded_files)} succeeded, "
            f"{len(result.errors)} failed [user_id={user_id}]"
        )
        return result
