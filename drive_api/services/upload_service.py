"""Upload orchestration: validation, ownership, quota admission, pipeline."""

from typing import Optional, Sequence

from drive_api.exceptions import ValidationError
from drive_api.repositories.interfaces import FolderRepository
from drive_api.services.quota_service import QuotaService
from drive_api.services.upload_pipeline import UploadBatchResult, UploadPipeline
from drive_api.services.upload_validator import UploadCandidate, UploadValidator
from drive_common.logging_config import get_logger

logger = get_logger(__name__)


class UploadService:
    def __init__(
        self,
        validator: UploadValidator,
        quota_service: QuotaService,
        pipeline: UploadPipeline,
        folder_repo: FolderRepository,
    ):
        self.validator = validator
        self.quota_service = quota_service
        self.pipeline = pipeline
        self.folder_repo = folder_repo

    async def upload(
        self,
        user_id: str,
        candidates: Sequence[UploadCandidate],
        folder_id: Optional[int] = None,
    ) -> UploadBatchResult:
        """
        Run one upload batch.

        Validation and quota failures abort the whole batch before any
        object store call. Per-file upload failures do not raise; they are
        reported on the returned result.

        Raises:
            ValidationError: Empty batch, bad folder id or folder not owned
            TooManyFilesError: Batch exceeds the per-request file limit
            InvalidFileError: Oversized or unsupported files
            QuotaExceededError: Batch does not fit in the remaining quota
        """
        logger.info(f"Upload batch of {len(candidates)} files [user_id={user_id}] [folder_id={folder_id}]")

        self.validator.validate(candidates, folder_id)

        if folder_id is not None and self.folder_repo.get_by_id(folder_id, user_id) is None:
            logger.warning(f"Upload rejected: folder {folder_id} not owned [user_id={user_id}]")
            raise ValidationError("Folder not found", details={"folderId": folder_id})

        incoming = sum(candidate.size for candidate in candidates)
        async with self.quota_service.admission(user_id):
            self.quota_service.admit(user_id, incoming)
            candidates = [await candidate.load() for candidate in candidates]
            return await self.pipeline.run(candidates, user_id, folder_id)
