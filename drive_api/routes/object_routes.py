"""Serves objects of the local object store through signed URLs."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse

from drive_api.dependencies import get_object_store
from drive_api.exceptions import AccessDeniedError, NotFoundError
from drive_api.object_store import DISPOSITION_ATTACHMENT, LocalObjectStore, ObjectStore, content_disposition
from drive_common.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/objects", tags=["Objects"])


@router.get("/{key:path}")
async def get_object(
    key: str,
    expires: int = Query(...),
    signature: str = Query(...),
    disposition: str = Query(DISPOSITION_ATTACHMENT),
    filename: str = Query(""),
    object_store: ObjectStore = Depends(get_object_store),
):
    """
    Stream an object's bytes for a valid, unexpired signed URL.

    Raises:
        - 403: Signature invalid or URL expired
        - 404: Not served by this backend, or object missing
    """
    if not isinstance(object_store, LocalObjectStore):
        raise NotFoundError("Objects are not served by this server")

    if not object_store.verify_signature(key, expires, disposition, filename, signature):
        logger.warning(f"Rejected signed object URL for {key}")
        raise AccessDeniedError("Signed URL is invalid or has expired")

    path = object_store.open_path(key)
    return FileResponse(
        path,
        headers={"Content-Disposition": content_disposition(disposition, filename or path.name)},
    )
