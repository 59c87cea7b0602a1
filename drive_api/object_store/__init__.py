"""Object store adapters."""

from drive_api import config
from drive_api.object_store.base import (
    DISPOSITION_ATTACHMENT,
    DISPOSITION_INLINE,
    ObjectStore,
    StoredObject,
    content_disposition,
)
from drive_api.object_store.local import LocalObjectStore
from drive_api.object_store.s3 import S3ObjectStore


def build_object_store(backend: str = None) -> ObjectStore:
    """
    Construct the object store selected by configuration.

    Args:
        backend: 'local' or 's3'; defaults to DRIVE_OBJECT_STORE

    Raises:
        ValueError: For an unknown backend name
    """
    backend = (backend or config.OBJECT_STORE_BACKEND).lower()
    if backend == "local":
        return LocalObjectStore(
            root=config.LOCAL_STORAGE_ROOT,
            secret=config.URL_SIGNING_SECRET,
            public_base_url=config.API_PUBLIC_URL,
        )
    if backend == "s3":
        return S3ObjectStore(
            bucket=config.S3_BUCKET,
            endpoint_url=config.S3_ENDPOINT_URL,
            region_name=config.S3_REGION,
            access_key_id=config.S3_ACCESS_KEY_ID,
            secret_access_key=config.S3_SECRET_ACCESS_KEY,
        )
    raise ValueError(f"Unknown object store backend: {backend}")


__all__ = [
    "DISPOSITION_ATTACHMENT",
    "DISPOSITION_INLINE",
    "LocalObjectStore",
    "ObjectStore",
    "S3ObjectStore",
    "StoredObject",
    "build_object_store",
    "content_disposition",
]
