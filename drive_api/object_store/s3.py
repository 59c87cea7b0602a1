"""Object store backed by an S3-compatible bucket (AWS S3, R2, MinIO)."""

from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError, ConnectionError as BotoConnectionError

from drive_api.exceptions import ObjectStoreError, ObjectStoreUnavailableError
from drive_api.object_store.base import DISPOSITION_ATTACHMENT, StoredObject, content_disposition
from drive_common.logging_config import get_logger

logger = get_logger(__name__)

_TRANSIENT_ERROR_CODES = {
    "InternalError",
    "ServiceUnavailable",
    "SlowDown",
    "Throttling",
    "ThrottlingException",
    "RequestTimeout",
    "RequestTimeTooSkewed",
}


def _translate_error(action: str, key: str, error: Exception) -> ObjectStoreError:
    """
    Map a botocore error onto the drive's object store errors.

    Connection problems, throttling and 5xx responses are transient and
    therefore retryable; everything else is a hard rejection.
    """
    if isinstance(error, ClientError):
        code = error.response.get("Error", {}).get("Code", "")
        status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)
        if code in _TRANSIENT_ERROR_CODES or status >= 500:
            return ObjectStoreUnavailableError(f"S3 {action} failed for {key}: {code or status}")
        return ObjectStoreError(f"S3 {action} rejected for {key}: {code or status}")
    if isinstance(error, BotoConnectionError):
        return ObjectStoreUnavailableError(f"S3 {action} failed for {key}: {error}")
    return ObjectStoreError(f"S3 {action} failed for {key}: {error}")


class S3ObjectStore:
    """
    Stores objects in one bucket and issues presigned GET URLs.
    """

    appends_extension = False

    def __init__(
        self,
        bucket: str,
        endpoint_url: Optional[str] = None,
        region_name: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        client=None,
    ):
        self.bucket = bucket
        self.client = client or boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name=region_name,
        )

    def put(self, key: str, data: bytes, content_type: str) -> StoredObject:
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            raise _translate_error("put", key, e) from e

        logger.debug(f"Stored object s3://{self.bucket}/{key} ({len(data)} bytes)")
        return StoredObject(key=key, location=f"s3://{self.bucket}/{key}", size=len(data))

    def delete(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise _translate_error("delete", key, e) from e

    def signed_url(
        self,
        key: str,
        expires_in: int,
        filename: str,
        disposition: str = DISPOSITION_ATTACHMENT,
    ) -> str:
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={
                    "Bucket": self.bucket,
                    "Key": key,
                    "ResponseContentDisposition": content_disposition(disposition, filename),
                },
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            raise _translate_error("sign", key, e) from e

    def ping(self) -> bool:
        try:
            self.client.head_bucket(Bucket=self.bucket)
            return True
        except (BotoCoreError, ClientError) as e:
            logger.warning(f"S3 bucket {self.bucket} unavailable: {e}")
            return False
