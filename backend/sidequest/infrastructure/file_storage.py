"""S3 File Storage — pre-signed upload/download URLs for proof attachments.

Invariants:
    - Implements core/repository_protocols.FileStorage
    - Every boto3/botocore failure mapped to StorageError (core/errors.py)
    - Never uploads or downloads bytes itself: clients talk to the bucket directly

Design Decisions:
    - Path-style addressing: works with MinIO and other S3-compatible endpoints
    - Pre-signing is local HMAC work in botocore, so the async methods call the
      sync client directly instead of going through a thread pool
    - Singleton storage initialized on startup, mirroring db_manager
"""

import logging

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from sidequest.core.errors import StorageError

logger = logging.getLogger(__name__)


class S3FileStorage:
    """Generates pre-signed S3 URLs for put_object / get_object."""

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
    ):
        self.bucket = bucket
        self.client = boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            config=Config(
                signature_version="s3v4",
                s3={"addressing_style": "path"},
            ),
        )

    async def get_upload_url(
        self, key: str, content_type: str, ttl_seconds: int,
    ) -> str:
        return self._presign(
            "put_object",
            {"Bucket": self.bucket, "Key": key, "ContentType": content_type},
            key, ttl_seconds,
        )

    async def get_download_url(self, key: str, ttl_seconds: int) -> str:
        return self._presign(
            "get_object", {"Bucket": self.bucket, "Key": key}, key, ttl_seconds,
        )

    def _presign(
        self, operation: str, params: dict, key: str, ttl_seconds: int,
    ) -> str:
        try:
            return self.client.generate_presigned_url(
                operation, Params=params, ExpiresIn=ttl_seconds,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Pre-signing {operation} failed for {key}: {e}")
            raise StorageError(f"could not sign {operation} URL", key)


# Singleton (initialized on startup)
file_storage: S3FileStorage | None = None


def init_storage(bucket: str, **kwargs):
    global file_storage
    file_storage = S3FileStorage(bucket, **kwargs)


def get_storage() -> S3FileStorage:
    """FastAPI dependency for the storage collaborator."""
    if not file_storage:
        raise RuntimeError("File storage not initialized")
    return file_storage
