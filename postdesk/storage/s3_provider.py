"""
S3 storage provider implementation using boto3.

Supports:
- AWS S3
- S3-compatible services (MinIO, DigitalOcean Spaces, etc.)
"""

import logging
from datetime import datetime, UTC
from typing import Optional, Dict

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from postdesk.storage.base import (
    AssetStorageProvider,
    StorageObject,
    StorageMetadata,
    compute_content_hash,
)

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = ("404", "NoSuchKey", "NotFound")


def _error_code(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Code", "")


class S3StorageProvider(AssetStorageProvider):
    """
    S3/S3-compatible storage provider.

    Credentials come from AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY settings
    when set, otherwise from the standard AWS chain (instance profile, ...).
    """

    def __init__(
        self,
        bucket: Optional[str],
        endpoint_url: Optional[str] = None,
        region: str = "us-east-1",
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        client=None,
    ):
        """
        Initialize S3 provider.

        Args:
            bucket: S3 bucket name
            endpoint_url: Custom endpoint for S3-compatible services
            region: AWS region
            access_key_id: Explicit credentials; None falls back to the AWS chain
            secret_access_key: Explicit credentials; None falls back to the AWS chain
            client: Pre-built boto3 client (tests)
        """
        if not bucket:
            raise ValueError("S3 bucket required. Set S3_BUCKET env var or pass bucket.")
        self._bucket = bucket

        if client is None:
            # Timeouts bound every call; the lifecycle manager treats a timeout as a failed step
            config = Config(
                retries={"max_attempts": 3, "mode": "adaptive"},
                connect_timeout=5,
                read_timeout=30,
            )
            client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                region_name=region,
                aws_access_key_id=access_key_id,
                aws_secret_access_key=secret_access_key,
                config=config,
            )
        self._client = client

        logger.info(f"S3 storage initialized: bucket={self._bucket}")

    @property
    def name(self) -> str:
        return "s3"

    @property
    def bucket(self) -> str:
        return self._bucket

    def upload(
        self,
        key: str,
        content: bytes,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> StorageMetadata:
        """Upload content to S3."""
        content_hash = compute_content_hash(content)
        s3_metadata = dict(metadata or {})
        s3_metadata["content-hash"] = content_hash

        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=content,
                ContentType=content_type,
                Metadata=s3_metadata,
            )
        except ClientError as e:
            logger.error(f"S3 upload failed for {key}: {e}")
            raise

        logger.debug(f"Uploaded to S3: {key} ({len(content)} bytes)")
        return StorageMetadata(
            key=key,
            content_hash=content_hash,
            content_type=content_type,
            size_bytes=len(content),
            uploaded_at=datetime.now(UTC),
            custom_metadata=s3_metadata,
        )

    def download(self, key: str) -> Optional[StorageObject]:
        """Download content from S3."""
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                logger.debug(f"S3 object not found: {key}")
                return None
            logger.error(f"S3 download failed for {key}: {e}")
            raise

        content = response["Body"].read()
        s3_metadata = response.get("Metadata", {})
        metadata = StorageMetadata(
            key=key,
            content_hash=s3_metadata.get("content-hash", ""),
            content_type=response.get("ContentType", "application/octet-stream"),
            size_bytes=len(content),
            uploaded_at=response.get("LastModified", datetime.now(UTC)),
            custom_metadata=s3_metadata,
        )
        return StorageObject(content=content, metadata=metadata)

    def exists(self, key: str) -> bool:
        """Check if object exists in S3."""
        try:
            self._client.head_object(Bucket=self._bucket, Key=key)
            return True
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                return False
            raise

    def delete(self, key: str) -> bool:
        """
        Delete object from S3.

        S3 answers DeleteObject with success for missing keys, so existence
        is probed first to report False for absent objects.
        """
        if not self.exists(key):
            return False
        try:
            self._client.delete_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            logger.error(f"S3 delete failed for {key}: {e}")
            raise
        logger.debug(f"Deleted from S3: {key}")
        return True
