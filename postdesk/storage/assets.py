"""
Blob store client for post cover images.

Wraps a storage provider with the fixed asset namespace and the reference
codec, so the lifecycle manager only deals in StoredAsset values and
identifiers.
"""

import logging
from dataclasses import dataclass

from postdesk.errors import UploadFailed
from postdesk.logging_config import log_storage_operation
from postdesk.storage.base import AssetStorageProvider, StorageObject
from postdesk.storage.references import AssetReferenceCodec, extension_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredAsset:
    """An uploaded cover image."""

    identifier: str
    reference: str
    content_type: str
    size_bytes: int
    content_hash: str


class AssetStore:
    """Uploads and deletes cover images under one namespace."""

    def __init__(self, provider: AssetStorageProvider, codec: AssetReferenceCodec):
        self.provider = provider
        self.codec = codec

    @property
    def namespace(self) -> str:
        return self.codec.namespace

    def upload(self, content: bytes, content_type: str) -> StoredAsset:
        """
        Upload bytes and return their reference.

        Raises:
            UploadFailed: provider rejected the upload or could not be reached
        """
        identifier = self.codec.new_identifier()
        try:
            with log_storage_operation("upload", identifier) as metrics:
                metadata = self.provider.upload(identifier, content, content_type)
                metrics["size_bytes"] = metadata.size_bytes
        except Exception as e:
            raise UploadFailed("Cover image upload failed") from e

        return StoredAsset(
            identifier=identifier,
            reference=self.codec.make_reference(identifier, extension_for(content_type)),
            content_type=content_type,
            size_bytes=metadata.size_bytes,
            content_hash=metadata.content_hash,
        )

    def delete_by_identifier(self, identifier: str) -> bool:
        """
        Delete a blob.

        Returns:
            True if deleted, False if it was already absent

        Raises:
            Provider errors; callers doing cleanup decide how to report them.
        """
        with log_storage_operation("delete", identifier):
            return self.provider.delete(identifier)

    def identifier_for(self, reference: str | None) -> str | None:
        """Identifier behind a reference, or None for foreign/empty references."""
        return self.codec.parse_identifier(reference)

    def open(self, identifier: str) -> StorageObject | None:
        """Fetch a blob for delivery."""
        if not identifier.startswith(f"{self.namespace}/"):
            return None
        return self.provider.download(identifier)
