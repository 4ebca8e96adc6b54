"""
Storage provider interface for post cover images.

Design principles:
- Image bytes stored in object storage (S3), never in the database
- The database stores only the public reference to the image
- Objects are keyed by identifier: "{namespace}/{name}", no extension
- Delete is idempotent: deleting a missing object is not an error
"""

import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict


@dataclass
class StorageMetadata:
    """Metadata about a stored object."""
    key: str  # Object key (the asset identifier)
    content_hash: str  # SHA256 of content
    content_type: str  # MIME type, e.g. "image/png"
    size_bytes: int
    uploaded_at: datetime
    custom_metadata: Dict[str, str] = field(default_factory=dict)


@dataclass
class StorageObject:
    """A stored object with content and metadata."""
    content: bytes
    metadata: StorageMetadata


def compute_content_hash(content: bytes) -> str:
    """Compute SHA256 hash of content."""
    return hashlib.sha256(content).hexdigest()


class AssetStorageProvider(ABC):
    """
    Abstract interface for object storage.

    Implementations must handle:
    - Upload of raw bytes with a content type
    - Download for asset delivery
    - Idempotent delete (False when the object was already absent)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name (e.g., 's3', 'local')."""
        pass

    @abstractmethod
    def upload(
        self,
        key: str,
        content: bytes,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> StorageMetadata:
        """
        Upload content to storage.

        Args:
            key: Object key (e.g., "blog-posts/3f2a...")
            content: Raw bytes
            content_type: MIME type of the content
            metadata: Custom metadata to attach

        Returns:
            StorageMetadata with upload details
        """
        pass

    @abstractmethod
    def download(self, key: str) -> Optional[StorageObject]:
        """
        Download content from storage.

        Returns:
            StorageObject, or None if not found
        """
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check if object exists."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete object from storage.

        Returns:
            True if deleted, False if not found

        Raises:
            Provider-specific errors when the store could not be reached.
        """
        pass
