"""
Factory functions for creating the storage provider and asset store.
"""

import logging
from typing import Optional

from postdesk.config import Settings, get_settings
from postdesk.storage.assets import AssetStore
from postdesk.storage.base import AssetStorageProvider
from postdesk.storage.references import AssetReferenceCodec

logger = logging.getLogger(__name__)

# Global singleton instance
_storage_provider: Optional[AssetStorageProvider] = None


def get_storage_provider(settings: Optional[Settings] = None) -> AssetStorageProvider:
    """
    Get or create the storage provider instance.

    Settings:
        STORAGE_PROVIDER: 's3' (default) or 'local'
    """
    global _storage_provider

    if _storage_provider is not None:
        return _storage_provider

    settings = settings or get_settings()

    if settings.STORAGE_PROVIDER == "s3":
        from postdesk.storage.s3_provider import S3StorageProvider
        _storage_provider = S3StorageProvider(
            bucket=settings.S3_BUCKET,
            endpoint_url=settings.S3_ENDPOINT_URL,
            region=settings.S3_REGION,
            access_key_id=settings.AWS_ACCESS_KEY_ID,
            secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        )
    else:
        from postdesk.storage.local_provider import LocalStorageProvider
        _storage_provider = LocalStorageProvider(base_path=settings.LOCAL_STORAGE_PATH)

    logger.info(f"Storage provider initialized: {_storage_provider.name}")
    return _storage_provider


def set_storage_provider(provider: AssetStorageProvider) -> None:
    """
    Set a custom storage provider (useful for testing).
    """
    global _storage_provider
    _storage_provider = provider


def reset_storage_provider() -> None:
    """
    Reset the storage provider singleton (for testing).
    """
    global _storage_provider
    _storage_provider = None


def get_asset_store() -> AssetStore:
    """FastAPI dependency: asset store bound to the configured namespace."""
    settings = get_settings()
    codec = AssetReferenceCodec(settings.ASSET_PUBLIC_BASE_URL, settings.ASSET_NAMESPACE)
    return AssetStore(get_storage_provider(settings), codec)
