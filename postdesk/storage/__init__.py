"""
Storage provider abstraction for post cover images.

Cover images are stored in object storage (S3), not in the database.
This module provides upload/delete operations and the reference codec.
"""

from postdesk.storage.assets import AssetStore, StoredAsset
from postdesk.storage.base import (
    AssetStorageProvider,
    StorageMetadata,
    StorageObject,
)
from postdesk.storage.factory import (
    get_asset_store,
    get_storage_provider,
    reset_storage_provider,
    set_storage_provider,
)
from postdesk.storage.local_provider import LocalStorageProvider
from postdesk.storage.references import AssetReferenceCodec, extension_for

__all__ = [
    "AssetStorageProvider",
    "AssetStore",
    "AssetReferenceCodec",
    "StoredAsset",
    "StorageObject",
    "StorageMetadata",
    "LocalStorageProvider",
    "extension_for",
    "get_asset_store",
    "get_storage_provider",
    "set_storage_provider",
    "reset_storage_provider",
]
