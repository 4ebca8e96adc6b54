# tests/conftest.py
"""
Pytest configuration and fixtures.
"""

import os
import uuid

import pytest

# Set test environment before anything imports postdesk.database
os.environ.setdefault("TESTING", "1")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("STORAGE_PROVIDER", "local")
os.environ.setdefault("LOG_JSON", "false")

from postdesk.database import Base, SessionLocal, engine, init_db  # noqa: E402
from postdesk.services.authorization import Principal  # noqa: E402
from postdesk.services.post_lifecycle import PostLifecycleManager  # noqa: E402
from postdesk.services.post_store import PostStore  # noqa: E402
from postdesk.storage.assets import AssetStore  # noqa: E402
from postdesk.storage.local_provider import LocalStorageProvider  # noqa: E402
from postdesk.storage.references import AssetReferenceCodec  # noqa: E402


class FlakyStorageProvider(LocalStorageProvider):
    """Local provider whose uploads/deletes can be made to fail."""

    def __init__(self, base_path: str):
        super().__init__(base_path=base_path)
        self.fail_upload = False
        self.fail_delete = False
        self.deleted_keys: list[str] = []

    def upload(self, key, content, content_type, metadata=None):
        if self.fail_upload:
            raise OSError("storage unavailable")
        return super().upload(key, content, content_type, metadata)

    def delete(self, key):
        if self.fail_delete:
            raise OSError("storage unavailable")
        self.deleted_keys.append(key)
        return super().delete(key)


@pytest.fixture
def db_session():
    """Fresh schema per test on the shared in-memory database."""
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def provider(tmp_path):
    return FlakyStorageProvider(base_path=str(tmp_path / "storage"))


@pytest.fixture
def codec():
    return AssetReferenceCodec("http://localhost:4000/assets", "blog-posts")


@pytest.fixture
def asset_store(provider, codec):
    return AssetStore(provider, codec)


@pytest.fixture
def store(db_session):
    return PostStore(db_session)


@pytest.fixture
def manager(store, asset_store):
    return PostLifecycleManager(store, asset_store)


@pytest.fixture
def alice():
    return Principal(id=uuid.uuid4(), username="alice")


@pytest.fixture
def bob():
    return Principal(id=uuid.uuid4(), username="bob")
