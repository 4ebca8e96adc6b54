"""
Postdesk Database Models

Tables:
- User: Authors, mirrored from the upstream authentication service
- Post: Text content with a single cover image stored in object storage
"""

from datetime import datetime
import uuid

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from postdesk.database import Base


# -----------------------------------------------------------------------------
# User
# -----------------------------------------------------------------------------

class User(Base):
    """Post authors. Identity is owned upstream; we keep id + display name."""
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    posts = relationship("Post", back_populates="author")


# -----------------------------------------------------------------------------
# Post
# -----------------------------------------------------------------------------

class Post(Base):
    """
    Posts - text stored in the database, cover image in object storage.

    Storage strategy:
    - Title/summary/content stored here
    - Cover image bytes stored in object storage under a fixed namespace
    - image_url is the public reference; the storage identifier is derived
      from it by AssetReferenceCodec.parse_identifier
    """
    __tablename__ = "posts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    author_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)

    title = Column(Text, nullable=False)
    summary = Column(Text, nullable=False)
    content = Column(Text, nullable=False)

    # Cover image reference (URL into the asset namespace)
    image_url = Column(String(1024), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    author = relationship("User", back_populates="posts")

    __table_args__ = (
        Index("ix_posts_created_at", "created_at"),
        Index("ix_posts_author_id", "author_id"),
    )
