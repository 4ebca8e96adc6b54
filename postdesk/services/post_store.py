"""
Record store for posts.

Thin SQLAlchemy adapter: every write commits on success and rolls the
session back before re-raising on failure, so a failed call never leaves
a half-applied change in the session.
"""

import logging
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.orm.exc import StaleDataError

from postdesk import models
from postdesk.services.authorization import Principal

logger = logging.getLogger(__name__)

# Fields a caller may change after creation
UPDATABLE_FIELDS = frozenset({"title", "summary", "content", "image_url"})


def coerce_id(value: Any) -> uuid.UUID | None:
    """Parse an identifier into a UUID, or None if it is not one."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (TypeError, ValueError, AttributeError):
        return None


class PostStore:
    """Persists, loads, updates and deletes posts."""

    def __init__(self, db: Session):
        self.db = db

    def _get_or_create_author(self, principal: Principal) -> models.User:
        """Mirror the upstream principal into the users table."""
        author_id = coerce_id(principal.id)
        if author_id is None:
            raise ValueError(f"Principal id {principal.id!r} is not a UUID")

        author = self.db.get(models.User, author_id)
        if author is None:
            author = models.User(id=author_id, username=principal.username or "")
            self.db.add(author)
        elif principal.username and author.username != principal.username:
            author.username = principal.username
        return author

    def insert(
        self,
        *,
        principal: Principal,
        title: str,
        summary: str,
        content: str,
        image_url: str | None,
    ) -> models.Post:
        """Insert a new post authored by the principal."""
        now = datetime.utcnow()
        try:
            author = self._get_or_create_author(principal)
            post = models.Post(
                id=uuid.uuid4(),
                author=author,
                title=title,
                summary=summary,
                content=content,
                image_url=image_url,
                created_at=now,
                updated_at=now,
            )
            self.db.add(post)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        logger.debug(f"Inserted post {post.id}")
        return post

    def find_by_id(self, post_id: Any, refresh: bool = False) -> models.Post | None:
        """Load a post; refresh=True bypasses the session's identity map."""
        uid = coerce_id(post_id)
        if uid is None:
            return None
        return self.db.get(models.Post, uid, populate_existing=refresh)

    def get_with_author(self, post_id: Any) -> models.Post | None:
        """Load a post with its author joined in."""
        uid = coerce_id(post_id)
        if uid is None:
            return None
        return (
            self.db.query(models.Post)
            .options(joinedload(models.Post.author))
            .filter(models.Post.id == uid)
            .first()
        )

    def update_by_id(self, post_id: Any, fields: dict[str, Any]) -> models.Post | None:
        """
        Apply field changes and bump updated_at.

        Returns:
            The updated post, or None if it no longer exists
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        try:
            post = self.find_by_id(post_id, refresh=True)
            if post is None:
                return None
            for name, value in fields.items():
                setattr(post, name, value)
            post.updated_at = datetime.utcnow()
            self.db.commit()
        except StaleDataError:
            # Row deleted by another session after the refresh
            self.db.rollback()
            logger.debug(f"Post {post_id} vanished during update")
            return None
        except SQLAlchemyError:
            self.db.rollback()
            raise

        logger.debug(f"Updated post {post.id}: {sorted(fields)}")
        return post

    def delete_by_id(self, post_id: Any) -> bool:
        """
        Delete a post.

        Returns:
            True if a row was removed, False if it was already gone
        """
        try:
            post = self.find_by_id(post_id, refresh=True)
            if post is None:
                return False
            self.db.delete(post)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        logger.debug(f"Deleted post {post.id}")
        return True

    def list_recent(self, limit: int) -> list[models.Post]:
        """Newest posts first, authors joined in."""
        return (
            self.db.query(models.Post)
            .options(joinedload(models.Post.author))
            .order_by(models.Post.created_at.desc())
            .limit(limit)
            .all()
        )
