"""
Post lifecycle manager.

Keeps the posts table and the cover-image blob store consistent across
create, replace and delete. The two stores cannot be written atomically, so
every operation is ordered around one authoritative record-store step:

- create:  upload -> insert            (insert failure compensates the upload)
- replace: upload new -> update -> delete old
                                       (update failure compensates the new upload)
- delete:  delete record -> delete blob

A post therefore never references a blob that is not there. The price is
that a failed cleanup may leave an unreferenced blob behind; cleanup results
are reported as CleanupAttempt values and logged, never raised.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from postdesk import models
from postdesk.errors import (
    Forbidden,
    NotFound,
    RecordWriteFailed,
    Unauthorized,
    ValidationFailed,
)
from postdesk.services.authorization import Principal, is_owner
from postdesk.services.post_store import PostStore, coerce_id
from postdesk.storage.assets import AssetStore, StoredAsset

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 20


class CleanupStatus(str, Enum):
    """Outcome of a best-effort blob deletion."""
    SUCCEEDED = "succeeded"
    SKIPPED_NOT_FOUND = "skipped_not_found"  # Blob was already gone
    FAILED = "failed"  # Logged; blob may be orphaned
    NOT_ATTEMPTED = "not_attempted"  # Nothing to clean, or reference not ours


@dataclass(frozen=True)
class CleanupAttempt:
    """Result of deleting a blob that is no longer (or never was) referenced."""

    status: CleanupStatus
    identifier: str | None = None
    error: str | None = None

    @property
    def orphan_possible(self) -> bool:
        return self.status == CleanupStatus.FAILED


NO_CLEANUP = CleanupAttempt(CleanupStatus.NOT_ATTEMPTED)


@dataclass
class ReplaceOutcome:
    """Result of a successful replace."""

    post: models.Post
    cleanup: CleanupAttempt  # Deletion of the previous cover image


@dataclass
class DeleteOutcome:
    """Result of a successful delete."""

    post_id: str
    cleanup: CleanupAttempt  # Deletion of the post's cover image


class PostLifecycleManager:
    """
    Orchestrates post writes against the record store and the blob store.

    Synchronous and single-attempt: the authoritative step is never retried
    here, and no locking is done. Concurrent writers on one post converge
    (last metadata write wins, blob deletes all end in absence).
    """

    def __init__(
        self,
        store: PostStore,
        assets: AssetStore,
        max_list_limit: int = DEFAULT_LIST_LIMIT,
    ):
        self.store = store
        self.assets = assets
        self.max_list_limit = max_list_limit

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def list_recent(self, limit: int | None = None) -> list[models.Post]:
        """Newest posts first, at most max_list_limit of them."""
        if limit is None or limit <= 0:
            limit = self.max_list_limit
        return self.store.list_recent(min(limit, self.max_list_limit))

    def get_by_id(self, post_id: Any) -> models.Post:
        post = self.store.get_with_author(post_id)
        if post is None:
            raise NotFound(f"Post {post_id} not found")
        return post

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    def create(
        self,
        principal: Principal | None,
        title: str,
        summary: str,
        content: str,
        asset_bytes: bytes | None,
        asset_content_type: str | None,
    ) -> models.Post:
        """
        Upload the cover image, then insert the post.

        Raises:
            Unauthorized, ValidationFailed: before anything is written
            UploadFailed: nothing was written
            RecordWriteFailed: the upload was compensated (see .cleanup)
        """
        principal = self._require_principal(principal)
        fields = self._validate_fields(title, summary, content)
        if not asset_bytes:
            raise ValidationFailed("Cover image is required")

        asset = self.assets.upload(asset_bytes, asset_content_type or "application/octet-stream")

        try:
            post = self.store.insert(principal=principal, image_url=asset.reference, **fields)
        except SQLAlchemyError as e:
            logger.error(
                f"[POSTS] Insert failed after upload of {asset.identifier}: {e}",
                extra={"event": "post_insert_failed", "identifier": asset.identifier},
            )
            cleanup = self._discard_identifier(asset.identifier, reason="compensate_insert")
            raise RecordWriteFailed("Failed to create post", cleanup=cleanup) from e

        logger.info(
            f"[POSTS] Created post {post.id} with cover {asset.identifier}",
            extra={"event": "post_created", "post_id": str(post.id), "identifier": asset.identifier},
        )
        return post

    # -------------------------------------------------------------------------
    # Replace
    # -------------------------------------------------------------------------

    def replace(
        self,
        principal: Principal | None,
        post_id: Any,
        title: str,
        summary: str,
        content: str,
        new_asset_bytes: bytes | None = None,
        new_asset_content_type: str | None = None,
    ) -> ReplaceOutcome:
        """
        Update a post, optionally swapping its cover image.

        The new image is uploaded before the record points at it, and the old
        image is deleted only after the record update has committed.

        Raises:
            ValidationFailed, NotFound, Unauthorized, Forbidden: before anything is written
            UploadFailed: record untouched, still on the old image
            RecordWriteFailed: record untouched, new upload compensated (see .cleanup)
        """
        fields = self._validate_fields(title, summary, content)
        if new_asset_bytes is not None and not new_asset_bytes:
            raise ValidationFailed("Cover image is empty")

        post = self._load_for_mutation(principal, post_id)

        if new_asset_bytes is None:
            updated = self._update(post.id, fields, new_asset=None)
            logger.info(
                f"[POSTS] Updated post {updated.id} (cover unchanged)",
                extra={"event": "post_updated", "post_id": str(updated.id)},
            )
            return ReplaceOutcome(post=updated, cleanup=NO_CLEANUP)

        old_reference = post.image_url
        asset = self.assets.upload(
            new_asset_bytes, new_asset_content_type or "application/octet-stream"
        )
        updated = self._update(post.id, {**fields, "image_url": asset.reference}, new_asset=asset)

        # Record now points at the new image; the old one is unreferenced.
        cleanup = self._discard_reference(old_reference, reason="replace_old_cover")
        logger.info(
            f"[POSTS] Updated post {updated.id} with new cover {asset.identifier}",
            extra={
                "event": "post_updated",
                "post_id": str(updated.id),
                "identifier": asset.identifier,
                "cleanup_status": cleanup.status.value,
            },
        )
        return ReplaceOutcome(post=updated, cleanup=cleanup)

    def _update(
        self,
        post_id: Any,
        fields: dict[str, Any],
        new_asset: StoredAsset | None,
    ) -> models.Post:
        """Run the authoritative update, compensating new_asset on failure."""
        try:
            updated = self.store.update_by_id(post_id, fields)
        except SQLAlchemyError as e:
            logger.error(
                f"[POSTS] Update of post {post_id} failed: {e}",
                extra={"event": "post_update_failed", "post_id": str(post_id)},
            )
            cleanup = NO_CLEANUP
            if new_asset is not None:
                cleanup = self._discard_identifier(new_asset.identifier, reason="compensate_update")
            raise RecordWriteFailed("Failed to update post", cleanup=cleanup) from e

        if updated is None:
            # Deleted concurrently between load and update
            if new_asset is not None:
                self._discard_identifier(new_asset.identifier, reason="compensate_update")
            raise NotFound(f"Post {post_id} not found")
        return updated

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    def delete_record(self, principal: Principal | None, post_id: Any) -> DeleteOutcome:
        """
        Delete a post, then its cover image.

        Raises:
            NotFound, Unauthorized, Forbidden: before anything is written
            RecordWriteFailed: record still present, image untouched
        """
        post = self._load_for_mutation(principal, post_id)
        reference = post.image_url
        post_key = str(post.id)

        try:
            deleted = self.store.delete_by_id(post.id)
        except SQLAlchemyError as e:
            logger.error(
                f"[POSTS] Delete of post {post_key} failed: {e}",
                extra={"event": "post_delete_failed", "post_id": post_key},
            )
            raise RecordWriteFailed("Failed to delete post") from e

        if not deleted:
            raise NotFound(f"Post {post_key} not found")

        cleanup = self._discard_reference(reference, reason="delete_cover")
        logger.info(
            f"[POSTS] Deleted post {post_key}",
            extra={"event": "post_deleted", "post_id": post_key, "cleanup_status": cleanup.status.value},
        )
        return DeleteOutcome(post_id=post_key, cleanup=cleanup)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _validate_fields(title: str, summary: str, content: str) -> dict[str, str]:
        values = {"title": title, "summary": summary, "content": content}
        missing = [name for name, value in values.items() if not value or not str(value).strip()]
        if missing:
            raise ValidationFailed(f"Required fields missing: {', '.join(missing)}")
        return values

    @staticmethod
    def _require_principal(principal: Principal | None) -> Principal:
        if principal is None or coerce_id(principal.id) is None:
            raise Unauthorized("Authentication required")
        return principal

    def _load_for_mutation(self, principal: Principal | None, post_id: Any) -> models.Post:
        """Load a post and check the principal owns it."""
        post = self.store.find_by_id(post_id)
        if post is None:
            raise NotFound(f"Post {post_id} not found")

        principal = self._require_principal(principal)
        if not is_owner(principal, post):
            logger.warning(
                f"[POSTS] User {principal.username or principal.id} may not modify post {post.id}",
                extra={"event": "post_forbidden", "post_id": str(post.id)},
            )
            raise Forbidden("Only the author may modify this post")
        return post

    def _discard_reference(self, reference: str | None, reason: str) -> CleanupAttempt:
        identifier = self.assets.identifier_for(reference)
        if identifier is None:
            if reference:
                logger.info(
                    f"[POSTS] Not deleting foreign cover reference {reference}",
                    extra={"event": "cleanup_skipped_foreign", "operation": reason},
                )
            return NO_CLEANUP
        return self._discard_identifier(identifier, reason)

    def _discard_identifier(self, identifier: str, reason: str) -> CleanupAttempt:
        """Best-effort blob delete. Never raises."""
        try:
            deleted = self.assets.delete_by_identifier(identifier)
        except Exception as e:
            logger.warning(
                f"[POSTS] Cleanup of {identifier} failed ({reason}); blob may be orphaned: {e}",
                extra={
                    "event": "cleanup_failed",
                    "identifier": identifier,
                    "operation": reason,
                    "cleanup_status": CleanupStatus.FAILED.value,
                },
                exc_info=True,
            )
            return CleanupAttempt(CleanupStatus.FAILED, identifier=identifier, error=str(e))

        status = CleanupStatus.SUCCEEDED if deleted else CleanupStatus.SKIPPED_NOT_FOUND
        logger.info(
            f"[POSTS] Cleanup of {identifier} ({reason}): {status.value}",
            extra={
                "event": "cleanup_done",
                "identifier": identifier,
                "operation": reason,
                "cleanup_status": status.value,
            },
        )
        return CleanupAttempt(status, identifier=identifier)
