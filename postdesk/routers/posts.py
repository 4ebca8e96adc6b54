"""
Post endpoints.

GET    /v1/posts          - Newest posts (max 20) with author names
GET    /v1/posts/{id}     - Single post with author name
POST   /v1/posts          - Create a post (multipart, cover image required)
PUT    /v1/posts/{id}     - Update a post (multipart, cover image optional)
DELETE /v1/posts/{id}     - Delete a post and its cover image

Lifecycle errors propagate to the handler registered in postdesk.main.
"""

import logging
import mimetypes
from pathlib import PurePath

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from postdesk import models
from postdesk.auth import get_principal
from postdesk.config import get_settings
from postdesk.database import get_db
from postdesk.errors import ValidationFailed
from postdesk.schemas.posts import (
    AuthorSummary,
    MessageResponse,
    PostDetail,
    PostListResponse,
    PostSummary,
)
from postdesk.services.authorization import Principal
from postdesk.services.post_lifecycle import PostLifecycleManager
from postdesk.services.post_store import PostStore
from postdesk.storage.assets import AssetStore
from postdesk.storage.factory import get_asset_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/posts", tags=["posts"])


def get_lifecycle_manager(
    db: Session = Depends(get_db),
    assets: AssetStore = Depends(get_asset_store),
) -> PostLifecycleManager:
    return PostLifecycleManager(
        PostStore(db),
        assets,
        max_list_limit=get_settings().POST_LIST_LIMIT,
    )


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _read_cover(file: UploadFile | None) -> tuple[bytes | None, str | None]:
    """
    Read an uploaded cover image, enforcing type and size limits.

    Returns (None, None) when no file was sent.
    """
    if file is None or not file.filename:
        return None, None

    settings = get_settings()
    extension = PurePath(file.filename).suffix.lower().lstrip(".")
    if extension not in settings.allowed_asset_extensions:
        allowed = ", ".join(sorted(e.upper() for e in settings.allowed_asset_extensions))
        raise ValidationFailed(f"Invalid file type. Only {allowed} image files are allowed")

    content = file.file.read(settings.MAX_ASSET_BYTES + 1)
    if len(content) > settings.MAX_ASSET_BYTES:
        raise ValidationFailed(f"Cover image exceeds {settings.MAX_ASSET_BYTES} bytes")

    content_type = file.content_type
    if not content_type or content_type == "application/octet-stream":
        content_type = mimetypes.guess_type(file.filename)[0] or "application/octet-stream"
    return content, content_type


def _author(post: models.Post) -> AuthorSummary:
    return AuthorSummary(
        id=str(post.author_id),
        username=post.author.username if post.author else "",
    )


def _to_summary(post: models.Post) -> PostSummary:
    return PostSummary(
        id=str(post.id),
        title=post.title,
        summary=post.summary,
        image_url=post.image_url,
        author=_author(post),
        created_at=post.created_at,
        updated_at=post.updated_at,
    )


def _to_detail(post: models.Post) -> PostDetail:
    return PostDetail(**_to_summary(post).model_dump(), content=post.content)


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.get("", response_model=PostListResponse)
def list_posts(
    limit: int | None = None,
    manager: PostLifecycleManager = Depends(get_lifecycle_manager),
) -> PostListResponse:
    """Newest posts first."""
    posts = manager.list_recent(limit)
    return PostListResponse(posts=[_to_summary(p) for p in posts], total=len(posts))


@router.get("/{post_id}", response_model=PostDetail)
def get_post(
    post_id: str,
    manager: PostLifecycleManager = Depends(get_lifecycle_manager),
) -> PostDetail:
    return _to_detail(manager.get_by_id(post_id))


@router.post("", response_model=PostDetail, status_code=201)
def create_post(
    title: str = Form(""),
    summary: str = Form(""),
    content: str = Form(""),
    file: UploadFile | None = File(None),
    principal: Principal | None = Depends(get_principal),
    manager: PostLifecycleManager = Depends(get_lifecycle_manager),
) -> PostDetail:
    """Create a post. The cover image is uploaded before the post is stored."""
    cover, content_type = _read_cover(file)
    post = manager.create(principal, title, summary, content, cover, content_type)
    return _to_detail(post)


@router.put("/{post_id}", response_model=MessageResponse)
def update_post(
    post_id: str,
    title: str = Form(""),
    summary: str = Form(""),
    content: str = Form(""),
    file: UploadFile | None = File(None),
    principal: Principal | None = Depends(get_principal),
    manager: PostLifecycleManager = Depends(get_lifecycle_manager),
) -> MessageResponse:
    """Update a post; a new cover image replaces the old one."""
    cover, content_type = _read_cover(file)
    manager.replace(principal, post_id, title, summary, content, cover, content_type)
    return MessageResponse(message="Post updated")


@router.delete("/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: str,
    principal: Principal | None = Depends(get_principal),
    manager: PostLifecycleManager = Depends(get_lifecycle_manager),
) -> MessageResponse:
    """Delete a post. Cover image removal is best-effort and never blocks this."""
    manager.delete_record(principal, post_id)
    return MessageResponse(message="Post deleted")
