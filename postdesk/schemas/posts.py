"""
Schemas for post endpoints.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AuthorSummary(BaseModel):
    """Author display info joined onto posts."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Author ID (UUID)")
    username: str = Field(..., description="Display name")


class PostSummary(BaseModel):
    """
    Post list item.
    GET /v1/posts
    """

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Post ID (UUID)")
    title: str
    summary: str
    image_url: str | None = Field(None, description="Cover image reference")
    author: AuthorSummary
    created_at: datetime
    updated_at: datetime


class PostDetail(PostSummary):
    """
    Full post.
    GET /v1/posts/{id}, POST /v1/posts
    """

    content: str


class PostListResponse(BaseModel):
    """Newest posts, bounded window."""

    posts: list[PostSummary]
    total: int


class MessageResponse(BaseModel):
    """Acknowledgement for replace/delete."""

    message: str
