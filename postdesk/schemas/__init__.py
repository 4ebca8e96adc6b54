"""
Pydantic schemas for API request/response validation.
"""

from postdesk.schemas.posts import (
    AuthorSummary,
    MessageResponse,
    PostDetail,
    PostListResponse,
    PostSummary,
)

__all__ = [
    "AuthorSummary",
    "PostSummary",
    "PostDetail",
    "PostListResponse",
    "MessageResponse",
]
