"""
Business logic services.
"""

from postdesk.services.authorization import Principal, is_owner
from postdesk.services.post_lifecycle import (
    CleanupAttempt,
    CleanupStatus,
    DeleteOutcome,
    PostLifecycleManager,
    ReplaceOutcome,
)
from postdesk.services.post_store import PostStore

__all__ = [
    "Principal",
    "is_owner",
    "PostStore",
    "PostLifecycleManager",
    "CleanupAttempt",
    "CleanupStatus",
    "ReplaceOutcome",
    "DeleteOutcome",
]
