"""
Error taxonomy for post lifecycle operations.

Every error carries the HTTP status a transport should answer with, so the
FastAPI exception handler in postdesk.main maps them without a lookup table.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from postdesk.services.post_lifecycle import CleanupAttempt


class PostLifecycleError(Exception):
    """Base class for errors surfaced by the lifecycle manager."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(PostLifecycleError):
    """Raised when a required field or the mandatory cover image is missing."""

    status_code = 400


class Unauthorized(PostLifecycleError):
    """Raised when no principal is present for a call that needs one."""

    status_code = 401


class Forbidden(PostLifecycleError):
    """Raised when the principal is not the post's author."""

    status_code = 403


class NotFound(PostLifecycleError):
    """Raised when the post does not exist."""

    status_code = 404


class UploadFailed(PostLifecycleError):
    """Raised when the blob store rejects or cannot complete an upload."""

    status_code = 502


class RecordWriteFailed(PostLifecycleError):
    """
    Raised when the record store insert/update/delete fails.

    When an uploaded blob had to be compensated, the attempt is attached so
    callers can see whether an orphan may remain.
    """

    status_code = 500

    def __init__(self, message: str, cleanup: CleanupAttempt | None = None):
        super().__init__(message)
        self.cleanup = cleanup
