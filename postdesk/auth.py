# postdesk/auth.py
"""
Principal resolution.

Sessions are issued by the upstream authentication gateway, which forwards
the acting user as X-User-Id / X-User-Name. This service only reads them;
ownership is decided by the lifecycle manager.
"""

import uuid

from fastapi import Header

from postdesk.services.authorization import Principal


def get_principal(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    x_user_name: str | None = Header(default=None, alias="X-User-Name"),
) -> Principal | None:
    """Acting user, or None when the request is anonymous or malformed."""
    if not x_user_id:
        return None
    try:
        user_id = uuid.UUID(x_user_id.strip())
    except ValueError:
        return None
    return Principal(id=user_id, username=(x_user_name or "").strip())
