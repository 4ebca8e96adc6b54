"""
Ownership checks for post mutations.
"""

import uuid
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Principal:
    """The acting user, as resolved by the upstream authentication service."""

    id: Any
    username: str = ""


def canonical_id(value: Any) -> str | None:
    """
    Normalize an identifier to one string form.

    Accepts UUID objects, UUID strings in any accepted spelling, and objects
    wrapping an identifier in an ``id`` attribute (e.g. a User row).
    """
    if value is None:
        return None
    raw = getattr(value, "id", value)
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    try:
        return str(uuid.UUID(text))
    except ValueError:
        return text


def is_owner(principal: Principal | None, record: Any) -> bool:
    """True if the principal authored the record."""
    if principal is None or record is None:
        return False
    principal_id = canonical_id(principal.id)
    return principal_id is not None and principal_id == canonical_id(record.author_id)
