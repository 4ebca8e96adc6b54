"""Tests for the ownership guard."""

import uuid
from types import SimpleNamespace

import pytest

from postdesk.services.authorization import Principal, canonical_id, is_owner


def _record(author_id):
    return SimpleNamespace(author_id=author_id)


class TestIsOwner:
    """is_owner() compares identifiers in canonical form."""

    def test_same_uuid(self):
        user_id = uuid.uuid4()
        assert is_owner(Principal(id=user_id), _record(user_id))

    @pytest.mark.parametrize(
        "spelling",
        [
            lambda u: str(u),
            lambda u: str(u).upper(),
            lambda u: u.hex,
            lambda u: f"  {u}  ",
            lambda u: SimpleNamespace(id=u),
            lambda u: SimpleNamespace(id=str(u)),
        ],
    )
    def test_equivalent_forms(self, spelling):
        """String, hex and reference-wrapped forms all match the UUID."""
        user_id = uuid.uuid4()
        assert is_owner(Principal(id=spelling(user_id)), _record(user_id))
        assert is_owner(Principal(id=user_id), _record(spelling(user_id)))

    def test_different_users(self):
        assert not is_owner(Principal(id=uuid.uuid4()), _record(uuid.uuid4()))

    def test_no_principal(self):
        assert not is_owner(None, _record(uuid.uuid4()))

    def test_empty_ids_never_match(self):
        assert not is_owner(Principal(id=""), _record(""))
        assert not is_owner(Principal(id=None), _record(None))

    def test_opaque_string_ids(self):
        assert is_owner(Principal(id="user-42"), _record(" user-42"))
        assert not is_owner(Principal(id="user-42"), _record("user-43"))


class TestCanonicalId:
    def test_uuid_forms_collapse(self):
        user_id = uuid.uuid4()
        assert canonical_id(user_id) == canonical_id(str(user_id).upper()) == str(user_id)

    def test_none(self):
        assert canonical_id(None) is None
