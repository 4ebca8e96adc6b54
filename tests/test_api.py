# tests/test_api.py
"""
Contract tests for API responses.
"""

import uuid
from urllib.parse import urlparse

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from postdesk.config import get_settings
from postdesk.main import app
from postdesk.services.post_store import PostStore
from postdesk.storage.factory import reset_storage_provider, set_storage_provider

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24
GIF_BYTES = b"GIF89a" + b"\x00" * 24


@pytest.fixture
def client(db_session, provider):
    """Test client over fresh tables and a local provider that can be made to fail."""
    set_storage_provider(provider)
    try:
        yield TestClient(app)
    finally:
        reset_storage_provider()


def _headers(user_id=None, name="alice"):
    return {"X-User-Id": str(user_id or uuid.uuid4()), "X-User-Name": name}


def _create(client, headers, filename="cover.png", body=PNG_BYTES, content_type="image/png"):
    return client.post(
        "/v1/posts",
        data={"title": "Hello", "summary": "Short", "content": "Long body"},
        files={"file": (filename, body, content_type)},
        headers=headers,
    )


class TestHealthEndpoints:
    """Test health check endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "postdesk-api"
        assert "version" in data

    def test_ping(self, client):
        response = client.get("/ping")
        assert response.status_code == 200
        assert response.text == "pong"


class TestCreatePost:
    """POST /v1/posts"""

    def test_create_returns_post_with_served_cover(self, client):
        response = _create(client, _headers(name="alice"))
        assert response.status_code == 201

        data = response.json()
        assert data["title"] == "Hello"
        assert data["content"] == "Long body"
        assert data["author"]["username"] == "alice"
        assert data["image_url"].endswith(".png")

        asset = client.get(urlparse(data["image_url"]).path)
        assert asset.status_code == 200
        assert asset.content == PNG_BYTES
        assert asset.headers["content-type"] == "image/png"

    def test_anonymous_rejected(self, client):
        response = _create(client, {})
        assert response.status_code == 401
        assert "detail" in response.json()

    def test_missing_cover_rejected(self, client):
        response = client.post(
            "/v1/posts",
            data={"title": "Hello", "summary": "Short", "content": "Long body"},
            headers=_headers(),
        )
        assert response.status_code == 400

    def test_missing_fields_rejected(self, client):
        response = client.post(
            "/v1/posts",
            data={"title": "Hello", "summary": "", "content": "Long body"},
            files={"file": ("cover.png", PNG_BYTES, "image/png")},
            headers=_headers(),
        )
        assert response.status_code == 400

    def test_disallowed_extension_rejected(self, client):
        response = _create(client, _headers(), filename="notes.txt", content_type="text/plain")
        assert response.status_code == 400
        assert "Invalid file type" in response.json()["detail"]

    def test_oversize_cover_rejected(self, client, monkeypatch):
        monkeypatch.setattr(get_settings(), "MAX_ASSET_BYTES", 10)
        response = _create(client, _headers())
        assert response.status_code == 400

    def test_upload_failure_is_bad_gateway(self, client, provider):
        provider.fail_upload = True

        response = _create(client, _headers())
        assert response.status_code == 502
        assert response.json() == {"detail": "Cover image upload failed"}
        assert client.get("/v1/posts").json()["total"] == 0

    def test_insert_failure_is_server_error(self, client, provider, monkeypatch):
        def failing_insert(self, **kwargs):
            raise OperationalError("INSERT", {}, Exception("db down"))

        monkeypatch.setattr(PostStore, "insert", failing_insert)

        response = _create(client, _headers())
        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to create post"}
        assert provider.list_all() == []


class TestReadPosts:
    """GET /v1/posts and GET /v1/posts/{id}"""

    def test_list_includes_author(self, client):
        _create(client, _headers(name="alice"))
        _create(client, _headers(name="bob"))

        response = client.get("/v1/posts")
        assert response.status_code == 200

        data = response.json()
        assert data["total"] == 2
        assert {p["author"]["username"] for p in data["posts"]} == {"alice", "bob"}
        assert "content" not in data["posts"][0]

    def test_get_by_id(self, client):
        post_id = _create(client, _headers()).json()["id"]

        response = client.get(f"/v1/posts/{post_id}")
        assert response.status_code == 200
        assert response.json()["id"] == post_id

    def test_invalid_id(self, client):
        assert client.get("/v1/posts/invalid-id").status_code == 404

    def test_not_found(self, client):
        response = client.get("/v1/posts/00000000-0000-0000-0000-000000000000")
        assert response.status_code == 404


class TestUpdatePost:
    """PUT /v1/posts/{id}"""

    def test_other_user_forbidden(self, client):
        post_id = _create(client, _headers()).json()["id"]

        response = client.put(
            f"/v1/posts/{post_id}",
            data={"title": "Hijack", "summary": "S", "content": "C"},
            headers=_headers(name="mallory"),
        )
        assert response.status_code == 403

    def test_owner_replaces_cover(self, client):
        owner = _headers()
        created = _create(client, owner).json()
        old_path = urlparse(created["image_url"]).path

        response = client.put(
            f"/v1/posts/{created['id']}",
            data={"title": "Edited", "summary": "S", "content": "C"},
            files={"file": ("cover.gif", GIF_BYTES, "image/gif")},
            headers=owner,
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Post updated"

        post = client.get(f"/v1/posts/{created['id']}").json()
        assert post["title"] == "Edited"
        assert post["image_url"] != created["image_url"]
        assert client.get(urlparse(post["image_url"]).path).content == GIF_BYTES
        assert client.get(old_path).status_code == 404

    def test_owner_updates_text_only(self, client):
        owner = _headers()
        created = _create(client, owner).json()

        response = client.put(
            f"/v1/posts/{created['id']}",
            data={"title": "Edited", "summary": "S", "content": "C"},
            headers=owner,
        )
        assert response.status_code == 200

        post = client.get(f"/v1/posts/{created['id']}").json()
        assert post["image_url"] == created["image_url"]

    def test_upload_failure_keeps_old_cover(self, client, provider):
        owner = _headers()
        created = _create(client, owner).json()
        provider.fail_upload = True

        response = client.put(
            f"/v1/posts/{created['id']}",
            data={"title": "Edited", "summary": "S", "content": "C"},
            files={"file": ("cover.gif", GIF_BYTES, "image/gif")},
            headers=owner,
        )
        assert response.status_code == 502

        post = client.get(f"/v1/posts/{created['id']}").json()
        assert post["title"] == "Hello"
        assert post["image_url"] == created["image_url"]
        assert client.get(urlparse(post["image_url"]).path).status_code == 200

    def test_update_failure_is_server_error(self, client, provider, monkeypatch):
        owner = _headers()
        created = _create(client, owner).json()
        keys_before = provider.list_all()

        def failing_update(self, post_id, fields):
            raise OperationalError("UPDATE", {}, Exception("db down"))

        monkeypatch.setattr(PostStore, "update_by_id", failing_update)

        response = client.put(
            f"/v1/posts/{created['id']}",
            data={"title": "Edited", "summary": "S", "content": "C"},
            files={"file": ("cover.gif", GIF_BYTES, "image/gif")},
            headers=owner,
        )
        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to update post"}
        assert provider.list_all() == keys_before


class TestDeletePost:
    """DELETE /v1/posts/{id}"""

    def test_owner_deletes(self, client):
        owner = _headers()
        created = _create(client, owner).json()

        response = client.delete(f"/v1/posts/{created['id']}", headers=owner)
        assert response.status_code == 200
        assert response.json()["message"] == "Post deleted"

        assert client.get(f"/v1/posts/{created['id']}").status_code == 404
        assert client.get(urlparse(created["image_url"]).path).status_code == 404

    def test_anonymous_rejected(self, client):
        post_id = _create(client, _headers()).json()["id"]
        assert client.delete(f"/v1/posts/{post_id}").status_code == 401

    def test_other_user_forbidden(self, client):
        post_id = _create(client, _headers()).json()["id"]
        assert client.delete(f"/v1/posts/{post_id}", headers=_headers()).status_code == 403

    def test_record_delete_failure_is_server_error(self, client, monkeypatch):
        owner = _headers()
        created = _create(client, owner).json()

        def failing_delete(self, post_id):
            raise OperationalError("DELETE", {}, Exception("db down"))

        monkeypatch.setattr(PostStore, "delete_by_id", failing_delete)

        response = client.delete(f"/v1/posts/{created['id']}", headers=owner)
        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to delete post"}

        monkeypatch.undo()
        assert client.get(f"/v1/posts/{created['id']}").status_code == 200
        assert client.get(urlparse(created["image_url"]).path).status_code == 200
