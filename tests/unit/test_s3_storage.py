"""Tests for S3StorageProvider against a mocked boto3 client."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from postdesk.config import Settings
from postdesk.storage import s3_provider
from postdesk.storage.factory import get_storage_provider, reset_storage_provider
from postdesk.storage.s3_provider import S3StorageProvider


def _client_error(code: str, operation: str = "HeadObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def provider(client):
    return S3StorageProvider(bucket="covers", client=client)


class TestS3StorageProvider:

    def test_requires_bucket(self):
        with pytest.raises(ValueError, match="S3 bucket required"):
            S3StorageProvider(bucket=None, client=MagicMock())

    def test_upload_sets_content_type(self, provider, client):
        metadata = provider.upload("blog-posts/abc", b"bytes", "image/jpeg")

        kwargs = client.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "covers"
        assert kwargs["Key"] == "blog-posts/abc"
        assert kwargs["Body"] == b"bytes"
        assert kwargs["ContentType"] == "image/jpeg"
        assert kwargs["Metadata"]["content-hash"] == metadata.content_hash
        assert metadata.size_bytes == 5

    def test_upload_error_propagates(self, provider, client):
        client.put_object.side_effect = _client_error("AccessDenied", "PutObject")

        with pytest.raises(ClientError):
            provider.upload("blog-posts/abc", b"bytes", "image/jpeg")

    def test_delete_existing(self, provider, client):
        assert provider.delete("blog-posts/abc") is True
        client.delete_object.assert_called_once_with(Bucket="covers", Key="blog-posts/abc")

    def test_delete_missing_returns_false(self, provider, client):
        client.head_object.side_effect = _client_error("404")

        assert provider.delete("blog-posts/abc") is False
        client.delete_object.assert_not_called()

    def test_delete_error_propagates(self, provider, client):
        client.delete_object.side_effect = _client_error("InternalError", "DeleteObject")

        with pytest.raises(ClientError):
            provider.delete("blog-posts/abc")

    def test_exists_error_propagates(self, provider, client):
        client.head_object.side_effect = _client_error("403")

        with pytest.raises(ClientError):
            provider.exists("blog-posts/abc")

    def test_download_missing(self, provider, client):
        client.get_object.side_effect = _client_error("NoSuchKey", "GetObject")

        assert provider.download("blog-posts/abc") is None

    def test_download(self, provider, client):
        body = MagicMock()
        body.read.return_value = b"bytes"
        client.get_object.return_value = {
            "Body": body,
            "ContentType": "image/png",
            "Metadata": {"content-hash": "abc"},
        }

        stored = provider.download("blog-posts/abc")

        assert stored.content == b"bytes"
        assert stored.metadata.content_type == "image/png"
        assert stored.metadata.content_hash == "abc"


class TestClientConstruction:
    """Settings reach the boto3 client."""

    def test_credentials_passed_from_settings(self, monkeypatch):
        build_client = MagicMock()
        monkeypatch.setattr(s3_provider.boto3, "client", build_client)
        settings = Settings(
            DATABASE_URL="sqlite:///:memory:",
            STORAGE_PROVIDER="s3",
            S3_BUCKET="covers",
            S3_REGION="eu-west-1",
            AWS_ACCESS_KEY_ID="AKIATEST",
            AWS_SECRET_ACCESS_KEY="secret",
        )

        reset_storage_provider()
        try:
            provider = get_storage_provider(settings)
        finally:
            reset_storage_provider()

        assert provider.name == "s3"
        kwargs = build_client.call_args.kwargs
        assert kwargs["region_name"] == "eu-west-1"
        assert kwargs["aws_access_key_id"] == "AKIATEST"
        assert kwargs["aws_secret_access_key"] == "secret"

    def test_missing_credentials_use_aws_chain(self, monkeypatch):
        build_client = MagicMock()
        monkeypatch.setattr(s3_provider.boto3, "client", build_client)

        S3StorageProvider(bucket="covers")

        kwargs = build_client.call_args.kwargs
        assert kwargs["aws_access_key_id"] is None
        assert kwargs["aws_secret_access_key"] is None
