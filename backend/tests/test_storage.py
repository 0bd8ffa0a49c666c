"""Tests for MinIO storage helpers."""

from unittest.mock import MagicMock

import pytest

from services import storage

CACHED_CLIENT_FACTORY = storage.get_minio_client


@pytest.fixture(autouse=True)
def _reset_cache():
    CACHED_CLIENT_FACTORY.cache_clear()
    yield
    CACHED_CLIENT_FACTORY.cache_clear()


def test_get_minio_client_uses_settings(monkeypatch):
    monkeypatch.setattr(storage, "get_minio_client", CACHED_CLIENT_FACTORY)
    mock_client = MagicMock(name="Minio")
    created_clients = []

    monkeypatch.setattr(storage.settings, "minio_secure", True)

    def fake_minio(endpoint, access_key, secret_key, secure):
        created_clients.append(
            {
                "endpoint": endpoint,
                "access_key": access_key,
                "secret_key": secret_key,
                "secure": secure,
            }
        )
        return mock_client

    monkeypatch.setattr(storage, "Minio", fake_minio)

    client = storage.get_minio_client()
    assert client is mock_client
    assert storage.get_minio_client() is client  # cached

    assert created_clients == [
        {
            "endpoint": storage.settings.minio_endpoint,
            "access_key": storage.settings.minio_access_key,
            "secret_key": storage.settings.minio_secret_key,
            "secure": True,
        }
    ]


def test_ensure_bucket_existing():
    client = MagicMock()
    client.bucket_exists.return_value = True

    storage.ensure_bucket(client)
    client.bucket_exists.assert_called_once_with(storage.settings.minio_bucket)
    client.make_bucket.assert_not_called()


def test_ensure_bucket_creates_when_missing():
    client = MagicMock()
    client.bucket_exists.return_value = False

    storage.ensure_bucket(client)

    client.bucket_exists.assert_called_once_with(storage.settings.minio_bucket)
    client.make_bucket.assert_called_once_with(storage.settings.minio_bucket)


def test_ensure_bucket_handles_existing_race(monkeypatch):
    class FakeS3Error(Exception):
        def __init__(self, code):
            super().__init__(code)
            self.code = code

    client = MagicMock()
    client.bucket_exists.return_value = False
    client.make_bucket.side_effect = FakeS3Error("BucketAlreadyExists")

    monkeypatch.setattr(storage, "S3Error", FakeS3Error)

    storage.ensure_bucket(client)

    client.make_bucket.assert_called_once_with(storage.settings.minio_bucket)


def test_upload_object_puts_bytes_and_returns_public_url(monkeypatch):
    monkeypatch.setattr(storage.settings, "minio_public_url", "https://cdn.example.com/media/")
    client = MagicMock()
    client.bucket_exists.return_value = True

    url = storage.upload_object("posts/u1/demo.jpg", b"jpeg-bytes", "image/jpeg", client)

    assert url == "https://cdn.example.com/media/posts/u1/demo.jpg"
    client.put_object.assert_called_once()
    args = client.put_object.call_args
    assert args.args[:2] == (storage.settings.minio_bucket, "posts/u1/demo.jpg")
    assert args.kwargs["length"] == len(b"jpeg-bytes")
    assert args.kwargs["content_type"] == "image/jpeg"
    assert args.kwargs["data"].read() == b"jpeg-bytes"


def test_public_url_defaults_to_minio_endpoint(monkeypatch):
    monkeypatch.setattr(storage.settings, "minio_public_url", None)
    monkeypatch.setattr(storage.settings, "minio_secure", False)

    url = storage.public_url_for("avatars/a.jpg")

    assert url == (
        f"http://{storage.settings.minio_endpoint}/{storage.settings.minio_bucket}/avatars/a.jpg"
    )


def test_delete_object_calls_remove_object():
    client = MagicMock()

    storage.delete_object("posts/demo.jpg", client)

    client.remove_object.assert_called_once_with(
        storage.settings.minio_bucket,
        "posts/demo.jpg",
    )


def test_delete_object_ignores_missing_key_errors(monkeypatch):
    class FakeS3Error(Exception):
        def __init__(self, code):
            super().__init__(code)
            self.code = code

    client = MagicMock()
    client.remove_object.side_effect = FakeS3Error("NoSuchKey")
    monkeypatch.setattr(storage, "S3Error", FakeS3Error)

    storage.delete_object("posts/missing.jpg", client)

    client.remove_object.assert_called_once()


def test_delete_object_reraises_other_errors(monkeypatch):
    class FakeS3Error(Exception):
        def __init__(self, code):
            super().__init__(code)
            self.code = code

    client = MagicMock()
    client.remove_object.side_effect = FakeS3Error("AccessDenied")
    monkeypatch.setattr(storage, "S3Error", FakeS3Error)

    with pytest.raises(FakeS3Error):
        storage.delete_object("posts/locked.jpg", client)
