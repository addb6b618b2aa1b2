"""
Pytest configuration and fixtures for entity image tests.
Provides AWS mocking, S3 and SQL fixtures with proper cleanup.
"""

import base64
import os
from collections.abc import Callable
from typing import Any

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("IMAGE_S3_BUCKET_NAME", "entity-images-test")
os.environ.setdefault("IMAGE_DATABASE_URL", "sqlite://")
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "true")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "entity-image-service")
os.environ.setdefault("POWERTOOLS_METRICS_NAMESPACE", "EntityImageService")

from core.infrastructure.adapters.sql_adapter import SQLAdapter  # noqa: E402
from core.infrastructure.aws.s3_blob_storage import S3BlobStorage  # noqa: E402
from core.infrastructure.sql.sql_image_records import SQLImageRecords  # noqa: E402
from core.services.image_consistency import ImageConsistencyService  # noqa: E402


@pytest.fixture(autouse=True)
def _clean_optional_env(monkeypatch):
    for name in ("AWS_ENDPOINT_URL", "IMAGE_S3_OBJECT_ACL", "IMAGE_PUBLIC_BASE_URL", "APP_RUNTIME"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="function")
def aws_mock():
    with mock_aws():
        yield


@pytest.fixture(scope="function")
def s3_client(aws_mock):
    """S3 client for bucket operations."""
    return boto3.client("s3", region_name=os.getenv("AWS_REGION"))


def _cleanup_s3_objects(s3_client, bucket_name):
    """Helper to delete all objects from S3 bucket efficiently."""
    try:
        paginator = s3_client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=bucket_name):
            objects = page.get("Contents", [])
            if objects:
                delete_keys = [{"Key": obj["Key"]} for obj in objects]
                s3_client.delete_objects(Bucket=bucket_name, Delete={"Objects": delete_keys})
    except ClientError as e:
        if e.response["Error"]["Code"] != "NoSuchBucket":
            raise


@pytest.fixture(scope="function")
def s3_bucket(s3_client):
    """
    Create and manage S3 bucket for testing.

    Cleanup Strategy:
    - Objects are deleted after each test (teardown)
    - Bucket is NOT deleted (moto cleans up on context exit)
    """
    bucket_name = os.getenv("IMAGE_S3_BUCKET_NAME")

    try:
        s3_client.head_bucket(Bucket=bucket_name)
    except ClientError:
        s3_client.create_bucket(Bucket=bucket_name)

    yield s3_client

    _cleanup_s3_objects(s3_client, bucket_name)


@pytest.fixture
def s3_put_object(s3_bucket) -> Callable[..., dict[str, Any]]:
    """
    Helper to upload an object to S3.

    Usage:
        s3_put_object("assets/img/profile/a/ab/ab...ff.png", image_bytes, "image/png")
    """

    def _put(key: str, body: bytes, content_type: str = "application/octet-stream"):
        return s3_bucket.put_object(
            Bucket=os.getenv("IMAGE_S3_BUCKET_NAME"),
            Key=key,
            Body=body,
            ContentType=content_type,
        )

    return _put


@pytest.fixture
def s3_get_object(s3_bucket) -> Callable[[str], bytes]:
    """
    Helper to get an object from S3.

    Raises ClientError (NoSuchKey) when the object is absent.
    """

    def _get(key: str) -> bytes:
        response: dict[str, Any] = s3_bucket.get_object(
            Bucket=os.getenv("IMAGE_S3_BUCKET_NAME"),
            Key=key,
        )
        data: bytes = response["Body"].read()
        return data

    return _get


@pytest.fixture
def s3_object_exists(s3_bucket) -> Callable[[str], bool]:
    def _exists(key: str) -> bool:
        try:
            s3_bucket.head_object(Bucket=os.getenv("IMAGE_S3_BUCKET_NAME"), Key=key)
        except ClientError:
            return False
        return True

    return _exists


@pytest.fixture
def sql_adapter(tmp_path) -> SQLAdapter:
    """SQLite-backed adapter with the image tables created."""
    adapter = SQLAdapter(f"sqlite:///{tmp_path / 'images.db'}")
    adapter.create_tables()

    yield adapter

    adapter.dispose()


@pytest.fixture
def image_records(sql_adapter) -> SQLImageRecords:
    return SQLImageRecords(sql_adapter)


@pytest.fixture
def blob_storage(s3_bucket) -> S3BlobStorage:
    return S3BlobStorage()


@pytest.fixture
def image_service(image_records, blob_storage) -> ImageConsistencyService:
    """Service wired to a moto S3 bucket and a SQLite database."""
    return ImageConsistencyService(records=image_records, storage=blob_storage)


@pytest.fixture
def sample_image_binary() -> bytes:
    """Sample binary image data (1x1 PNG)."""
    png_base64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
    return base64.b64decode(png_base64)


@pytest.fixture
def sample_jpeg_binary() -> bytes:
    """Sample binary JPEG data (minimal valid JPEG)."""
    return (
        b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
        b"\xff\xdb\x00C\x00\x08\x06\x06\x07\x06\x05\x08\x07\x07\x07\t\t\x08\n\x0c"
        b"\x14\r\x0c\x0b\x0b\x0c\x19\x12\x13\x0f\x14\x1d\x1a\x1f\x1e\x1d\x1a\x1c"
        b"\x1c $.' \",#\x1c\x1c(7),01444\x1f'9=82<.342\xff\xc0\x00\x0b\x08"
        b"\x00\x01\x00\x01\x01\x01\x11\x00\xff\xc4\x00\x14\x00\x01\x00\x00\x00"
        b"\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\t\xff\xc4\x00\x14\x10"
        b"\x01\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00"
        b"\xff\xda\x00\x08\x01\x01\x00\x00?\x00\x7f\x00\xff\xd9"
    )
