from unittest.mock import MagicMock

import pytest
from botocore.exceptions import BotoCoreError, ClientError

from core.infrastructure.aws.s3_blob_storage import S3BlobStorage
from core.models.errors import BlobStoreError
from core.utils.constants import ENV_APP_RUNTIME, ENV_IMAGE_PUBLIC_BASE_URL

KEY = "assets/img/profile/a/ab/image.png"


def client_error(operation: str) -> ClientError:
    return ClientError({"Error": {"Code": "InternalError", "Message": "secret detail"}}, operation)


class TestS3BlobStorage:
    def test_put_blob_stores_bytes(self, blob_storage, s3_get_object):
        blob_storage.put_blob(key=KEY, file_data=b"png-bytes", content_type="image/png")

        assert s3_get_object(KEY) == b"png-bytes"

    def test_put_blob_overwrites_identical_key(self, blob_storage, s3_get_object):
        blob_storage.put_blob(key=KEY, file_data=b"same", content_type="image/png")
        blob_storage.put_blob(key=KEY, file_data=b"same", content_type="image/png")

        assert s3_get_object(KEY) == b"same"

    def test_remove_blob(self, blob_storage, s3_put_object, s3_object_exists):
        s3_put_object(KEY, b"data", "image/png")

        blob_storage.remove_blob(key=KEY)

        assert not s3_object_exists(KEY)

    def test_remove_missing_blob_is_not_an_error(self, blob_storage):
        blob_storage.remove_blob(key="assets/img/profile/0/00/missing.png")

    @pytest.mark.parametrize("exc", [client_error("PutObject"), BotoCoreError(), RuntimeError("boom")])
    def test_put_blob_translates_errors(self, exc):
        adapter = MagicMock(bucket="bucket", region="us-east-1")
        adapter.put_object.side_effect = exc

        with pytest.raises(BlobStoreError) as err:
            S3BlobStorage(adapter).put_blob(key=KEY, file_data=b"x", content_type="image/png")

        assert err.value.error_code == "BLOB_UPLOAD_FAILED"
        assert err.value.message == "Unable to store image at this time"
        assert "secret" not in err.value.message

    @pytest.mark.parametrize("exc", [client_error("DeleteObject"), BotoCoreError(), RuntimeError("boom")])
    def test_remove_blob_translates_errors(self, exc):
        adapter = MagicMock(bucket="bucket", region="us-east-1")
        adapter.delete_object.side_effect = exc

        with pytest.raises(BlobStoreError) as err:
            S3BlobStorage(adapter).remove_blob(key=KEY)

        assert err.value.error_code == "BLOB_DELETE_FAILED"

    def test_public_url_defaults_to_bucket_endpoint(self):
        adapter = MagicMock(bucket="images", region="eu-west-1")

        url = S3BlobStorage(adapter).public_url(key=KEY)

        assert url == f"https://images.s3.eu-west-1.amazonaws.com/{KEY}"

    def test_public_url_uses_configured_base(self, monkeypatch):
        monkeypatch.setenv(ENV_IMAGE_PUBLIC_BASE_URL, "https://cdn.example.com/")
        adapter = MagicMock(bucket="images", region="eu-west-1")

        assert S3BlobStorage(adapter).public_url(key=KEY) == f"https://cdn.example.com/{KEY}"

    def test_explicit_base_url_wins(self, monkeypatch):
        monkeypatch.setenv(ENV_IMAGE_PUBLIC_BASE_URL, "https://cdn.example.com")
        adapter = MagicMock(bucket="images", region="eu-west-1")

        storage = S3BlobStorage(adapter, public_base_url="https://static.example.com")

        assert storage.public_url(key=KEY) == f"https://static.example.com/{KEY}"

    def test_presigned_get_url(self, blob_storage):
        url = blob_storage.generate_presigned_get_url(key=KEY, expires_in=120)

        assert KEY in url
        assert url.startswith("https://")

    def test_presigned_url_rewritten_for_localstack(self, monkeypatch):
        monkeypatch.setenv(ENV_APP_RUNTIME, "localstack")
        adapter = MagicMock(bucket="images", region="us-east-1")
        adapter.generate_presigned_url.return_value = f"http://localstack:4566/images/{KEY}?sig=1"

        url = S3BlobStorage(adapter).generate_presigned_get_url(key=KEY, expires_in=60)

        assert url == f"http://localhost:4566/images/{KEY}?sig=1"
        adapter.generate_presigned_url.assert_called_once_with(
            method="get_object",
            params={"Key": KEY},
            expires_in=60,
        )

    def test_presigned_url_failure(self):
        adapter = MagicMock(bucket="images", region="us-east-1")
        adapter.generate_presigned_url.side_effect = client_error("GetObject")

        with pytest.raises(BlobStoreError) as err:
            S3BlobStorage(adapter).generate_presigned_get_url(key=KEY, expires_in=60)

        assert err.value.error_code == "PRESIGNED_URL_FAILED"
