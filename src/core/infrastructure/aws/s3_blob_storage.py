"""S3-backed implementation of BlobStorageRepository."""

import os
from typing import Any

from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError, ClientError

from core.infrastructure.adapters.s3_adapter import S3Adapter, S3AdapterProtocol
from core.models.errors import BlobStoreError
from core.repositories.storage_repository import BlobStorageRepository
from core.utils.constants import (
    ENV_APP_RUNTIME,
    ENV_IMAGE_PUBLIC_BASE_URL,
    ERROR_CODE_BLOB_DELETE_FAILED,
    ERROR_CODE_BLOB_UPLOAD_FAILED,
    ERROR_CODE_PRESIGNED_URL_FAILED,
    LOCALHOST_URL,
    LOCALSTACK_URL,
)

logger = Logger(UTC=True)


class S3BlobStorage(BlobStorageRepository):
    """Blob storage implementation backed by Amazon S3.

    All boto3 errors are caught and translated into BlobStoreError
    with stable, caller-safe messages.
    """

    def __init__(
        self,
        adapter: S3AdapterProtocol | None = None,
        *,
        public_base_url: str | None = None,
    ) -> None:
        """Create storage using the provided S3 adapter."""
        self._s3: S3AdapterProtocol = adapter or S3Adapter()
        self._public_base_url = (
            public_base_url
            or os.getenv(ENV_IMAGE_PUBLIC_BASE_URL)
            or f"https://{self._s3.bucket}.s3.{self._s3.region}.amazonaws.com/"
        )
        self._is_localstack = os.getenv(ENV_APP_RUNTIME) == "localstack"

    def put_blob(self, *, key: str, file_data: bytes, content_type: str) -> None:
        """Upload image bytes to S3 under ``key``."""
        logger.debug(
            "Uploading blob",
            extra={"key": key, "size": len(file_data), "content_type": content_type},
        )

        try:
            self._s3.put_object(
                key=key,
                body=file_data,
                content_type=content_type,
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("S3 upload failed", extra={"key": key, "error": str(exc)})
            raise BlobStoreError(
                message="Unable to store image at this time",
                error_code=ERROR_CODE_BLOB_UPLOAD_FAILED,
                details={"key": key},
            ) from exc
        except Exception as exc:
            logger.exception("Unexpected error uploading blob")
            raise BlobStoreError(
                message="Unable to store image at this time",
                error_code=ERROR_CODE_BLOB_UPLOAD_FAILED,
                details={"key": key},
            ) from exc

        logger.info("Blob uploaded", extra={"key": key})

    def remove_blob(self, *, key: str) -> None:
        """Delete the S3 object stored under ``key``."""
        logger.debug("Deleting blob", extra={"key": key})

        try:
            self._s3.delete_object(key=key)
        except (ClientError, BotoCoreError) as exc:
            logger.error("S3 deletion failed", extra={"key": key, "error": str(exc)})
            raise BlobStoreError(
                message="Unable to delete image at this time",
                error_code=ERROR_CODE_BLOB_DELETE_FAILED,
                details={"key": key},
            ) from exc
        except Exception as exc:
            logger.exception("Unexpected error deleting blob")
            raise BlobStoreError(
                message="Unable to delete image at this time",
                error_code=ERROR_CODE_BLOB_DELETE_FAILED,
                details={"key": key},
            ) from exc

        logger.info("Blob deleted", extra={"key": key})

    def public_url(self, *, key: str) -> str:
        """Join the configured public base URL and the storage key."""
        return f"{self._public_base_url.rstrip('/')}/{key}"

    def generate_presigned_get_url(self, *, key: str, expires_in: int) -> str:
        """Generate a pre-signed S3 URL for reading the blob."""
        logger.debug(
            "Generating pre-signed S3 URL",
            extra={"key": key, "expires_in": expires_in},
        )

        try:
            params: dict[str, Any] = {"Key": key}
            url = self._s3.generate_presigned_url(
                method="get_object",
                params=params,
                expires_in=expires_in,
            )
        except Exception as exc:
            logger.exception("Failed to generate pre-signed URL", extra={"key": key})
            raise BlobStoreError(
                message="Unable to generate image access URL",
                error_code=ERROR_CODE_PRESIGNED_URL_FAILED,
                details={"key": key},
            ) from exc

        if self._is_localstack:
            # Internal LocalStack hostname is not reachable from the host machine
            url = url.replace(LOCALSTACK_URL, LOCALHOST_URL, 1)

        return url
