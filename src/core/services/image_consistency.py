"""Create/replace/delete/locate protocol for entity images.

This module keeps the relational image record and the stored blob moving
together. The two stores are not transactional, so each operation orders
its steps to prefer an orphaned blob over a record that points at nothing,
and short-circuits on the first failed required step.
"""

from functools import lru_cache

from aws_lambda_powertools import Logger

from core.infrastructure.aws.s3_blob_storage import S3BlobStorage
from core.infrastructure.sql.sql_image_records import SQLImageRecords
from core.models.errors import (
    AlreadyExistsError,
    BlobStoreError,
    DuplicateKeyError,
    NotFoundError,
    RecordStoreError,
    ValidationError,
)
from core.models.image import ImageIdentity, ImageKind, ImageRecord, ensure_identity
from core.repositories.record_repository import ImageRecordRepository
from core.repositories.storage_repository import BlobStorageRepository
from core.utils.keys import compute_content_hash, derive_storage_key

logger = Logger(UTC=True)


class ImageConsistencyService:
    """Application service responsible for entity images.

    This service orchestrates:
    - Content-addressed key derivation
    - At-most-one record per identity
    - Ordering of record and blob mutations
    - Best-effort cleanup of replaced or deleted blobs
    """

    def __init__(
        self,
        records: ImageRecordRepository,
        storage: BlobStorageRepository,
    ) -> None:
        self.records = records
        self.storage = storage

    @staticmethod
    def _derive_key(kind: ImageKind, file_data: bytes, mime_type: str) -> str:
        content_hash = compute_content_hash(file_data)
        key = derive_storage_key(kind, content_hash, mime_type)
        logger.debug(
            "Derived storage key",
            extra={"kind": kind.value, "content_hash": content_hash, "key": key},
        )
        return key

    def _get_record_or_raise(self, kind: ImageKind, identity: ImageIdentity) -> ImageRecord:
        record = self.records.find_record(kind, identity)

        if record is None:
            logger.warning(
                "Image record not found",
                extra={"kind": kind.value, **identity.as_dict()},
            )
            raise NotFoundError(
                message=f"{kind.value.capitalize()} image not found",
                details={"kind": kind.value, **identity.as_dict()},
            )

        return record

    def _discard_blob(self, kind: ImageKind, key: str) -> None:
        """Remove a blob no record points at any more; failures are logged only."""
        try:
            if self.records.is_key_referenced(kind, key):
                logger.info("Blob still referenced, keeping it", extra={"key": key})
                return
            self.storage.remove_blob(key=key)
        except (RecordStoreError, BlobStoreError) as exc:
            logger.warning(
                "Blob cleanup failed, leaving orphaned blob",
                extra={"key": key, "error_code": exc.error_code},
            )

    def create_image(
        self,
        kind: ImageKind,
        identity: ImageIdentity,
        file_data: bytes,
        mime_type: str,
    ) -> str:
        """Create the image for an identity and return its storage key.

        The create flow is:
        1. Derive the content-addressed key
        2. Reject the identity if it already has a record
        3. Insert the record
        4. Upload the blob (the record is kept if this fails)

        Raises:
            InvalidMediaTypeError: If the media type is not an image type
            AlreadyExistsError: If the identity already has an image
            RecordStoreError: If the record cannot be read or written
            BlobStoreError: If the upload fails
        """
        kind = ImageKind(kind)
        ensure_identity(kind, identity)
        logger.debug("Starting image create", extra={"kind": kind.value, **identity.as_dict()})

        key = self._derive_key(kind, file_data, mime_type)

        if self.records.find_record(kind, identity) is not None:
            logger.info("Image already exists", extra={"kind": kind.value, **identity.as_dict()})
            raise AlreadyExistsError(
                message=f"{kind.value.capitalize()} image already exists",
                details={"kind": kind.value, **identity.as_dict()},
            )

        try:
            self.records.create_record(kind, identity, key)
        except DuplicateKeyError as exc:
            # Lost a race with a concurrent create for the same identity
            logger.info("Concurrent image create detected", extra={"kind": kind.value, **identity.as_dict()})
            raise AlreadyExistsError(
                message=f"{kind.value.capitalize()} image already exists",
                details={"kind": kind.value, **identity.as_dict()},
            ) from exc

        try:
            self.storage.put_blob(key=key, file_data=file_data, content_type=mime_type)
        except BlobStoreError:
            logger.exception(
                "Blob upload failed after record insert; record needs reconciliation",
                extra={"kind": kind.value, "key": key, **identity.as_dict()},
            )
            raise

        logger.info("Image created", extra={"kind": kind.value, "key": key, **identity.as_dict()})
        return key

    def replace_image(
        self,
        kind: ImageKind,
        identity: ImageIdentity,
        file_data: bytes,
        mime_type: str,
        *,
        new_index: int | None = None,
    ) -> str:
        """Replace the image of an identity and return the new storage key.

        The replace flow is:
        1. Derive the new key
        2. Load the current record and remember the old key
        3. Point the record at the new key (moving a listing slot if asked)
        4. Upload the new blob
        5. Best-effort removal of the old blob

        Raises:
            InvalidMediaTypeError: If the media type is not an image type
            ValidationError: If ``new_index`` is given for a profile
            NotFoundError: If the identity has no image
            AlreadyExistsError: If the target listing slot is taken
            RecordStoreError: If the record cannot be read or written
            BlobStoreError: If the upload fails
        """
        kind = ImageKind(kind)
        ensure_identity(kind, identity)

        if new_index is not None and kind is not ImageKind.LISTING:
            raise ValidationError(
                message="Only listing images can be moved to a new index",
                details={"kind": kind.value},
            )

        logger.debug("Starting image replace", extra={"kind": kind.value, **identity.as_dict()})

        key = self._derive_key(kind, file_data, mime_type)
        old_key = self._get_record_or_raise(kind, identity).storage_key

        try:
            self.records.update_record(kind, identity, storage_key=key, new_index=new_index)
        except DuplicateKeyError as exc:
            raise AlreadyExistsError(
                message=f"{kind.value.capitalize()} image already exists at index {new_index}",
                details={"kind": kind.value, "new_index": new_index, **identity.as_dict()},
            ) from exc

        try:
            self.storage.put_blob(key=key, file_data=file_data, content_type=mime_type)
        except BlobStoreError:
            logger.exception(
                "Blob upload failed after record update; record needs reconciliation",
                extra={"kind": kind.value, "key": key, "old_key": old_key},
            )
            raise

        if old_key != key:
            self._discard_blob(kind, old_key)

        logger.info(
            "Image replaced",
            extra={"kind": kind.value, "key": key, "old_key": old_key, **identity.as_dict()},
        )
        return key

    def delete_image(self, kind: ImageKind, identity: ImageIdentity) -> ImageRecord:
        """Delete the image of an identity and return the removed record.

        The record goes first; the blob removal afterwards is best-effort.

        Raises:
            NotFoundError: If the identity has no image
            RecordStoreError: If the record cannot be read or deleted
        """
        kind = ImageKind(kind)
        ensure_identity(kind, identity)
        logger.debug("Starting image delete", extra={"kind": kind.value, **identity.as_dict()})

        record = self._get_record_or_raise(kind, identity)

        self.records.remove_record(kind, identity)
        self._discard_blob(kind, record.storage_key)

        logger.info(
            "Image deleted",
            extra={"kind": kind.value, "key": record.storage_key, **identity.as_dict()},
        )
        return record

    def locate_image(self, kind: ImageKind, identity: ImageIdentity) -> str:
        """Return the storage key of an identity's image.

        Raises:
            NotFoundError: If the identity has no image
            RecordStoreError: If the lookup fails
        """
        kind = ImageKind(kind)
        ensure_identity(kind, identity)
        return self._get_record_or_raise(kind, identity).storage_key

    def public_url(self, storage_key: str) -> str:
        """Return the externally reachable URL for a storage key."""
        return self.storage.public_url(key=storage_key)

    def signed_url(self, storage_key: str, *, expires_in: int) -> str:
        """Return a time-limited URL for a storage key.

        Raises:
            BlobStoreError: If the URL cannot be generated
        """
        return self.storage.generate_presigned_get_url(key=storage_key, expires_in=expires_in)


@lru_cache(maxsize=1)
def default_image_service() -> ImageConsistencyService:
    """Build the process-wide service from environment configuration.

    The database engine and S3 client are created on first use and shared
    by every later invocation in the same process.
    """
    return ImageConsistencyService(
        records=SQLImageRecords(),
        storage=S3BlobStorage(),
    )
