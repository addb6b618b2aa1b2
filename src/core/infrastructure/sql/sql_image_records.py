"""SQLAlchemy-backed implementation of ImageRecordRepository."""

from typing import Any

from aws_lambda_powertools import Logger
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.infrastructure.adapters.sql_adapter import SQLAdapter
from core.infrastructure.sql.tables import ListingImageRow, ProfileImageRow
from core.models.errors import (
    DuplicateKeyError,
    NotFoundError,
    RecordStoreError,
    ValidationError,
)
from core.models.image import (
    ImageIdentity,
    ImageKind,
    ImageRecord,
    ListingIdentity,
    ProfileIdentity,
    ensure_identity,
)
from core.repositories.record_repository import ImageRecordRepository
from core.utils.constants import (
    ERROR_CODE_RECORD_CREATE_FAILED,
    ERROR_CODE_RECORD_DELETE_FAILED,
    ERROR_CODE_RECORD_FETCH_FAILED,
    ERROR_CODE_RECORD_UPDATE_FAILED,
)
from core.utils.time import utc_now_iso

Row = ProfileImageRow | ListingImageRow

logger = Logger(UTC=True)


class SQLImageRecords(ImageRecordRepository):
    """Relational image record storage with error handling.

    All SQLAlchemy errors are caught and translated into
    domain-specific errors with stable semantics.
    """

    def __init__(self, adapter: SQLAdapter | None = None) -> None:
        """Initialize with a SQL adapter."""
        self._db = adapter or SQLAdapter()

    @staticmethod
    def _row_type(kind: ImageKind) -> type[Row]:
        return ProfileImageRow if ImageKind(kind) is ImageKind.PROFILE else ListingImageRow

    @staticmethod
    def _where(kind: ImageKind, identity: ImageIdentity) -> tuple[Any, ...]:
        if isinstance(identity, ProfileIdentity):
            return (ProfileImageRow.user_id == identity.user_id,)
        return (
            ListingImageRow.listing_id == identity.listing_id,
            ListingImageRow.index == identity.index,
        )

    @staticmethod
    def _to_record(kind: ImageKind, row: Row) -> ImageRecord:
        identity: ImageIdentity
        if isinstance(row, ProfileImageRow):
            identity = ProfileIdentity(user_id=row.user_id)
        else:
            identity = ListingIdentity(listing_id=row.listing_id, index=row.index)

        return ImageRecord(
            kind=kind,
            identity=identity,
            storage_key=row.storage_key,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _new_row(kind: ImageKind, identity: ImageIdentity, storage_key: str, now: str) -> Row:
        if isinstance(identity, ProfileIdentity):
            return ProfileImageRow(user_id=identity.user_id, storage_key=storage_key, created_at=now)
        return ListingImageRow(
            listing_id=identity.listing_id,
            index=identity.index,
            storage_key=storage_key,
            created_at=now,
        )

    def find_record(self, kind: ImageKind, identity: ImageIdentity) -> ImageRecord | None:
        """Fetch the record for an identity.

        Raises:
            RecordStoreError: If the lookup fails
        """
        kind = ImageKind(kind)
        ensure_identity(kind, identity)
        identity_fields = identity.as_dict()
        logger.debug("Fetching image record", extra={"kind": kind.value, **identity_fields})

        try:
            with self._db.session() as session:
                row = session.execute(
                    select(self._row_type(kind)).where(*self._where(kind, identity))
                ).scalar_one_or_none()
                record = self._to_record(kind, row) if row is not None else None

        except SQLAlchemyError as exc:
            logger.error("Image record lookup failed", extra={"kind": kind.value, **identity_fields})
            raise RecordStoreError(
                message="Unable to retrieve image record",
                error_code=ERROR_CODE_RECORD_FETCH_FAILED,
                details={"kind": kind.value, **identity_fields},
            ) from exc

        return record

    def create_record(
        self,
        kind: ImageKind,
        identity: ImageIdentity,
        storage_key: str,
    ) -> ImageRecord:
        """Insert a new record.

        Raises:
            DuplicateKeyError: If the primary key already exists
            RecordStoreError: If the insert fails
        """
        kind = ImageKind(kind)
        ensure_identity(kind, identity)
        identity_fields = identity.as_dict()
        now = utc_now_iso()

        logger.debug(
            "Creating image record",
            extra={"kind": kind.value, "key": storage_key, **identity_fields},
        )

        try:
            with self._db.session() as session:
                session.add(self._new_row(kind, identity, storage_key, now))
                session.flush()

        except IntegrityError as exc:
            logger.warning(
                "Image record already exists",
                extra={"kind": kind.value, **identity_fields},
            )
            raise DuplicateKeyError(
                message="An image record already exists for this identity",
                details={"kind": kind.value, **identity_fields},
            ) from exc

        except SQLAlchemyError as exc:
            logger.error("Image record insert failed", extra={"kind": kind.value, **identity_fields})
            raise RecordStoreError(
                message="Unable to save image record at this time",
                error_code=ERROR_CODE_RECORD_CREATE_FAILED,
                details={"kind": kind.value, **identity_fields},
            ) from exc

        logger.info("Image record created", extra={"kind": kind.value, **identity_fields})

        return ImageRecord(kind=kind, identity=identity, storage_key=storage_key, created_at=now)

    def update_record(
        self,
        kind: ImageKind,
        identity: ImageIdentity,
        *,
        storage_key: str,
        new_index: int | None = None,
    ) -> ImageRecord:
        """Point an existing record at a new storage key, optionally moving a listing slot.

        Raises:
            ValidationError: If ``new_index`` is given for a profile
            NotFoundError: If no record exists for the identity
            DuplicateKeyError: If the target listing slot is taken
            RecordStoreError: If the update fails
        """
        kind = ImageKind(kind)
        ensure_identity(kind, identity)
        identity_fields = identity.as_dict()
        row_type = self._row_type(kind)

        values: dict[Any, Any] = {
            row_type.storage_key: storage_key,
            row_type.updated_at: utc_now_iso(),
        }
        target: ImageIdentity = identity

        if new_index is not None:
            if not isinstance(identity, ListingIdentity):
                raise ValidationError(
                    message="Only listing images can be moved to a new index",
                    details={"kind": kind.value},
                )
            values[ListingImageRow.index] = new_index
            target = ListingIdentity(listing_id=identity.listing_id, index=new_index)

        logger.debug(
            "Updating image record",
            extra={"kind": kind.value, "key": storage_key, "new_index": new_index, **identity_fields},
        )

        record: ImageRecord | None = None

        try:
            with self._db.session() as session:
                result = session.execute(
                    update(row_type).where(*self._where(kind, identity)).values(values)
                )

                if result.rowcount:
                    row = session.execute(
                        select(row_type).where(*self._where(kind, target))
                    ).scalar_one()
                    record = self._to_record(kind, row)

        except IntegrityError as exc:
            logger.warning(
                "Image record move collides with an existing record",
                extra={"kind": kind.value, "new_index": new_index, **identity_fields},
            )
            raise DuplicateKeyError(
                message="An image record already exists for the target identity",
                details={"kind": kind.value, "new_index": new_index, **identity_fields},
            ) from exc

        except SQLAlchemyError as exc:
            logger.error("Image record update failed", extra={"kind": kind.value, **identity_fields})
            raise RecordStoreError(
                message="Unable to update image record at this time",
                error_code=ERROR_CODE_RECORD_UPDATE_FAILED,
                details={"kind": kind.value, **identity_fields},
            ) from exc

        if record is None:
            raise NotFoundError(
                message="Image record not found",
                details={"kind": kind.value, **identity_fields},
            )

        logger.info("Image record updated", extra={"kind": kind.value, **identity_fields})
        return record

    def remove_record(self, kind: ImageKind, identity: ImageIdentity) -> None:
        """Delete the record for an identity.

        Raises:
            NotFoundError: If no record was deleted
            RecordStoreError: If deletion fails
        """
        kind = ImageKind(kind)
        ensure_identity(kind, identity)
        identity_fields = identity.as_dict()
        logger.debug("Removing image record", extra={"kind": kind.value, **identity_fields})

        try:
            with self._db.session() as session:
                result = session.execute(
                    delete(self._row_type(kind)).where(*self._where(kind, identity))
                )
                deleted = result.rowcount

        except SQLAlchemyError as exc:
            logger.error("Image record delete failed", extra={"kind": kind.value, **identity_fields})
            raise RecordStoreError(
                message="Unable to delete image record at this time",
                error_code=ERROR_CODE_RECORD_DELETE_FAILED,
                details={"kind": kind.value, **identity_fields},
            ) from exc

        if not deleted:
            raise NotFoundError(
                message="Image record not found",
                details={"kind": kind.value, **identity_fields},
            )

        logger.info("Image record removed", extra={"kind": kind.value, **identity_fields})

    def is_key_referenced(self, kind: ImageKind, storage_key: str) -> bool:
        """Return True if any record of ``kind`` still points at ``storage_key``.

        Raises:
            RecordStoreError: If the check fails
        """
        row_type = self._row_type(kind)

        try:
            with self._db.session() as session:
                match = session.execute(
                    select(row_type.storage_key).where(row_type.storage_key == storage_key).limit(1)
                ).first()

        except SQLAlchemyError as exc:
            logger.error("Storage key reference check failed", extra={"key": storage_key})
            raise RecordStoreError(
                message="Unable to verify image references",
                error_code=ERROR_CODE_RECORD_FETCH_FAILED,
                details={"key": storage_key},
            ) from exc

        return match is not None
