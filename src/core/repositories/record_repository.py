"""Abstract contract for image record persistence."""

from abc import ABC, abstractmethod

from core.models.image import ImageIdentity, ImageKind, ImageRecord


class ImageRecordRepository(ABC):
    """Contract for the identity -> storage key mapping.

    Implementations could be PostgreSQL, MySQL, SQLite, etc.
    At most one record exists per identity within a kind; the store's
    uniqueness constraint is the final arbiter of that rule.
    """

    @abstractmethod
    def find_record(self, kind: ImageKind, identity: ImageIdentity) -> ImageRecord | None:
        """Fetch the record for an identity.

        Returns:
            The record, or None if the identity has no image

        Raises:
            RecordStoreError: If the lookup fails
        """

    @abstractmethod
    def create_record(
        self,
        kind: ImageKind,
        identity: ImageIdentity,
        storage_key: str,
    ) -> ImageRecord:
        """Insert a new record.

        Raises:
            DuplicateKeyError: If a record already exists for the identity
            RecordStoreError: If the insert fails for other reasons
        """

    @abstractmethod
    def update_record(
        self,
        kind: ImageKind,
        identity: ImageIdentity,
        *,
        storage_key: str,
        new_index: int | None = None,
    ) -> ImageRecord:
        """Point an existing record at a new storage key.

        Args:
            kind: Entity kind
            identity: Current identity of the record
            storage_key: New storage key
            new_index: For listings, move the record to this index

        Returns:
            The updated record (with its new identity when moved)

        Raises:
            NotFoundError: If no record exists for the identity
            DuplicateKeyError: If the move collides with another record
            RecordStoreError: If the update fails for other reasons
        """

    @abstractmethod
    def remove_record(self, kind: ImageKind, identity: ImageIdentity) -> None:
        """Delete the record for an identity.

        Raises:
            NotFoundError: If no record was deleted
            RecordStoreError: If deletion fails
        """

    @abstractmethod
    def is_key_referenced(self, kind: ImageKind, storage_key: str) -> bool:
        """Return True if any record of ``kind`` points at ``storage_key``.

        Raises:
            RecordStoreError: If the check fails
        """
