"""Abstract contract for image blob storage."""

from abc import ABC, abstractmethod


class BlobStorageRepository(ABC):
    """Contract for storing and removing image blobs by key.

    Implementations could be S3, GCS, local disk, etc.
    The consistency service depends on this interface, not the implementation.
    """

    @abstractmethod
    def put_blob(self, *, key: str, file_data: bytes, content_type: str) -> None:
        """Store image bytes under ``key``, overwriting any existing blob.

        Raises:
            BlobStoreError: If the upload fails
        """

    @abstractmethod
    def remove_blob(self, *, key: str) -> None:
        """Delete the blob stored under ``key``.

        Raises:
            BlobStoreError: If deletion fails
        """

    @abstractmethod
    def public_url(self, *, key: str) -> str:
        """Return the externally reachable URL of the blob under ``key``."""

    @abstractmethod
    def generate_presigned_get_url(self, *, key: str, expires_in: int) -> str:
        """Return a time-limited URL for reading the blob under ``key``.

        Raises:
            BlobStoreError: If the URL cannot be generated
        """
