"""Content-addressed storage key derivation.

Keys have the layout ``assets/img/{kind}/{h0}/{h01}/{hash}.{ext}`` where
``hash`` is the SHA-256 digest of the image bytes. Identical bytes with the
same media type always map to the same key.
"""

import hashlib
import re

from core.models.errors import InvalidMediaTypeError, ValidationError
from core.models.image import ImageKind
from core.utils.constants import (
    CONTENT_HASH_PATTERN,
    IMAGE_MIME_PREFIX,
    MIME_SUBTYPE_PATTERN,
    MIME_TYPE_EXTENSION_MAP,
    STORAGE_KEY_PREFIX,
)

_CONTENT_HASH_RE = re.compile(CONTENT_HASH_PATTERN)
_MIME_SUBTYPE_RE = re.compile(MIME_SUBTYPE_PATTERN)


def compute_content_hash(file_data: bytes) -> str:
    """Return the lowercase hex SHA-256 digest of ``file_data``."""
    return hashlib.sha256(file_data).hexdigest()


def normalize_mime_type(mime_type: str) -> str:
    """Lowercase a media type and drop any parameters (``; charset=...``)."""
    return mime_type.split(";", 1)[0].strip().lower()


def extension_for(mime_type: str) -> str:
    """Return the file extension for an ``image/*`` media type.

    Raises:
        InvalidMediaTypeError: If the media type is not ``image/<subtype>``
    """
    normalized = normalize_mime_type(mime_type or "")

    if not normalized.startswith(IMAGE_MIME_PREFIX):
        raise InvalidMediaTypeError(
            message="Only image uploads are supported",
            details={"mime_type": mime_type},
        )

    subtype = normalized[len(IMAGE_MIME_PREFIX):]
    if not subtype or not _MIME_SUBTYPE_RE.fullmatch(subtype):
        raise InvalidMediaTypeError(
            message="Image media type is missing a valid subtype",
            details={"mime_type": mime_type},
        )

    return MIME_TYPE_EXTENSION_MAP.get(normalized, subtype)


def derive_storage_key(kind: ImageKind, content_hash: str, mime_type: str) -> str:
    """Derive the deterministic storage key for an image.

    Args:
        kind: Entity kind owning the image
        content_hash: 64-character lowercase hex SHA-256 digest of the bytes
        mime_type: Media type of the form ``image/<subtype>``

    Returns:
        Storage key, e.g. ``assets/img/profile/a/ab/ab...ff.png``

    Raises:
        InvalidMediaTypeError: If the media type is not an image type
        ValidationError: If the content hash is malformed
    """
    extension = extension_for(mime_type)

    if not isinstance(content_hash, str) or not _CONTENT_HASH_RE.fullmatch(content_hash):
        raise ValidationError(
            message="Content hash must be a 64-character hex SHA-256 digest",
            details={"content_hash": content_hash},
        )

    kind_value = ImageKind(kind).value
    return (
        f"{STORAGE_KEY_PREFIX}/{kind_value}/"
        f"{content_hash[:1]}/{content_hash[:2]}/{content_hash}.{extension}"
    )
