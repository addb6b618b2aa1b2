from collections.abc import Mapping

from core.models.errors import InvalidMediaTypeError
from core.utils.keys import normalize_mime_type

MAGIC_BYTES: Mapping[bytes, str] = {
    b"\xff\xd8\xff": "image/jpeg",
    b"\x89PNG\r\n\x1a\n": "image/png",
    b"GIF87a": "image/gif",
    b"GIF89a": "image/gif",
}


def detect_mime_type(file_data: bytes) -> str:
    for signature, mime in MAGIC_BYTES.items():
        if file_data.startswith(signature):
            return mime

    # RIFF container with a WEBP form type
    if file_data[:4] == b"RIFF" and file_data[8:12] == b"WEBP":
        return "image/webp"

    raise ValueError("Unsupported or unknown file type")


def resolve_mime_type(file_data: bytes, declared: str | None) -> str:
    """Return the declared media type, or sniff one from the file bytes.

    Raises:
        InvalidMediaTypeError: If nothing was declared and the bytes are not
            a recognised image format
    """
    if declared and declared.strip():
        return normalize_mime_type(declared)

    try:
        return detect_mime_type(file_data)
    except ValueError as exc:
        raise InvalidMediaTypeError(
            message="Unable to determine image type; provide content_type",
        ) from exc
