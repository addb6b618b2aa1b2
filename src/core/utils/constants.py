"""Global constants used throughout the application.

This module centralizes all magic numbers, string literals, and configuration
values that are used across multiple modules. Using constants prevents hardcoding
values and makes it easy to change them globally.
"""

from typing import Final

# ============================================================================
# Error Codes
# ============================================================================


# Validation Errors
ERROR_CODE_VALIDATION_FAILED = "VALIDATION_FAILED"
ERROR_CODE_UNSUPPORTED_MEDIA_TYPE = "UNSUPPORTED_MEDIA_TYPE"

# Not Found / Conflict Errors
ERROR_CODE_IMAGE_NOT_FOUND = "IMAGE_NOT_FOUND"
ERROR_CODE_IMAGE_ALREADY_EXISTS = "IMAGE_ALREADY_EXISTS"

# Blob Store Errors
ERROR_CODE_BLOB_STORE = "BLOB_STORE_ERROR"
ERROR_CODE_BLOB_UPLOAD_FAILED = "BLOB_UPLOAD_FAILED"
ERROR_CODE_BLOB_DELETE_FAILED = "BLOB_DELETE_FAILED"
ERROR_CODE_PRESIGNED_URL_FAILED = "PRESIGNED_URL_FAILED"

# Record Store Errors
ERROR_CODE_RECORD_STORE = "RECORD_STORE_ERROR"
ERROR_CODE_RECORD_DUPLICATE_KEY = "RECORD_DUPLICATE_KEY"
ERROR_CODE_RECORD_CREATE_FAILED = "RECORD_CREATE_FAILED"
ERROR_CODE_RECORD_FETCH_FAILED = "RECORD_FETCH_FAILED"
ERROR_CODE_RECORD_UPDATE_FAILED = "RECORD_UPDATE_FAILED"
ERROR_CODE_RECORD_DELETE_FAILED = "RECORD_DELETE_FAILED"


# ============================================================================
# File Upload Constraints
# ============================================================================

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB in bytes

IMAGE_MIME_PREFIX = "image/"

# Canonical extensions for well-known subtypes; any other image subtype
# is used verbatim as the extension.
MIME_TYPE_EXTENSION_MAP: Final[dict[str, str]] = {
    "image/jpeg": "jpg",
    "image/pjpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
    "image/tiff": "tif",
    "image/x-icon": "ico",
    "image/vnd.microsoft.icon": "ico",
}

MIME_SUBTYPE_PATTERN = r"[a-z0-9][a-z0-9.+-]*"


# ============================================================================
# Storage Key Layout
# ============================================================================

STORAGE_KEY_PREFIX = "assets/img"
CONTENT_HASH_PATTERN = r"[0-9a-f]{64}"
MAX_STORAGE_KEY_LENGTH = 255

# ============================================================================
# Retrieval
# ============================================================================

DEFAULT_PRESIGNED_URL_EXPIRY = 60
MAX_PRESIGNED_URL_EXPIRY = 7 * 24 * 60 * 60

# ============================================================================
# API Gateway Configuration
# ============================================================================

CORS_ORIGIN = "*"
CORS_METHODS = "GET,POST,PUT,DELETE,OPTIONS"
CORS_HEADERS = "Content-Type,Authorization,X-Api-Key"
EXPOSE_HEADERS = "Content-Type,Content-Length"
DEFAULT_CONTENT_TYPE = "application/json"

# ============================================================================
# Environment Variable Names
# ============================================================================

ENV_AWS_ENDPOINT_URL = "AWS_ENDPOINT_URL"
ENV_AWS_REGION = "AWS_REGION"
ENV_IMAGE_S3_BUCKET_NAME = "IMAGE_S3_BUCKET_NAME"
ENV_IMAGE_S3_OBJECT_ACL = "IMAGE_S3_OBJECT_ACL"
ENV_IMAGE_PUBLIC_BASE_URL = "IMAGE_PUBLIC_BASE_URL"
ENV_IMAGE_DATABASE_URL = "IMAGE_DATABASE_URL"
ENV_IMAGE_DATABASE_ECHO = "IMAGE_DATABASE_ECHO"
ENV_APP_RUNTIME = "APP_RUNTIME"
DEFAULT_AWS_REGION = "us-west-2"
LOCALSTACK_URL = "http://localstack"
LOCALHOST_URL = "http://localhost"

# ============================================================================
# Helper Functions
# ============================================================================


def get_max_file_size_mb() -> int:
    """Get maximum file size in megabytes."""
    return MAX_FILE_SIZE // (1024 * 1024)


# ============================================================================
# Observability
# ============================================================================

METRICS_NAMESPACE = "EntityImageService"
