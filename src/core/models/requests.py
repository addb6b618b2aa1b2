"""Pydantic request models shared by the image handlers."""

import base64
import binascii
from typing import Any

from aws_lambda_powertools import Logger
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.models.image import ImageIdentity, ImageKind, build_identity
from core.utils.constants import MAX_FILE_SIZE, get_max_file_size_mb

logger = Logger(UTC=True)


class ImageTargetRequest(BaseModel):
    """Identifies the entity image an operation acts on.

    Profiles are addressed by ``id`` alone; listings need ``id`` and ``index``.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    kind: ImageKind = Field(..., description="Entity kind: profile or listing")
    id: int = Field(..., gt=0, description="User ID for profiles, listing ID for listings")
    index: int | None = Field(None, ge=0, description="Listing image position")

    @model_validator(mode="after")
    def validate_index_for_kind(self) -> "ImageTargetRequest":
        if self.kind is ImageKind.LISTING and self.index is None:
            raise ValueError("index is required for listing images")

        if self.kind is ImageKind.PROFILE and self.index is not None:
            raise ValueError("index is only valid for listing images")

        return self

    def identity(self) -> ImageIdentity:
        return build_identity(self.kind, self.id, self.index)

    def identity_fields(self) -> dict[str, Any]:
        return self.identity().as_dict()


class ImageFileRequest(ImageTargetRequest):
    """Target plus a base64-encoded image attachment."""

    file: str = Field(..., description="Base64 encoded image file")
    content_type: str | None = Field(
        None,
        max_length=100,
        description="Media type of the file; sniffed from the bytes when omitted",
    )

    @field_validator("file")
    @classmethod
    def validate_file(cls, value: str) -> str:
        """
        Validate base64 file:
        - must not be empty
        - must decode correctly
        - must not exceed MAX_FILE_SIZE
        """
        if not value:
            raise ValueError("file must not be empty")

        try:
            file_data = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            logger.error(f"File validation error: Invalid base64 - {e}")
            raise ValueError("Invalid base64 encoded file") from e

        if not file_data:
            raise ValueError("Decoded file is empty")

        if len(file_data) > MAX_FILE_SIZE:
            logger.error("File size validation error: File size exceeds limit")
            raise ValueError(f"File size exceeds {get_max_file_size_mb()}MB limit")

        return value

    def file_data(self) -> bytes:
        return base64.b64decode(self.file)
