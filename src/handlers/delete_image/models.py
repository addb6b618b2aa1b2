"""Pydantic models for delete image request/response."""

from pydantic import BaseModel, Field

from core.models.image import ImageKind
from core.models.requests import ImageTargetRequest


class DeleteImageRequest(ImageTargetRequest):
    """Validation model for delete image request."""


class DeleteImageResponse(BaseModel):
    """Response model for successful image deletion."""

    message: str = Field(..., description="Success message")
    kind: ImageKind = Field(..., description="Entity kind")
    id: int = Field(..., description="User ID or listing ID")
    index: int | None = Field(None, description="Listing image position")
    key: str = Field(..., description="Storage key that was released")
    deleted_at: str = Field(..., description="Deletion timestamp")
