"""Pydantic models for image upload request/response."""

from pydantic import BaseModel, Field

from core.models.image import ImageKind
from core.models.requests import ImageFileRequest


class ImageUploadRequest(ImageFileRequest):
    """Validation model for image upload request."""


class ImageUploadResponse(BaseModel):
    """Response model for successful image upload."""

    message: str = Field(..., description="Success message")
    kind: ImageKind = Field(..., description="Entity kind")
    id: int = Field(..., description="User ID or listing ID")
    index: int | None = Field(None, description="Listing image position")
    key: str = Field(..., description="Storage key of the uploaded image")
    image_url: str = Field(..., description="Public URL of the uploaded image")
