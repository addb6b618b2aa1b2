"""Pydantic models for image update request/response."""

from pydantic import BaseModel, Field, model_validator

from core.models.image import ImageKind
from core.models.requests import ImageFileRequest


class ImageUpdateRequest(ImageFileRequest):
    """Validation model for image update (replace) request."""

    new_index: int | None = Field(
        None,
        ge=0,
        description="Move a listing image to this position",
    )

    @model_validator(mode="after")
    def validate_new_index_for_kind(self) -> "ImageUpdateRequest":
        if self.new_index is not None and self.kind is not ImageKind.LISTING:
            raise ValueError("new_index is only valid for listing images")
        return self


class ImageUpdateResponse(BaseModel):
    """Response model for successful image update."""

    message: str = Field(..., description="Success message")
    kind: ImageKind = Field(..., description="Entity kind")
    id: int = Field(..., description="User ID or listing ID")
    index: int | None = Field(None, description="Listing image position after the update")
    key: str = Field(..., description="Storage key of the new image")
    image_url: str = Field(..., description="Public URL of the new image")
