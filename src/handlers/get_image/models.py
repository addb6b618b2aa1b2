from pydantic import BaseModel, Field, StrictBool

from core.models.image import ImageKind
from core.models.requests import ImageTargetRequest
from core.utils.constants import DEFAULT_PRESIGNED_URL_EXPIRY, MAX_PRESIGNED_URL_EXPIRY


class GetImageRequest(ImageTargetRequest):
    """Validation model for get image request."""

    signed: StrictBool = Field(
        default=False,
        description="Return a time-limited signed URL instead of the public one",
    )

    expires_in: int = Field(
        default=DEFAULT_PRESIGNED_URL_EXPIRY,
        ge=1,
        le=MAX_PRESIGNED_URL_EXPIRY,
        description="Lifetime of a signed URL in seconds",
    )


class GetImageResponse(BaseModel):
    """Location of an entity image."""

    kind: ImageKind
    id: int
    index: int | None = None
    key: str
    image_url: str
    expires_in: int | None = None
