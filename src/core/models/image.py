"""Shared image record models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from core.models.errors import ValidationError


class ImageKind(str, Enum):
    """Entity categories that own images."""

    PROFILE = "profile"
    LISTING = "listing"


class ProfileIdentity(BaseModel):
    """Identity of a profile image: one image per user."""

    model_config = ConfigDict(frozen=True)

    user_id: int = Field(..., gt=0, description="Owning user identifier")

    def as_dict(self) -> dict[str, Any]:
        return {"id": self.user_id}


class ListingIdentity(BaseModel):
    """Identity of a listing image: one image per (listing, index) slot."""

    model_config = ConfigDict(frozen=True)

    listing_id: int = Field(..., gt=0, description="Owning listing identifier")
    index: int = Field(..., ge=0, description="Position of the image in the listing")

    def as_dict(self) -> dict[str, Any]:
        return {"id": self.listing_id, "index": self.index}


ImageIdentity = ProfileIdentity | ListingIdentity

IDENTITY_TYPES: dict[ImageKind, type[BaseModel]] = {
    ImageKind.PROFILE: ProfileIdentity,
    ImageKind.LISTING: ListingIdentity,
}


def ensure_identity(kind: ImageKind, identity: Any) -> None:
    """Reject an identity that does not belong to ``kind``.

    Raises:
        ValidationError: If the identity type does not match the kind
    """
    expected = IDENTITY_TYPES[ImageKind(kind)]
    if not isinstance(identity, expected):
        raise ValidationError(
            message=f"Invalid identity for {ImageKind(kind).value} images",
            details={"expected": expected.__name__, "received": type(identity).__name__},
        )


def build_identity(kind: ImageKind, entity_id: int, index: int | None = None) -> ImageIdentity:
    """Build the identity for ``kind`` from raw request values."""
    if kind is ImageKind.PROFILE:
        return ProfileIdentity(user_id=entity_id)
    return ListingIdentity(listing_id=entity_id, index=index)  # type: ignore[arg-type]


class ImageRecord(BaseModel):
    """Relational row mapping an entity identity to its storage key."""

    kind: ImageKind = Field(..., description="Entity kind owning the image")
    identity: ImageIdentity = Field(..., description="Identity within the kind")
    storage_key: StrictStr = Field(..., description="Object store key of the current blob")

    created_at: StrictStr = Field(..., description="ISO-8601 creation timestamp (UTC)")
    updated_at: StrictStr | None = Field(None, description="ISO-8601 last replace timestamp (UTC)")
