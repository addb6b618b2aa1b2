"""SQLAlchemy table definitions for image records."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from core.utils.constants import MAX_STORAGE_KEY_LENGTH


class Base(DeclarativeBase):
    pass


class ProfileImageRow(Base):
    """One image per user profile."""

    __tablename__ = "profile"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    storage_key: Mapped[str] = mapped_column(String(MAX_STORAGE_KEY_LENGTH), nullable=False, index=True)
    created_at: Mapped[str] = mapped_column(String(40), nullable=False)
    updated_at: Mapped[str | None] = mapped_column(String(40), nullable=True)


class ListingImageRow(Base):
    """One image per (listing, index) slot."""

    __tablename__ = "listing"

    listing_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    index: Mapped[int] = mapped_column("image_index", Integer, primary_key=True, autoincrement=False)
    storage_key: Mapped[str] = mapped_column(String(MAX_STORAGE_KEY_LENGTH), nullable=False, index=True)
    created_at: Mapped[str] = mapped_column(String(40), nullable=False)
    updated_at: Mapped[str | None] = mapped_column(String(40), nullable=True)
