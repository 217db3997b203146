"""SQLAlchemy models for garments, models and styled looks."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, ForeignKey, String, Text, TIMESTAMP, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from chicpic.database.db_session import Base

# JSONB on PostgreSQL, plain JSON elsewhere (sqlite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
        nullable=False,
    )


class StoredImageMixin:
    """Public URLs and storage path of the asset image."""

    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    storage_path: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


# 1. garments
class Garment(Base, TimestampMixin, StoredImageMixin):
    """Garment of the catalog."""

    __tablename__ = "garments"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    color: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    available_sizes: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)


# 2. models
class FashionModel(Base, TimestampMixin, StoredImageMixin):
    """Child fashion model used to build looks."""

    __tablename__ = "models"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    characteristics: Mapped[str] = mapped_column(Text, nullable=False, default="")
    gender: Mapped[str] = mapped_column(String(20), nullable=False)
    age: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    height: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    body_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    hair_color: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    eye_color: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    skin_tone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    upper_body_size: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    lower_body_size: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    shoe_size: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    looks: Mapped[list["StyledLook"]] = relationship(
        "StyledLook",
        back_populates="model",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


# 3. styled_looks
class StyledLook(Base, TimestampMixin, StoredImageMixin):
    """Model wearing a set of garments."""

    __tablename__ = "styled_looks"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    model_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("models.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    garment_ids: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    garment_fits: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)

    model: Mapped["FashionModel"] = relationship("FashionModel", back_populates="looks")
