from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

PROFILE_STATUSES = ("pending", "approved", "rejected", "suspended")
CONTACT_FIELDS = (
    "contact_email",
    "contact_phone",
    "contact_whatsapp",
    "contact_instagram",
    "contact_tiktok",
    "contact_facebook",
    "contact_telegram",
)


def utcnow() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class Profile(Base):
    """A listed person whose contact details can be purchased."""

    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("2.00")
    )
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="pending", index=True
    )  # one of PROFILE_STATUSES
    slug: Mapped[str | None] = mapped_column(String(255), unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    height: Mapped[str | None] = mapped_column(String(64))
    education: Mapped[str | None] = mapped_column(String(255))
    profession: Mapped[str | None] = mapped_column(String(255))
    languages: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    interests: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    contact_email: Mapped[str | None] = mapped_column(String(320))
    contact_phone: Mapped[str | None] = mapped_column(String(64))
    contact_whatsapp: Mapped[str | None] = mapped_column(String(64))
    contact_instagram: Mapped[str | None] = mapped_column(String(255))
    contact_tiktok: Mapped[str | None] = mapped_column(String(255))
    contact_facebook: Mapped[str | None] = mapped_column(String(255))
    contact_telegram: Mapped[str | None] = mapped_column(String(255))

    admin_notes: Mapped[str | None] = mapped_column(Text)
    created_by: Mapped[str | None] = mapped_column(
        ForeignKey("user_profiles.id", ondelete="SET NULL"), index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    images: Mapped[list["ProfileImage"]] = relationship(
        "ProfileImage",
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="ProfileImage.display_order",
    )

    @property
    def primary_image(self) -> str | None:
        """URL of the primary image, falling back to the first by display order."""

        for image in self.images:
            if image.is_primary:
                return image.image_url
        return self.images[0].image_url if self.images else None

    @property
    def contact_info(self) -> dict[str, str]:
        """Populated contact fields, keyed without the ``contact_`` prefix."""

        info: dict[str, str] = {}
        for field in CONTACT_FIELDS:
            value = getattr(self, field)
            if value:
                info[field.removeprefix("contact_")] = value
        return info


class ProfileImage(Base):
    __tablename__ = "profile_images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    profile_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    image_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    profile: Mapped[Profile] = relationship("Profile", back_populates="images")


class UserProfile(Base):
    """Application-side record for an authenticated user.

    ``id`` mirrors the identifier issued by the authentication provider.
    """

    __tablename__ = "user_profiles"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    full_name: Mapped[str | None] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="user")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


# Imported late so the modules below can reference ``Base`` and ``utcnow``.
from .admin import AdminActivity, AdminSetting  # noqa: E402
from .orders import Order, OrderItem  # noqa: E402

__all__ = [
    "AdminActivity",
    "AdminSetting",
    "Base",
    "CONTACT_FIELDS",
    "Order",
    "OrderItem",
    "PROFILE_STATUSES",
    "Profile",
    "ProfileImage",
    "UserProfile",
    "utcnow",
]
