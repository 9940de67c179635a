"""Pydantic schemas for the public profile catalog."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProfileImage(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    image_url: str
    is_primary: bool = False
    display_order: int = 0


class ProfileSummary(BaseModel):
    """Catalog card for an approved profile. Contact details are never included."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    age: int
    location: str
    price: Decimal
    featured: bool = False
    verified: bool = False
    slug: str | None = None
    primary_image: str | None = Field(
        None, description="URL of the primary image, falling back to the first one"
    )


class ProfileDetail(ProfileSummary):
    description: str | None = None
    height: str | None = None
    education: str | None = None
    profession: str | None = None
    languages: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    images: list[ProfileImage] = Field(default_factory=list)
    created_at: datetime | None = None


class ProfileListResponse(BaseModel):
    profiles: list[ProfileSummary]
    total: int
    limit: int
    offset: int
    has_more: bool


class ProfileSubmission(BaseModel):
    """Payload for submitting a new profile for moderation."""

    name: str = Field(..., min_length=1, max_length=255)
    age: int = Field(..., ge=18, le=99)
    location: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    height: str | None = Field(None, max_length=64)
    education: str | None = Field(None, max_length=255)
    profession: str | None = Field(None, max_length=255)
    languages: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    contact_email: str | None = Field(None, max_length=320)
    contact_phone: str | None = Field(None, max_length=64)
    contact_whatsapp: str | None = Field(None, max_length=64)
    contact_instagram: str | None = Field(None, max_length=255)
    contact_tiktok: str | None = Field(None, max_length=255)
    contact_facebook: str | None = Field(None, max_length=255)
    contact_telegram: str | None = Field(None, max_length=255)
    image_urls: list[str] = Field(
        default_factory=list,
        max_length=10,
        description="Already-uploaded image URLs; the first becomes the primary image.",
    )

    @field_validator("languages", "interests")
    @classmethod
    def _strip_tokens(cls, value: list[str]) -> list[str]:
        return [token.strip() for token in value if token.strip()]


class ProfileSubmissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    slug: str | None
    status: str


__all__ = [
    "ProfileDetail",
    "ProfileImage",
    "ProfileListResponse",
    "ProfileSubmission",
    "ProfileSubmissionResponse",
    "ProfileSummary",
]
