"""Pydantic schemas for the cart and favorites surface."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ShopCondition(str, Enum):
    """Caller-visible validation conditions reported by cart/favorites mutations."""

    DUPLICATE_ITEM = "duplicate_item"
    ALREADY_FAVORITE = "already_favorite"
    AUTHENTICATION_REQUIRED = "authentication_required"


class CartLineItem(BaseModel):
    """One profile's contact-purchase entry in a shopping cart."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Profile identifier, unique within a cart")
    name: str = Field(..., description="Display name shown on the cart line")
    price: Decimal = Field(..., ge=0, description="Unit price in currency units")
    image: str = Field("", description="Image reference for the cart thumbnail")
    location: str = Field("", description="Location label of the profile")


class CartTotals(BaseModel):
    """Derived totals; recomputed on every read and never persisted."""

    item_count: int = 0
    subtotal: Decimal = Decimal("0.00")
    processing_fee: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")
    bulk_discount_applied: bool = False


class MutationResult(BaseModel):
    """Outcome of a cart or favorites mutation."""

    success: bool
    error: ShopCondition | None = None

    @classmethod
    def ok(cls) -> "MutationResult":
        return cls(success=True)

    @classmethod
    def failed(cls, condition: ShopCondition) -> "MutationResult":
        return cls(success=False, error=condition)


class CartResponse(BaseModel):
    """Cart contents with freshly computed totals."""

    items: list[CartLineItem] = Field(default_factory=list)
    totals: CartTotals = Field(default_factory=CartTotals)


class FavoritesResponse(BaseModel):
    """Favorite profile identifiers of the active identity."""

    favorite_ids: list[int] = Field(default_factory=list)
    count: int = 0


class FavoriteStatus(BaseModel):
    """Membership answer for a single profile."""

    profile_id: int
    is_favorite: bool


__all__ = [
    "CartLineItem",
    "CartResponse",
    "CartTotals",
    "FavoriteStatus",
    "FavoritesResponse",
    "MutationResult",
    "ShopCondition",
]
