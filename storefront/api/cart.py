"""Cart endpoints backed by the per-client shopping facade.

Handlers are plain functions; FastAPI runs them in its threadpool because the
client storage is synchronous.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from storefront.schemas.shopping import CartLineItem, CartResponse
from storefront.services.shopping_service import (
    ShoppingSession,
    get_shopping_session,
    raise_for_condition,
)

router = APIRouter()


@router.get("", response_model=CartResponse)
def get_cart(
    shopping: ShoppingSession = Depends(get_shopping_session),
) -> CartResponse:
    """Return the cart lines with freshly computed totals."""

    return shopping.cart_snapshot()


@router.post("/items", response_model=CartResponse, status_code=status.HTTP_201_CREATED)
def add_item(
    item: CartLineItem,
    shopping: ShoppingSession = Depends(get_shopping_session),
) -> CartResponse:
    """Add a profile to the cart; a profile already present is rejected with 409."""

    raise_for_condition(shopping.add_item(item))
    return shopping.cart_snapshot()


@router.delete("/items/{profile_id}", response_model=CartResponse)
def remove_item(
    profile_id: int,
    shopping: ShoppingSession = Depends(get_shopping_session),
) -> CartResponse:
    raise_for_condition(shopping.remove_item(profile_id))
    return shopping.cart_snapshot()


@router.delete("", response_model=CartResponse)
def clear_cart(
    shopping: ShoppingSession = Depends(get_shopping_session),
) -> CartResponse:
    raise_for_condition(shopping.clear())
    return shopping.cart_snapshot()
