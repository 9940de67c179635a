"""Favorites endpoints; every mutation requires a signed-in identity."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from storefront.schemas.shopping import FavoritesResponse, FavoriteStatus
from storefront.services.shopping_service import (
    ShoppingSession,
    get_shopping_session,
    raise_for_condition,
)

router = APIRouter()


@router.get("", response_model=FavoritesResponse)
def list_favorites(
    shopping: ShoppingSession = Depends(get_shopping_session),
) -> FavoritesResponse:
    """Return the active identity's favorites; guests always see an empty set."""

    return shopping.favorites_snapshot()


@router.get("/{profile_id}", response_model=FavoriteStatus)
def get_favorite_status(
    profile_id: int,
    shopping: ShoppingSession = Depends(get_shopping_session),
) -> FavoriteStatus:
    return FavoriteStatus(
        profile_id=profile_id, is_favorite=shopping.is_favorite(profile_id)
    )


@router.post(
    "/{profile_id}",
    response_model=FavoritesResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_favorite(
    profile_id: int,
    shopping: ShoppingSession = Depends(get_shopping_session),
) -> FavoritesResponse:
    raise_for_condition(shopping.add_favorite(profile_id))
    return shopping.favorites_snapshot()


@router.delete("/{profile_id}", response_model=FavoritesResponse)
def remove_favorite(
    profile_id: int,
    shopping: ShoppingSession = Depends(get_shopping_session),
) -> FavoritesResponse:
    raise_for_condition(shopping.remove_favorite(profile_id))
    return shopping.favorites_snapshot()


@router.post("/{profile_id}/toggle", response_model=FavoriteStatus)
def toggle_favorite(
    profile_id: int,
    shopping: ShoppingSession = Depends(get_shopping_session),
) -> FavoriteStatus:
    """Flip membership of ``profile_id`` and report the resulting state."""

    raise_for_condition(shopping.toggle_favorite(profile_id))
    return FavoriteStatus(
        profile_id=profile_id, is_favorite=shopping.is_favorite(profile_id)
    )
