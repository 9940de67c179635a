"""Cart/favorites facade handed to the web layer.

The facade is an explicitly constructed state container: it owns one
:class:`CartStore` and one :class:`FavoritesStore` that share a persistence
backend and an identity source. The API layer builds a fresh facade per request
from the caller's client keyspace and resolved identity, so no module-level
shopping state exists.
"""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, status

from storefront.schemas.auth import UserIdentity
from storefront.schemas.shopping import (
    CartLineItem,
    CartResponse,
    CartTotals,
    FavoritesResponse,
    MutationResult,
    ShopCondition,
)
from storefront.services.auth_service import get_current_identity
from storefront.services.shopping import (
    CartStore,
    FavoritesStore,
    IdentitySource,
    PricingRules,
    SessionIdentity,
    ShoppingPersistence,
)
from storefront.settings import get_settings
from storefront.storage import ClientStorage, get_client_storage

DEFAULT_CLIENT_ID = "default"

_CONDITION_STATUS = {
    ShopCondition.DUPLICATE_ITEM: status.HTTP_409_CONFLICT,
    ShopCondition.ALREADY_FAVORITE: status.HTTP_409_CONFLICT,
    ShopCondition.AUTHENTICATION_REQUIRED: status.HTTP_401_UNAUTHORIZED,
}


class ShoppingSession:
    """Public cart and favorites operations for one client."""

    def __init__(
        self,
        *,
        persistence: ShoppingPersistence,
        identity: IdentitySource,
        rules: PricingRules,
    ) -> None:
        self.identity = identity
        self.rules = rules
        self.cart = CartStore(persistence, identity, rules=rules)
        self.favorites = FavoritesStore(persistence, identity)

    @classmethod
    def for_storage(
        cls,
        storage: ClientStorage,
        identity: IdentitySource,
        *,
        namespace: str,
        rules: PricingRules,
    ) -> "ShoppingSession":
        return cls(
            persistence=ShoppingPersistence(storage, namespace=namespace),
            identity=identity,
            rules=rules,
        )

    def add_item(self, item: CartLineItem) -> MutationResult:
        return self.cart.add_item(item)

    def remove_item(self, profile_id: int) -> MutationResult:
        return self.cart.remove_item(profile_id)

    def clear(self) -> MutationResult:
        return self.cart.clear()

    @property
    def items(self) -> list[CartLineItem]:
        return self.cart.items

    @property
    def totals(self) -> CartTotals:
        return self.cart.totals

    def cart_snapshot(self) -> CartResponse:
        return CartResponse(items=self.cart.items, totals=self.cart.totals)

    def add_favorite(self, profile_id: int) -> MutationResult:
        return self.favorites.add_favorite(profile_id)

    def remove_favorite(self, profile_id: int) -> MutationResult:
        return self.favorites.remove_favorite(profile_id)

    def toggle_favorite(self, profile_id: int) -> MutationResult:
        return self.favorites.toggle_favorite(profile_id)

    def is_favorite(self, profile_id: int) -> bool:
        return self.favorites.is_favorite(profile_id)

    def favorites_snapshot(self) -> FavoritesResponse:
        return FavoritesResponse(
            favorite_ids=self.favorites.favorite_ids,
            count=self.favorites.count,
        )

    def close(self) -> None:
        self.cart.close()
        self.favorites.close()


def raise_for_condition(result: MutationResult) -> None:
    """Translate a failed mutation into the matching HTTP error."""

    if result.success or result.error is None:
        return
    raise HTTPException(
        status_code=_CONDITION_STATUS[result.error], detail=result.error.value
    )


def get_client_id(
    x_client_id: str | None = Header(default=None, max_length=128),
) -> str:
    """Return the caller's client keyspace id from ``X-Client-Id``."""

    if x_client_id is None or not x_client_id.strip():
        return DEFAULT_CLIENT_ID
    return x_client_id.strip()


def get_storage(client_id: str = Depends(get_client_id)) -> ClientStorage:
    return get_client_storage(client_id)


def get_persistence(storage: ClientStorage = Depends(get_storage)) -> ShoppingPersistence:
    return ShoppingPersistence(storage, namespace=get_settings().storage_namespace)


def get_session_identity(
    identity: UserIdentity | None = Depends(get_current_identity),
) -> SessionIdentity:
    return SessionIdentity(identity)


def get_shopping_session(
    storage: ClientStorage = Depends(get_storage),
    identity: SessionIdentity = Depends(get_session_identity),
):
    """FastAPI dependency that wires the facade together."""

    settings = get_settings()
    session = ShoppingSession.for_storage(
        storage,
        identity,
        namespace=settings.storage_namespace,
        rules=PricingRules.from_settings(settings),
    )
    try:
        yield session
    finally:
        session.close()


__all__ = [
    "DEFAULT_CLIENT_ID",
    "ShoppingSession",
    "get_client_id",
    "get_persistence",
    "get_session_identity",
    "get_shopping_session",
    "get_storage",
    "raise_for_condition",
]
