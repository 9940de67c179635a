"""Favorite profile ids of the signed-in user."""

from __future__ import annotations

from storefront.schemas.auth import UserIdentity
from storefront.schemas.shopping import MutationResult, ShopCondition
from storefront.services.shopping.cart import StoreStatus
from storefront.services.shopping.identity import IdentitySource
from storefront.services.shopping.persistence import ShoppingPersistence


class FavoritesStore:
    """Set of favorited profile ids, persisted per user.

    Favorites require a signed-in identity: without one the set is empty and
    every mutation reports ``AUTHENTICATION_REQUIRED`` without touching state.
    """

    def __init__(
        self, persistence: ShoppingPersistence, identity: IdentitySource
    ) -> None:
        self._persistence = persistence
        self._identity = identity
        self._favorite_ids: list[int] = []
        self.status = StoreStatus.UNLOADED
        self._reload(identity.current())
        self._unsubscribe = identity.subscribe(self._on_identity_change)

    @property
    def favorite_ids(self) -> list[int]:
        return list(self._favorite_ids)

    @property
    def count(self) -> int:
        return len(self._favorite_ids)

    def is_favorite(self, profile_id: int) -> bool:
        return profile_id in self._favorite_ids

    def add_favorite(self, profile_id: int) -> MutationResult:
        identity = self._identity.current()
        if identity is None:
            return MutationResult.failed(ShopCondition.AUTHENTICATION_REQUIRED)
        if self.is_favorite(profile_id):
            return MutationResult.failed(ShopCondition.ALREADY_FAVORITE)
        self._favorite_ids.append(profile_id)
        self._persistence.save_favorites(identity, self._favorite_ids)
        return MutationResult.ok()

    def remove_favorite(self, profile_id: int) -> MutationResult:
        identity = self._identity.current()
        if identity is None:
            return MutationResult.failed(ShopCondition.AUTHENTICATION_REQUIRED)
        self._favorite_ids = [
            favorite for favorite in self._favorite_ids if favorite != profile_id
        ]
        self._persistence.save_favorites(identity, self._favorite_ids)
        return MutationResult.ok()

    def toggle_favorite(self, profile_id: int) -> MutationResult:
        if self._identity.current() is None:
            return MutationResult.failed(ShopCondition.AUTHENTICATION_REQUIRED)
        if self.is_favorite(profile_id):
            return self.remove_favorite(profile_id)
        return self.add_favorite(profile_id)

    def close(self) -> None:
        self._unsubscribe()

    def _reload(self, identity: UserIdentity | None) -> None:
        if identity is None:
            self._favorite_ids = []
            self.status = StoreStatus.UNLOADED
            return
        self.status = StoreStatus.LOADING
        self._favorite_ids = self._persistence.load_favorites(identity)
        self.status = StoreStatus.LOADED

    def _on_identity_change(
        self, previous: UserIdentity | None, current: UserIdentity | None
    ) -> None:
        self._reload(current)
