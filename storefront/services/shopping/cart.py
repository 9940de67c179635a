"""In-memory cart kept in sync with identity-keyed client storage."""

from __future__ import annotations

import logging
from enum import Enum

from storefront.schemas.auth import UserIdentity
from storefront.schemas.shopping import (
    CartLineItem,
    CartTotals,
    MutationResult,
    ShopCondition,
)
from storefront.services.shopping.identity import IdentitySource
from storefront.services.shopping.persistence import ShoppingPersistence
from storefront.services.shopping.pricing import (
    DEFAULT_RULES,
    PricingRules,
    calculate_totals,
)

logger = logging.getLogger(__name__)


class StoreStatus(str, Enum):
    LOADING = "loading"
    LOADED = "loaded"
    UNLOADED = "unloaded"


class CartStore:
    """Cart line items for the active identity (or the guest namespace).

    Mutations update memory first and then write through to storage; a failed
    write never rolls the in-memory change back.
    """

    def __init__(
        self,
        persistence: ShoppingPersistence,
        identity: IdentitySource,
        *,
        rules: PricingRules = DEFAULT_RULES,
    ) -> None:
        self._persistence = persistence
        self._identity = identity
        self._rules = rules
        self._items: list[CartLineItem] = []
        self.status = StoreStatus.UNLOADED
        self._reload(identity.current())
        self._unsubscribe = identity.subscribe(self._on_identity_change)

    @property
    def items(self) -> list[CartLineItem]:
        return list(self._items)

    @property
    def totals(self) -> CartTotals:
        return calculate_totals(self._items, self._rules)

    def contains(self, profile_id: int) -> bool:
        return any(item.id == profile_id for item in self._items)

    def add_item(self, item: CartLineItem) -> MutationResult:
        if self.contains(item.id):
            return MutationResult.failed(ShopCondition.DUPLICATE_ITEM)
        self._items.append(item)
        self._persist()
        return MutationResult.ok()

    def remove_item(self, profile_id: int) -> MutationResult:
        self._items = [item for item in self._items if item.id != profile_id]
        self._persist()
        return MutationResult.ok()

    def clear(self) -> MutationResult:
        self._items = []
        self._persist()
        return MutationResult.ok()

    def close(self) -> None:
        self._unsubscribe()

    def _persist(self) -> None:
        self._persistence.save_cart(self._identity.current(), self._items)

    def _reload(self, identity: UserIdentity | None) -> None:
        self.status = StoreStatus.LOADING
        self._items = self._persistence.load_cart(identity)
        self.status = StoreStatus.LOADED

    def _on_identity_change(
        self, previous: UserIdentity | None, current: UserIdentity | None
    ) -> None:
        if previous is not None and current is None:
            self._persistence.sweep_user_carts()
        self._reload(current)
