"""Identity-keyed persistence of carts and favorites in client storage."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from storefront.schemas.auth import UserIdentity
from storefront.schemas.shopping import CartLineItem
from storefront.storage import ClientStorage, StorageWriteError

logger = logging.getLogger(__name__)

GUEST_SUFFIX = "guest"
CART_KIND = "cart"
FAVORITES_KIND = "favorites"

T = TypeVar("T")

_CART_ADAPTER: TypeAdapter[list[CartLineItem]] = TypeAdapter(list[CartLineItem])
_FAVORITES_ADAPTER: TypeAdapter[list[int]] = TypeAdapter(list[int])


def storage_key(namespace: str, kind: str, identity: UserIdentity | None) -> str:
    """Return ``{namespace}_{kind}_{user id}`` or the fixed guest key."""

    suffix = identity.id if identity is not None else GUEST_SUFFIX
    return f"{namespace}_{kind}_{suffix}"


def parse_stored_list(raw: str, adapter: TypeAdapter[list[T]]) -> list[T] | None:
    """Decode ``raw`` as a JSON array matching ``adapter``.

    Returns ``None`` for anything malformed: invalid JSON, a non-array payload,
    or elements that fail schema validation.
    """

    try:
        decoded: Any = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(decoded, list):
        return None
    try:
        return adapter.validate_python(decoded)
    except ValidationError:
        return None


def _unique_by(values: Sequence[T], key) -> list[T]:
    seen: set[Any] = set()
    unique: list[T] = []
    for value in values:
        marker = key(value)
        if marker in seen:
            continue
        seen.add(marker)
        unique.append(value)
    return unique


class ShoppingPersistence:
    """Load/save carts and favorites keyed by identity.

    Loads never raise: a missing value yields an empty collection and a
    corrupted one is removed before returning empty. Saves are write-through
    and best-effort; a failed write is logged and reported as ``False``.
    """

    def __init__(self, storage: ClientStorage, *, namespace: str) -> None:
        self._storage = storage
        self._namespace = namespace

    @property
    def namespace(self) -> str:
        return self._namespace

    def cart_key(self, identity: UserIdentity | None) -> str:
        return storage_key(self._namespace, CART_KIND, identity)

    def favorites_key(self, identity: UserIdentity | None) -> str:
        return storage_key(self._namespace, FAVORITES_KIND, identity)

    def load_cart(self, identity: UserIdentity | None) -> list[CartLineItem]:
        items = self._load(self.cart_key(identity), _CART_ADAPTER)
        return _unique_by(items, lambda item: item.id)

    def save_cart(
        self, identity: UserIdentity | None, items: Sequence[CartLineItem]
    ) -> bool:
        payload = _CART_ADAPTER.dump_json(list(items)).decode("utf-8")
        return self._save(self.cart_key(identity), payload)

    def load_favorites(self, identity: UserIdentity | None) -> list[int]:
        favorites = self._load(self.favorites_key(identity), _FAVORITES_ADAPTER)
        return _unique_by(favorites, lambda profile_id: profile_id)

    def save_favorites(
        self, identity: UserIdentity | None, favorite_ids: Sequence[int]
    ) -> bool:
        return self._save(self.favorites_key(identity), json.dumps(list(favorite_ids)))

    def sweep_user_carts(self) -> list[str]:
        """Delete every per-user cart key, keeping the guest cart."""

        prefix = f"{self._namespace}_{CART_KIND}_"
        guest_key = self.cart_key(None)
        removed: list[str] = []
        for key in self._storage.keys():
            if not key.startswith(prefix) or key == guest_key:
                continue
            try:
                self._storage.remove_item(key)
            except StorageWriteError as exc:
                logger.warning("Failed to clear cart data under %s: %s", key, exc)
                continue
            removed.append(key)
        if removed:
            logger.info("Cleared %d user cart key(s) after sign-out", len(removed))
        return removed

    def _load(self, key: str, adapter: TypeAdapter[list[T]]) -> list[T]:
        raw = self._storage.get_item(key)
        if raw is None:
            return []

        parsed = parse_stored_list(raw, adapter)
        if parsed is not None:
            return parsed

        logger.warning("Discarding corrupted stored value under %s", key)
        try:
            self._storage.remove_item(key)
        except StorageWriteError as exc:
            logger.warning("Failed to remove corrupted value under %s: %s", key, exc)
        return []

    def _save(self, key: str, payload: str) -> bool:
        try:
            self._storage.set_item(key, payload)
        except StorageWriteError as exc:
            logger.warning(
                "Error saving %s; keeping in-memory state only: %s", key, exc
            )
            return False
        return True
