"""Identity-keyed persistence: key layout, isolation, and degradation paths."""

from __future__ import annotations

import logging
from decimal import Decimal

import pytest

from storefront.schemas.auth import UserIdentity
from storefront.schemas.shopping import CartLineItem
from storefront.services.shopping.persistence import ShoppingPersistence, storage_key
from storefront.storage import MemoryStorage, StorageWriteError

ALICE = UserIdentity(id="alice", email="alice@example.com")
BOB = UserIdentity(id="bob")


def _item(profile_id: int, price: str = "2.00") -> CartLineItem:
    return CartLineItem(
        id=profile_id,
        name=f"Profile {profile_id}",
        price=Decimal(price),
        image=f"/img/{profile_id}.jpg",
        location="Santiago, DO",
    )


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def persistence(storage: MemoryStorage) -> ShoppingPersistence:
    return ShoppingPersistence(storage, namespace="holacupid")


def test_storage_keys_follow_namespace_kind_identity_layout() -> None:
    assert storage_key("holacupid", "cart", ALICE) == "holacupid_cart_alice"
    assert storage_key("holacupid", "cart", None) == "holacupid_cart_guest"
    assert storage_key("holacupid", "favorites", BOB) == "holacupid_favorites_bob"


def test_cart_round_trips_every_field(persistence: ShoppingPersistence) -> None:
    items = [_item(1, "2.00"), _item(7, "3.50")]

    assert persistence.save_cart(ALICE, items) is True
    assert persistence.load_cart(ALICE) == items


def test_carts_are_isolated_per_identity(persistence: ShoppingPersistence) -> None:
    persistence.save_cart(ALICE, [_item(1)])
    persistence.save_cart(None, [_item(2)])

    assert [item.id for item in persistence.load_cart(ALICE)] == [1]
    assert [item.id for item in persistence.load_cart(None)] == [2]
    assert persistence.load_cart(BOB) == []


def test_missing_value_loads_empty(persistence: ShoppingPersistence) -> None:
    assert persistence.load_cart(ALICE) == []
    assert persistence.load_favorites(ALICE) == []


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        '{"id": 1}',
        '[{"id": "abc", "name": 3}]',
        '[{"name": "missing id", "price": 2}]',
    ],
)
def test_corrupted_cart_is_discarded(
    storage: MemoryStorage,
    persistence: ShoppingPersistence,
    raw: str,
    caplog: pytest.LogCaptureFixture,
) -> None:
    storage.set_item("holacupid_cart_alice", raw)

    with caplog.at_level(logging.WARNING):
        assert persistence.load_cart(ALICE) == []

    assert storage.get_item("holacupid_cart_alice") is None
    assert "corrupted" in caplog.text


def test_corrupted_favorites_are_discarded(
    storage: MemoryStorage, persistence: ShoppingPersistence
) -> None:
    storage.set_item("holacupid_favorites_alice", '["x", "y"]')

    assert persistence.load_favorites(ALICE) == []
    assert "holacupid_favorites_alice" not in storage.keys()


def test_duplicate_ids_collapse_on_load(
    storage: MemoryStorage, persistence: ShoppingPersistence
) -> None:
    storage.set_item(
        "holacupid_cart_alice",
        '[{"id": 3, "name": "A", "price": "2.00"}, {"id": 3, "name": "B", "price": "2.00"}]',
    )
    storage.set_item("holacupid_favorites_alice", "[4, 4, 5]")

    assert [item.name for item in persistence.load_cart(ALICE)] == ["A"]
    assert persistence.load_favorites(ALICE) == [4, 5]


def test_quota_failure_is_logged_and_reported(
    caplog: pytest.LogCaptureFixture,
) -> None:
    persistence = ShoppingPersistence(MemoryStorage(quota_bytes=40), namespace="holacupid")

    with caplog.at_level(logging.WARNING):
        saved = persistence.save_cart(ALICE, [_item(1), _item(2)])

    assert saved is False
    assert "Error saving holacupid_cart_alice" in caplog.text


def test_sweep_removes_user_carts_but_keeps_guest_and_favorites(
    storage: MemoryStorage, persistence: ShoppingPersistence
) -> None:
    persistence.save_cart(ALICE, [_item(1)])
    persistence.save_cart(BOB, [_item(2)])
    persistence.save_cart(None, [_item(3)])
    persistence.save_favorites(ALICE, [9])
    storage.set_item("othersite_cart_alice", "[]")

    removed = persistence.sweep_user_carts()

    assert sorted(removed) == ["holacupid_cart_alice", "holacupid_cart_bob"]
    assert sorted(storage.keys()) == [
        "holacupid_cart_guest",
        "holacupid_favorites_alice",
        "othersite_cart_alice",
    ]


class FailingRemoveStorage(MemoryStorage):
    def remove_item(self, key: str) -> None:
        raise StorageWriteError("read-only")


def test_sweep_skips_keys_that_cannot_be_removed() -> None:
    storage = FailingRemoveStorage()
    storage.set_item("holacupid_cart_alice", "[]")
    persistence = ShoppingPersistence(storage, namespace="holacupid")

    assert persistence.sweep_user_carts() == []
    assert storage.keys() == ["holacupid_cart_alice"]
