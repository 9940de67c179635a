"""Observable identity holder used by the shopping stores."""

from __future__ import annotations

from storefront.schemas.auth import UserIdentity
from storefront.services.shopping import SessionIdentity

ALICE = UserIdentity(id="alice", email="alice@example.com")


def test_listeners_receive_previous_and_current() -> None:
    source = SessionIdentity()
    seen: list[tuple] = []
    source.subscribe(lambda previous, current: seen.append((previous, current)))

    source.set(ALICE)
    source.sign_out()

    assert seen == [(None, ALICE), (ALICE, None)]


def test_same_user_does_not_notify() -> None:
    source = SessionIdentity(ALICE)
    seen: list[tuple] = []
    source.subscribe(lambda previous, current: seen.append((previous, current)))

    source.set(UserIdentity(id="alice", email="new@example.com"))
    source.sign_out()
    source.sign_out()

    assert len(seen) == 1
    assert source.current() is None


def test_unsubscribe_is_safe_to_call_twice() -> None:
    source = SessionIdentity()
    seen: list[tuple] = []
    unsubscribe = source.subscribe(lambda *args: seen.append(args))

    unsubscribe()
    unsubscribe()
    source.set(ALICE)

    assert seen == []
