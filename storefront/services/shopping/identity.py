"""Narrow "current identity + change notifications" contract consumed by the stores."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from storefront.schemas.auth import UserIdentity

logger = logging.getLogger(__name__)

IdentityListener = Callable[[UserIdentity | None, UserIdentity | None], None]


class IdentitySource(Protocol):
    """Anything that can report the active identity and announce changes."""

    def current(self) -> UserIdentity | None: ...

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]: ...


def identity_key(identity: UserIdentity | None) -> str | None:
    return identity.id if identity is not None else None


class SessionIdentity:
    """In-process observable identity holder.

    Listeners are called with ``(previous, current)`` only when the user id
    changes; re-announcing the same user (for example after a token refresh) is
    silent.
    """

    def __init__(self, identity: UserIdentity | None = None) -> None:
        self._identity = identity
        self._listeners: list[IdentityListener] = []

    def current(self) -> UserIdentity | None:
        return self._identity

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set(self, identity: UserIdentity | None) -> None:
        previous = self._identity
        self._identity = identity
        if identity_key(previous) == identity_key(identity):
            return

        logger.info(
            "Identity changed from %s to %s",
            identity_key(previous) or "guest",
            identity_key(identity) or "guest",
        )
        for listener in list(self._listeners):
            listener(previous, identity)

    def sign_out(self) -> None:
        self.set(None)
