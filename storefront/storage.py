"""Per-client key/value storage backing the cart and favorites stores.

Every browser or device owns an isolated keyspace identified by its client id.
Values are plain strings so the persistence layer controls serialization. Redis
is the shared backend; when it cannot be reached the process falls back to
in-memory storage until the retry backoff elapses.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Iterator
from typing import Protocol

from redis import Redis
from redis.exceptions import RedisError

from storefront.settings import get_settings

logger = logging.getLogger(__name__)

_CLIENT_PREFIX = "storefront:client"


class StorageWriteError(Exception):
    """Raised when a value cannot be written to client storage."""


class StorageQuotaExceeded(StorageWriteError):
    """Raised when a write would exceed the storage quota."""


class ClientStorage(Protocol):
    """String-keyed, string-valued storage scoped to one client."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


def _encoded_size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


class MemoryStorage:
    """In-process storage with an optional byte quota."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        self._items: dict[str, str] = {}
        self._quota_bytes = quota_bytes

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            used = sum(
                _encoded_size(k, v) for k, v in self._items.items() if k != key
            )
            if used + _encoded_size(key, value) > self._quota_bytes:
                raise StorageQuotaExceeded(
                    f"Writing {key!r} would exceed the {self._quota_bytes} byte quota"
                )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items))


def client_hash_key(client_id: str) -> str:
    return f"{_CLIENT_PREFIX}:{client_id}"


class RedisStorage:
    """Client storage kept in a single Redis hash per client id.

    Read failures degrade to "no stored value"; write failures surface as
    :class:`StorageWriteError` so callers can log and carry on.
    """

    def __init__(self, redis: Redis, client_id: str) -> None:
        self._redis = redis
        self._hash_key = client_hash_key(client_id)

    def get_item(self, key: str) -> str | None:
        try:
            return self._redis.hget(self._hash_key, key)
        except RedisError as exc:
            logger.warning("Redis read failed for %s/%s: %s", self._hash_key, key, exc)
            return None

    def set_item(self, key: str, value: str) -> None:
        try:
            self._redis.hset(self._hash_key, key, value)
        except RedisError as exc:
            raise StorageWriteError(f"Redis write failed for {key!r}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        try:
            self._redis.hdel(self._hash_key, key)
        except RedisError as exc:
            raise StorageWriteError(f"Redis delete failed for {key!r}: {exc}") from exc

    def keys(self) -> list[str]:
        try:
            return list(self._redis.hkeys(self._hash_key))
        except RedisError as exc:
            logger.warning("Redis key scan failed for %s: %s", self._hash_key, exc)
            return []


_redis_client: Redis | None = None
_redis_disabled_until = 0.0
_client_lock = threading.Lock()
_fallback_storages: OrderedDict[str, MemoryStorage] = OrderedDict()


def get_redis() -> Redis | None:
    """Return the shared Redis client, or ``None`` while Redis is unreachable."""

    global _redis_client, _redis_disabled_until

    with _client_lock:
        if _redis_client is not None:
            return _redis_client

        if time.monotonic() < _redis_disabled_until:
            return None

        settings = get_settings()
        try:
            client = Redis.from_url(
                settings.redis_url, decode_responses=True, encoding="utf-8"
            )
            client.ping()
        except RedisError as exc:
            logger.warning(
                "Redis connection failed: %s. Client storage falls back to memory "
                "for %.0fs.",
                exc,
                settings.redis_retry_backoff_seconds,
            )
            _redis_disabled_until = (
                time.monotonic() + settings.redis_retry_backoff_seconds
            )
            return None

        _redis_client = client
        logger.info("Redis connection established successfully")
        return _redis_client


def get_client_storage(client_id: str) -> ClientStorage:
    """Return the storage for ``client_id``, preferring Redis."""

    redis = get_redis()
    if redis is not None:
        return RedisStorage(redis, client_id)

    # Least recently used keyspaces are evicted once the cap is reached.
    max_clients = get_settings().fallback_storage_max_clients
    with _client_lock:
        storage = _fallback_storages.get(client_id)
        if storage is not None:
            _fallback_storages.move_to_end(client_id)
            return storage

        storage = MemoryStorage()
        _fallback_storages[client_id] = storage
        while len(_fallback_storages) > max_clients:
            evicted, _ = _fallback_storages.popitem(last=False)
            logger.debug("Evicted fallback storage for client %s", evicted)
        return storage


def close_redis() -> None:
    """Close the global Redis connection and reset the fallback state."""

    global _redis_client, _redis_disabled_until
    with _client_lock:
        if _redis_client is not None:
            _redis_client.close()
            _redis_client = None
        _redis_disabled_until = 0.0


def clear_fallback_storage() -> None:
    """Drop every in-memory fallback keyspace."""

    with _client_lock:
        _fallback_storages.clear()


__all__ = [
    "ClientStorage",
    "MemoryStorage",
    "RedisStorage",
    "StorageQuotaExceeded",
    "StorageWriteError",
    "clear_fallback_storage",
    "client_hash_key",
    "close_redis",
    "get_client_storage",
    "get_redis",
]
