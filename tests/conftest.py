"""Pytest configuration shared by the whole storefront test suite."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from tests import _ensure_repo_on_path


def pytest_configure(config: pytest.Config) -> None:
    _ensure_repo_on_path()


@pytest.fixture(autouse=True)
def _isolated_client_storage(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep every test away from a real Redis and from other tests' keyspaces."""

    from storefront import storage

    monkeypatch.setattr(storage, "get_redis", lambda: None)
    storage.clear_fallback_storage()
    yield
    storage.clear_fallback_storage()
