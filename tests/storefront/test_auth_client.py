"""GoTrue REST adapter exercised through ``httpx.MockTransport``."""

from __future__ import annotations

import json

import httpx
import pytest

from storefront.services.auth_service import (
    AuthServiceError,
    SupabaseAuthClient,
    bearer_token,
)


def _client(handler) -> SupabaseAuthClient:
    return SupabaseAuthClient(
        base_url="https://project.supabase.co/",
        api_key="anon-key",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_get_user_resolves_identity() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/auth/v1/user"
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["Authorization"] == "Bearer good-token"
        return httpx.Response(200, json={"id": "u-1", "email": "a@example.com"})

    identity = await _client(handler).get_user("good-token")

    assert identity is not None
    assert identity.id == "u-1"
    assert identity.email == "a@example.com"


@pytest.mark.asyncio
async def test_get_user_rejected_token_is_guest() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"msg": "invalid JWT"})

    assert await _client(handler).get_user("expired") is None


@pytest.mark.asyncio
async def test_sign_in_returns_session() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/auth/v1/token"
        assert request.url.params["grant_type"] == "password"
        assert json.loads(request.content) == {
            "email": "a@example.com",
            "password": "pw",
        }
        return httpx.Response(
            200,
            json={
                "access_token": "at",
                "refresh_token": "rt",
                "user": {"id": "u-1", "email": "a@example.com"},
            },
        )

    result = await _client(handler).sign_in("a@example.com", "pw")

    assert result.succeeded
    assert result.user is not None and result.user.id == "u-1"
    assert result.access_token == "at"


@pytest.mark.asyncio
async def test_sign_in_rejection_is_reported_not_raised() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={"error": "invalid_grant", "error_description": "Invalid login credentials"},
        )

    result = await _client(handler).sign_in("a@example.com", "wrong")

    assert result.succeeded is False
    assert result.error == "Invalid login credentials"


@pytest.mark.asyncio
async def test_sign_up_with_pending_confirmation_returns_bare_user() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body["data"] == {"full_name": "Ana Perez"}
        return httpx.Response(200, json={"id": "u-2", "email": "ana@example.com"})

    result = await _client(handler).sign_up("ana@example.com", "secret1", "Ana Perez")

    assert result.user is not None and result.user.id == "u-2"
    assert result.access_token is None


@pytest.mark.asyncio
async def test_transport_failure_raises_service_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(AuthServiceError):
        await _client(handler).get_user("token")


@pytest.mark.asyncio
async def test_provider_5xx_raises_service_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="maintenance")

    with pytest.raises(AuthServiceError):
        await _client(handler).sign_out("token")


@pytest.mark.asyncio
async def test_unconfigured_client_raises_service_error() -> None:
    client = SupabaseAuthClient(base_url=None, api_key=None)

    with pytest.raises(AuthServiceError, match="not configured"):
        await client.get_user("token")


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("Bearer abc", "abc"),
        ("bearer   abc  ", "abc"),
        ("Basic abc", None),
        ("Bearer ", None),
        (None, None),
    ],
)
def test_bearer_token(header: str | None, expected: str | None) -> None:
    assert bearer_token(header) == expected
