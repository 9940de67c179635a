"""Adapter around the hosted authentication provider.

Only the handful of calls the storefront needs are wrapped: resolve a bearer
token to an identity, sign in with a password, sign up, and sign out. The
provider speaks the GoTrue REST dialect; :class:`SupabaseAuthClient` talks to it
through ``httpx`` and normalises responses into :class:`AuthResult` objects.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx
from fastapi import Depends, Header

from storefront.schemas.auth import AuthResult, UserIdentity
from storefront.settings import AppSettings, get_settings

logger = logging.getLogger(__name__)


class AuthenticationError(PermissionError):
    """Raised when an operation requires a signed-in identity."""


class AuthorizationError(PermissionError):
    """Raised when the signed-in identity lacks the required role."""


class AuthServiceError(RuntimeError):
    """Raised when the authentication provider cannot be reached."""


class AuthClient(Protocol):
    async def get_user(self, access_token: str) -> UserIdentity | None: ...

    async def sign_in(self, email: str, password: str) -> AuthResult: ...

    async def sign_up(self, email: str, password: str, full_name: str) -> AuthResult: ...

    async def sign_out(self, access_token: str) -> None: ...


def _identity_from_payload(payload: dict[str, Any] | None) -> UserIdentity | None:
    if not payload or not payload.get("id"):
        return None
    return UserIdentity(id=str(payload["id"]), email=payload.get("email"))


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    return (
        data.get("error_description")
        or data.get("msg")
        or data.get("message")
        or data.get("error")
        or f"HTTP {response.status_code}"
    )


class SupabaseAuthClient:
    """GoTrue REST client bound to one project URL and anon key."""

    def __init__(
        self,
        *,
        base_url: str | None,
        api_key: str | None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/") if base_url else None
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self._base_url}/auth/v1",
            timeout=self._timeout,
            headers={"apikey": self._api_key},
            transport=self._transport,
        )

    async def _request(
        self, method: str, path: str, **kwargs: Any
    ) -> httpx.Response:
        if not self._base_url or not self._api_key:
            raise AuthServiceError("Authentication provider is not configured")
        try:
            async with self._client() as client:
                response = await client.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            logger.error("Authentication provider unavailable: %s", exc)
            raise AuthServiceError(str(exc)) from exc

        if response.status_code >= 500:
            logger.error(
                "Authentication provider error %s on %s", response.status_code, path
            )
            raise AuthServiceError(_error_message(response))
        return response

    async def get_user(self, access_token: str) -> UserIdentity | None:
        response = await self._request(
            "GET", "/user", headers={"Authorization": f"Bearer {access_token}"}
        )
        if response.status_code != 200:
            logger.debug("Rejected access token (%s)", response.status_code)
            return None
        return _identity_from_payload(response.json())

    async def sign_in(self, email: str, password: str) -> AuthResult:
        response = await self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        if response.status_code != 200:
            message = _error_message(response)
            logger.info("Sign in rejected for %s: %s", email, message)
            return AuthResult(error=message)

        data = response.json()
        return AuthResult(
            user=_identity_from_payload(data.get("user")),
            access_token=data.get("access_token"),
            refresh_token=data.get("refresh_token"),
        )

    async def sign_up(self, email: str, password: str, full_name: str) -> AuthResult:
        response = await self._request(
            "POST",
            "/signup",
            json={
                "email": email,
                "password": password,
                "data": {"full_name": full_name},
            },
        )
        if response.status_code not in (200, 201):
            message = _error_message(response)
            logger.info("Sign up rejected for %s: %s", email, message)
            return AuthResult(error=message)

        data = response.json()
        # Without email confirmation the provider answers with a full session;
        # otherwise only the bare user object comes back.
        user_payload = data.get("user") if "user" in data else data
        user = _identity_from_payload(user_payload)
        if user is not None and not (user_payload or {}).get("email_confirmed_at"):
            logger.info("User created but email not confirmed: %s", user.email)
        return AuthResult(
            user=user,
            access_token=data.get("access_token"),
            refresh_token=data.get("refresh_token"),
        )

    async def sign_out(self, access_token: str) -> None:
        response = await self._request(
            "POST", "/logout", headers={"Authorization": f"Bearer {access_token}"}
        )
        if response.status_code not in (200, 204):
            logger.warning("Sign out returned %s: %s", response.status_code, _error_message(response))


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer`` header value."""

    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def build_auth_client(settings: AppSettings) -> SupabaseAuthClient:
    return SupabaseAuthClient(
        base_url=settings.supabase_url,
        api_key=settings.supabase_anon_key,
        timeout=settings.auth_timeout_seconds,
    )


def get_auth_client() -> AuthClient:
    """FastAPI dependency returning the configured authentication client."""

    return build_auth_client(get_settings())


def get_access_token(
    authorization: str | None = Header(default=None),
) -> str | None:
    return bearer_token(authorization)


async def get_current_identity(
    access_token: str | None = Depends(get_access_token),
    auth_client: AuthClient = Depends(get_auth_client),
) -> UserIdentity | None:
    """Resolve the caller's identity; missing or rejected tokens mean guest."""

    if access_token is None:
        return None
    return await auth_client.get_user(access_token)


async def require_identity(
    identity: UserIdentity | None = Depends(get_current_identity),
) -> UserIdentity:
    if identity is None:
        raise AuthenticationError("Not authenticated")
    return identity


__all__ = [
    "AuthClient",
    "AuthServiceError",
    "AuthenticationError",
    "AuthorizationError",
    "SupabaseAuthClient",
    "bearer_token",
    "build_auth_client",
    "get_access_token",
    "get_auth_client",
    "get_current_identity",
    "require_identity",
]
