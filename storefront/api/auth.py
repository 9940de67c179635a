"""Identity lifecycle endpoints.

Signing in or up first ends any session carried by the request. Ending a
session always sweeps the client's per-user cart keys, even when the token is
expired or the provider cannot be reached.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, status

from storefront.schemas.auth import (
    AuthResult,
    SessionResponse,
    SignInRequest,
    SignUpRequest,
)
from storefront.services.auth_service import (
    AuthClient,
    AuthenticationError,
    AuthServiceError,
    get_access_token,
    get_auth_client,
)
from storefront.services.profile_service import ProfileService, get_profile_service
from storefront.services.shopping import ShoppingPersistence
from storefront.services.shopping_service import get_persistence

logger = logging.getLogger(__name__)

router = APIRouter()


async def _end_session(
    auth_client: AuthClient,
    access_token: str | None,
    persistence: ShoppingPersistence,
) -> None:
    # Storage may be Redis; keep its round trips off the event loop.
    await asyncio.to_thread(persistence.sweep_user_carts)
    if access_token is None:
        return
    try:
        await auth_client.sign_out(access_token)
    except AuthServiceError as exc:
        logger.warning("Remote sign out failed: %s", exc)


def _session_response(result: AuthResult) -> SessionResponse:
    if not result.succeeded:
        raise AuthenticationError(result.error or "Authentication failed")
    return SessionResponse(
        user=result.user,
        access_token=result.access_token,
        refresh_token=result.refresh_token,
    )


@router.post("/sign-in", response_model=SessionResponse)
async def sign_in(
    payload: SignInRequest,
    access_token: str | None = Depends(get_access_token),
    auth_client: AuthClient = Depends(get_auth_client),
    persistence: ShoppingPersistence = Depends(get_persistence),
    profiles: ProfileService = Depends(get_profile_service),
) -> SessionResponse:
    if access_token is not None:
        await _end_session(auth_client, access_token, persistence)
    result = await auth_client.sign_in(payload.email, payload.password)
    response = _session_response(result)
    if result.user is not None:
        await profiles.ensure_user_profile(result.user)
    return response


@router.post(
    "/sign-up",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def sign_up(
    payload: SignUpRequest,
    access_token: str | None = Depends(get_access_token),
    auth_client: AuthClient = Depends(get_auth_client),
    persistence: ShoppingPersistence = Depends(get_persistence),
    profiles: ProfileService = Depends(get_profile_service),
) -> SessionResponse:
    """Register a new account; the session is empty when confirmation is pending."""

    if access_token is not None:
        await _end_session(auth_client, access_token, persistence)
    result = await auth_client.sign_up(payload.email, payload.password, payload.full_name)
    response = _session_response(result)
    if result.user is not None:
        await profiles.ensure_user_profile(result.user, full_name=payload.full_name)
    return response


@router.post("/sign-out", response_model=SessionResponse)
async def sign_out(
    access_token: str | None = Depends(get_access_token),
    auth_client: AuthClient = Depends(get_auth_client),
    persistence: ShoppingPersistence = Depends(get_persistence),
) -> SessionResponse:
    """End the session and drop the client's per-user carts."""

    await _end_session(auth_client, access_token, persistence)
    return SessionResponse()
