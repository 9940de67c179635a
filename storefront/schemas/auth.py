"""Schemas describing identities handed out by the authentication provider."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UserIdentity(BaseModel):
    """Opaque user identity owned by the authentication collaborator."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Provider-issued user id")
    email: str | None = Field(None, description="Email address on file")


class SignInRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1)


class SignUpRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1, max_length=255)


class AuthResult(BaseModel):
    """Outcome of a sign-in or sign-up attempt.

    Rejected credentials are reported through ``error`` rather than raised so
    callers can surface the provider's message directly.
    """

    user: UserIdentity | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class SessionResponse(BaseModel):
    user: UserIdentity | None = None
    access_token: str | None = None
    refresh_token: str | None = None


__all__ = [
    "AuthResult",
    "SessionResponse",
    "SignInRequest",
    "SignUpRequest",
    "UserIdentity",
]
