"""Shared storefront fixtures: SQLite sessions, a fake auth provider, an API client."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from decimal import Decimal
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from storefront.db.models import Base, Profile, ProfileImage, UserProfile
from storefront.schemas.auth import AuthResult, UserIdentity

ALICE = UserIdentity(id="user-alice", email="alice@example.com")
BOB = UserIdentity(id="user-bob", email="bob@example.com")
ADMIN = UserIdentity(id="user-admin", email="admin@example.com")


class FakeAuthClient:
    """In-memory stand-in for the hosted authentication provider."""

    def __init__(self) -> None:
        self.tokens: dict[str, UserIdentity] = {}
        self.passwords: dict[str, tuple[str, UserIdentity]] = {}
        self.signed_out: list[str] = []

    def register(self, identity: UserIdentity, password: str = "secret-pass") -> str:
        token = f"token-{identity.id}"
        self.tokens[token] = identity
        if identity.email:
            self.passwords[identity.email] = (password, identity)
        return token

    async def get_user(self, access_token: str) -> UserIdentity | None:
        return self.tokens.get(access_token)

    async def sign_in(self, email: str, password: str) -> AuthResult:
        entry = self.passwords.get(email)
        if entry is None or entry[0] != password:
            return AuthResult(error="Invalid login credentials")
        identity = entry[1]
        return AuthResult(
            user=identity,
            access_token=f"token-{identity.id}",
            refresh_token="refresh",
        )

    async def sign_up(self, email: str, password: str, full_name: str) -> AuthResult:
        if email in self.passwords:
            return AuthResult(error="User already registered")
        identity = UserIdentity(id=f"user-{email.split('@')[0]}", email=email)
        token = self.register(identity, password)
        return AuthResult(user=identity, access_token=token, refresh_token="refresh")

    async def sign_out(self, access_token: str) -> None:
        self.signed_out.append(access_token)


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """In-memory SQLite engine shared by every session opened in a test."""

    pytest.importorskip("aiosqlite")
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    async with session_factory() as db_session:
        yield db_session
        if db_session.in_transaction():
            await db_session.rollback()


@pytest.fixture
def make_profile() -> Callable[..., Profile]:
    """Build catalog rows with sensible defaults."""

    counter = {"value": 0}

    def _make(**overrides: Any) -> Profile:
        counter["value"] += 1
        index = counter["value"]
        values: dict[str, Any] = {
            "name": f"Profile {index}",
            "age": 25,
            "location": "Santo Domingo, DO",
            "price": Decimal("2.00"),
            "status": "approved",
            "slug": f"profile{index}-single-dominican",
            "contact_email": f"profile{index}@example.com",
            "contact_whatsapp": f"+1809555000{index}",
        }
        values.update(overrides)
        images = values.pop("images", [])
        profile = Profile(**values)
        profile.images = [
            ProfileImage(image_url=url, is_primary=position == 0, display_order=position)
            for position, url in enumerate(images)
        ]
        return profile

    return _make


@pytest_asyncio.fixture
async def admin_user(session: AsyncSession) -> UserProfile:
    user = UserProfile(id=ADMIN.id, email=ADMIN.email, full_name="Ada Admin", role="admin")
    session.add(user)
    await session.flush()
    return user


@pytest.fixture
def auth_client() -> FakeAuthClient:
    client = FakeAuthClient()
    client.register(ALICE)
    client.register(BOB)
    client.register(ADMIN)
    return client


@pytest.fixture
def bearer() -> Callable[[UserIdentity], dict[str, str]]:
    def _headers(identity: UserIdentity, client_id: str = "device-1") -> dict[str, str]:
        return {
            "Authorization": f"Bearer token-{identity.id}",
            "X-Client-Id": client_id,
        }

    return _headers
