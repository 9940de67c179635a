"""HTTP client fixture wired to the FastAPI app with test doubles."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.db.connection import get_db
from storefront.main import app
from storefront.services.auth_service import get_auth_client


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    auth_client,
) -> AsyncIterator[AsyncClient]:
    async def _get_db() -> AsyncIterator[AsyncSession]:
        async with session_factory() as db_session:
            try:
                yield db_session
                await db_session.commit()
            except Exception:
                await db_session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_auth_client] = lambda: auth_client
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def seed(session_factory: async_sessionmaker[AsyncSession]):
    """Persist rows in their own committed transaction."""

    async def _seed(*rows) -> list:
        async with session_factory() as db_session:
            db_session.add_all(rows)
            await db_session.commit()
        return list(rows)

    return _seed
