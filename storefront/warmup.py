"""Startup warmup so the first request does not pay for cold connections."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)


async def warmup_database(
    resolve_engine: Callable[[], AsyncEngine] | None = None,
) -> None:
    """Open a pooled connection and issue ``SELECT 1``."""

    try:
        if resolve_engine is None:
            from storefront.db.connection import get_engine as resolve_engine

        start = time.time()
        engine = resolve_engine()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

        elapsed = (time.time() - start) * 1000
        logger.info("Database connection warmed up (%.0fms)", elapsed)
    except Exception as e:
        logger.warning(f"Database warmup failed: {e}")


async def warmup_redis() -> None:
    """Connect to Redis; an outage only means the memory fallback is used."""

    from storefront.storage import get_redis

    start = time.time()
    redis = await asyncio.to_thread(get_redis)
    if redis is None:
        logger.info("Redis warmup skipped (connection unavailable)")
        return
    elapsed = (time.time() - start) * 1000
    logger.info("Redis connection warmed up (%.0fms)", elapsed)


async def warmup_all(
    resolve_engine: Callable[[], AsyncEngine] | None = None,
) -> None:
    start = time.time()
    await warmup_database(resolve_engine=resolve_engine)
    await warmup_redis()
    total_elapsed = (time.time() - start) * 1000
    logger.info(f"Storefront warmup complete ({total_elapsed:.0f}ms)")
