"""Default rows inserted by ``scripts/init_db.py``."""

from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.db.models import AdminSetting, UserProfile

logger = logging.getLogger(__name__)

# key -> (category, value, description)
DEFAULT_SETTINGS: dict[str, tuple[str, Any, str]] = {
    "site_name": ("general", "HolaCupid", "Public site name"),
    "site_description": (
        "general",
        "Connect with verified singles",
        "Tagline shown on the landing page",
    ),
    "maintenance_mode": ("general", False, "Reject storefront traffic when true"),
    "max_profiles_per_page": ("general", 20, "Catalog page size"),
    "featured_profiles_count": ("general", 6, "Featured profiles on the landing page"),
    "currency": ("payment", "USD", "Charge currency"),
    "processing_fee": ("payment", 2.9, "Processing fee percentage"),
    "tax_rate": ("payment", 0, "Tax percentage applied at checkout"),
    "session_timeout": ("security", 3600, "Session lifetime in seconds"),
    "password_min_length": ("security", 6, "Minimum password length at sign-up"),
}


async def seed_settings(session: AsyncSession) -> list[str]:
    """Insert missing default settings and return the keys that were added."""

    added: list[str] = []
    for key, (category, value, description) in DEFAULT_SETTINGS.items():
        if await session.get(AdminSetting, key) is not None:
            continue
        session.add(
            AdminSetting(
                key=key,
                value=json.dumps(value),
                category=category,
                description=description,
            )
        )
        added.append(key)
    await session.flush()
    logger.info("Seeded %d admin settings", len(added))
    return added


async def grant_role(
    session: AsyncSession, user_id: str, role: str, *, email: str | None = None
) -> UserProfile:
    """Give ``user_id`` the ``role``, creating the user row when ``email`` is known."""

    user = await session.get(UserProfile, user_id)
    if user is None:
        if email is None:
            raise LookupError(f"User {user_id} not found; pass an email to create it")
        user = UserProfile(id=user_id, email=email, role=role)
        session.add(user)
    else:
        user.role = role
    await session.flush()
    return user
