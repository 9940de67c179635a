"""Admin back-office: moderation, user roles, orders, settings and activity.

Every operation is gated by :func:`require_admin`, which checks the caller's
``user_profiles.role`` against the configured admin roles. Mutations write an
``admin_activity_log`` row; failures to record activity are logged and never
abort the mutation itself.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any

from fastapi import Depends
from sqlalchemy import distinct, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.db.connection import get_db
from storefront.db.models import (
    PROFILE_STATUSES,
    AdminActivity,
    AdminSetting,
    Order,
    Profile,
    UserProfile,
)
from storefront.schemas.admin import (
    AdminActivity as AdminActivitySchema,
)
from storefront.schemas.admin import (
    AdminActivityList,
    AdminOrderList,
    AdminProfile,
    AdminProfileList,
    AdminStatistics,
    AdminUser,
    AdminUserList,
)
from storefront.schemas.admin import (
    AdminSetting as AdminSettingSchema,
)
from storefront.schemas.auth import UserIdentity
from storefront.schemas.order import Order as OrderSchema
from storefront.services.auth_service import (
    AuthenticationError,
    AuthorizationError,
    get_current_identity,
)
from storefront.settings import get_settings

logger = logging.getLogger(__name__)

ALL_STATUSES = "all"


def page_offset(page: int, limit: int) -> int:
    return (max(page, 1) - 1) * limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit > 0 else 0


def decode_setting_value(raw: str) -> Any:
    """Decode a stored JSON value, returning undecodable strings verbatim."""

    try:
        return json.loads(raw)
    except ValueError:
        return raw


async def require_admin(
    session: AsyncSession,
    identity: UserIdentity | None,
    admin_roles: frozenset[str],
) -> UserProfile:
    if identity is None:
        raise AuthenticationError("Not authenticated")
    user = await session.get(UserProfile, identity.id)
    if user is None or user.role.lower() not in admin_roles:
        raise AuthorizationError("Access denied - admin role required")
    return user


class AdminService:
    def __init__(self, session: AsyncSession, admin: UserProfile) -> None:
        self._session = session
        self.admin = admin

    async def _log_activity(self, action: str, details: dict[str, Any]) -> None:
        try:
            async with self._session.begin_nested():
                self._session.add(
                    AdminActivity(admin_id=self.admin.id, action=action, details=details)
                )
        except SQLAlchemyError:
            logger.warning("Failed to record admin activity %s", action, exc_info=True)

    # Profiles

    async def list_profiles(
        self, *, status: str = ALL_STATUSES, page: int = 1, limit: int = 20
    ) -> AdminProfileList:
        filters = []
        if status and status != ALL_STATUSES:
            filters.append(Profile.status == status)

        total = await self._session.scalar(
            select(func.count()).select_from(Profile).where(*filters)
        ) or 0
        result = await self._session.execute(
            select(Profile)
            .options(selectinload(Profile.images))
            .where(*filters)
            .order_by(Profile.created_at.desc(), Profile.id.desc())
            .limit(limit)
            .offset(page_offset(page, limit))
        )
        return AdminProfileList(
            profiles=[AdminProfile.model_validate(p) for p in result.scalars().all()],
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages(total, limit),
        )

    async def _load_profile(self, profile_id: int) -> Profile:
        result = await self._session.execute(
            select(Profile)
            .options(selectinload(Profile.images))
            .where(Profile.id == profile_id)
        )
        profile = result.scalar_one_or_none()
        if profile is None:
            raise LookupError(f"Profile {profile_id} not found")
        return profile

    async def get_profile(self, profile_id: int) -> AdminProfile:
        return AdminProfile.model_validate(await self._load_profile(profile_id))

    async def update_profile_status(
        self, profile_id: int, status: str, admin_notes: str | None = None
    ) -> AdminProfile:
        if status not in PROFILE_STATUSES:
            raise ValueError(f"Unknown profile status: {status}")
        profile = await self._load_profile(profile_id)
        previous = profile.status
        profile.status = status
        if admin_notes is not None:
            profile.admin_notes = admin_notes
        await self._session.flush()

        await self._log_activity(
            f"profile_{status}",
            {
                "profile_id": profile.id,
                "profile_name": profile.name,
                "previous_status": previous,
                "admin_notes": admin_notes,
            },
        )
        logger.info("Profile %s moved %s -> %s by %s", profile.id, previous, status, self.admin.id)
        return AdminProfile.model_validate(profile)

    # Users

    async def list_users(
        self, *, search: str | None = None, page: int = 1, limit: int = 20
    ) -> AdminUserList:
        filters = []
        if search:
            pattern = f"%{search.strip()}%"
            filters.append(
                or_(UserProfile.email.ilike(pattern), UserProfile.full_name.ilike(pattern))
            )
        total = await self._session.scalar(
            select(func.count()).select_from(UserProfile).where(*filters)
        ) or 0
        result = await self._session.scalars(
            select(UserProfile)
            .where(*filters)
            .order_by(UserProfile.created_at.desc())
            .limit(limit)
            .offset(page_offset(page, limit))
        )
        return AdminUserList(
            users=[AdminUser.model_validate(user) for user in result.all()],
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages(total, limit),
        )

    async def update_user_role(self, user_id: str, role: str) -> AdminUser:
        user = await self._session.get(UserProfile, user_id)
        if user is None:
            raise LookupError(f"User {user_id} not found")
        previous = user.role
        user.role = role
        await self._session.flush()
        await self._log_activity(
            "user_role_updated",
            {"user_id": user_id, "previous_role": previous, "role": role},
        )
        return AdminUser.model_validate(user)

    # Orders

    async def list_orders(
        self,
        *,
        status: str = ALL_STATUSES,
        search: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> AdminOrderList:
        filters = []
        if status and status != ALL_STATUSES:
            filters.append(Order.status == status)
        if search:
            pattern = f"%{search.strip()}%"
            filters.append(
                or_(Order.billing_email.ilike(pattern), Order.billing_name.ilike(pattern))
            )
        total = await self._session.scalar(
            select(func.count()).select_from(Order).where(*filters)
        ) or 0
        result = await self._session.execute(
            select(Order)
            .options(selectinload(Order.items))
            .where(*filters)
            .order_by(Order.created_at.desc())
            .limit(limit)
            .offset(page_offset(page, limit))
        )
        return AdminOrderList(
            orders=[OrderSchema.model_validate(order) for order in result.scalars().all()],
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages(total, limit),
        )

    async def update_order_status(self, order_id: str, status: str) -> OrderSchema:
        result = await self._session.execute(
            select(Order).options(selectinload(Order.items)).where(Order.id == order_id)
        )
        order = result.scalar_one_or_none()
        if order is None:
            raise LookupError(f"Order {order_id} not found")
        previous = order.status
        order.status = status
        await self._session.flush()
        await self._log_activity(
            f"order_{status}",
            {"order_id": order_id, "previous_status": previous},
        )
        return OrderSchema.model_validate(order)

    # Settings

    async def list_settings(self) -> list[AdminSettingSchema]:
        result = await self._session.scalars(
            select(AdminSetting).order_by(AdminSetting.category, AdminSetting.key)
        )
        return [
            AdminSettingSchema(
                key=setting.key,
                value=decode_setting_value(setting.value),
                category=setting.category,
                description=setting.description,
                updated_at=setting.updated_at,
            )
            for setting in result.all()
        ]

    async def update_setting(self, key: str, value: Any) -> AdminSettingSchema:
        setting = await self._session.get(AdminSetting, key)
        if setting is None:
            raise LookupError(f"Setting '{key}' not found")
        setting.value = json.dumps(value)
        await self._session.flush()
        await self._log_activity("setting_updated", {"key": key, "value": value})
        return AdminSettingSchema(
            key=setting.key,
            value=value,
            category=setting.category,
            description=setting.description,
            updated_at=setting.updated_at,
        )

    # Reporting

    async def list_activity(self, *, page: int = 1, limit: int = 50) -> AdminActivityList:
        total = await self._session.scalar(
            select(func.count()).select_from(AdminActivity)
        ) or 0
        result = await self._session.scalars(
            select(AdminActivity)
            .order_by(AdminActivity.timestamp.desc(), AdminActivity.id.desc())
            .limit(limit)
            .offset(page_offset(page, limit))
        )
        return AdminActivityList(
            activities=[AdminActivitySchema.model_validate(row) for row in result.all()],
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages(total, limit),
        )

    async def statistics(self) -> AdminStatistics:
        rows = await self._session.execute(
            select(Profile.status, func.count()).group_by(Profile.status)
        )
        by_status = {status: 0 for status in PROFILE_STATUSES}
        for status, count in rows.all():
            by_status[status] = count

        total_users = await self._session.scalar(
            select(func.count()).select_from(UserProfile)
        ) or 0
        purchasers = await self._session.scalar(
            select(func.count(distinct(Order.user_id))).where(Order.status == "completed")
        ) or 0
        recent = await self.list_activity(page=1, limit=10)
        return AdminStatistics(
            profiles_by_status=by_status,
            total_profiles=sum(by_status.values()),
            total_users=total_users,
            users_with_purchases=purchasers,
            recent_activity=recent.activities,
        )


async def get_admin_service(
    session: AsyncSession = Depends(get_db),
    identity: UserIdentity | None = Depends(get_current_identity),
) -> AdminService:
    """FastAPI dependency gating admin routes behind the admin role check."""

    admin = await require_admin(session, identity, get_settings().admin_role_set)
    return AdminService(session, admin)


__all__ = [
    "ALL_STATUSES",
    "AdminService",
    "decode_setting_value",
    "get_admin_service",
    "page_offset",
    "require_admin",
    "total_pages",
]
