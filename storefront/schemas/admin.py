"""Schemas for the admin back-office."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from storefront.schemas.order import Order
from storefront.schemas.profile import ProfileDetail

ProfileStatus = Literal["pending", "approved", "rejected", "suspended"]
OrderStatus = Literal["pending", "completed", "failed", "refunded"]
UserRole = Literal["user", "admin", "super_admin"]


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class AdminProfile(ProfileDetail):
    """Full moderation view of a profile, contact details included."""

    status: str
    contact_info: dict[str, str] = Field(default_factory=dict)
    admin_notes: str | None = None
    created_by: str | None = None
    updated_at: datetime | None = None


class AdminProfileList(PageMeta):
    profiles: list[AdminProfile]


class ProfileStatusUpdate(BaseModel):
    status: ProfileStatus
    admin_notes: str | None = Field(None, max_length=5000)


class AdminUser(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: str | None = None
    role: str
    created_at: datetime


class AdminUserList(PageMeta):
    users: list[AdminUser]


class UserRoleUpdate(BaseModel):
    role: UserRole


class AdminOrderList(PageMeta):
    orders: list[Order]


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class AdminSetting(BaseModel):
    key: str
    value: Any = Field(None, description="Decoded JSON value, or the raw string")
    category: str
    description: str | None = None
    updated_at: datetime | None = None


class SettingUpdate(BaseModel):
    value: Any


class AdminActivity(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    admin_id: str
    action: str
    details: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime


class AdminActivityList(PageMeta):
    activities: list[AdminActivity]


class AdminStatistics(BaseModel):
    profiles_by_status: dict[str, int]
    total_profiles: int
    total_users: int
    users_with_purchases: int
    recent_activity: list[AdminActivity]


__all__ = [
    "AdminActivity",
    "AdminActivityList",
    "AdminOrderList",
    "AdminProfile",
    "AdminProfileList",
    "AdminSetting",
    "AdminStatistics",
    "AdminUser",
    "AdminUserList",
    "OrderStatus",
    "OrderStatusUpdate",
    "PageMeta",
    "ProfileStatus",
    "ProfileStatusUpdate",
    "SettingUpdate",
    "UserRole",
    "UserRoleUpdate",
]
