"""Admin back-office endpoints; every route requires an admin role."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.schemas.admin import (
    AdminActivityList,
    AdminOrderList,
    AdminProfile,
    AdminProfileList,
    AdminSetting,
    AdminStatistics,
    AdminUser,
    AdminUserList,
    OrderStatusUpdate,
    ProfileStatusUpdate,
    SettingUpdate,
    UserRoleUpdate,
)
from storefront.schemas.order import Order
from storefront.services.admin_service import (
    ALL_STATUSES,
    AdminService,
    get_admin_service,
)

router = APIRouter()


@router.get("/profiles", response_model=AdminProfileList)
async def list_profiles(
    status: str = Query(ALL_STATUSES, description="Moderation status or 'all'"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: AdminService = Depends(get_admin_service),
) -> AdminProfileList:
    return await service.list_profiles(status=status, page=page, limit=limit)


@router.get("/profiles/{profile_id}", response_model=AdminProfile)
async def get_profile(
    profile_id: int,
    service: AdminService = Depends(get_admin_service),
) -> AdminProfile:
    return await service.get_profile(profile_id)


@router.patch("/profiles/{profile_id}/status", response_model=AdminProfile)
async def update_profile_status(
    profile_id: int,
    payload: ProfileStatusUpdate,
    service: AdminService = Depends(get_admin_service),
) -> AdminProfile:
    """Approve, reject or suspend a profile and record the decision."""

    try:
        return await service.update_profile_status(
            profile_id, payload.status, payload.admin_notes
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/users", response_model=AdminUserList)
async def list_users(
    search: str | None = Query(None, max_length=100, description="Email or name"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: AdminService = Depends(get_admin_service),
) -> AdminUserList:
    return await service.list_users(search=search, page=page, limit=limit)


@router.patch("/users/{user_id}/role", response_model=AdminUser)
async def update_user_role(
    user_id: str,
    payload: UserRoleUpdate,
    service: AdminService = Depends(get_admin_service),
) -> AdminUser:
    return await service.update_user_role(user_id, payload.role)


@router.get("/orders", response_model=AdminOrderList)
async def list_orders(
    status: str = Query(ALL_STATUSES),
    search: str | None = Query(None, max_length=100, description="Billing email or name"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    service: AdminService = Depends(get_admin_service),
) -> AdminOrderList:
    return await service.list_orders(
        status=status, search=search, page=page, limit=limit
    )


@router.patch("/orders/{order_id}/status", response_model=Order)
async def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    service: AdminService = Depends(get_admin_service),
) -> Order:
    return await service.update_order_status(order_id, payload.status)


@router.get("/settings", response_model=list[AdminSetting])
async def list_settings(
    service: AdminService = Depends(get_admin_service),
) -> list[AdminSetting]:
    return await service.list_settings()


@router.put("/settings/{key}", response_model=AdminSetting)
async def update_setting(
    key: str,
    payload: SettingUpdate,
    service: AdminService = Depends(get_admin_service),
) -> AdminSetting:
    return await service.update_setting(key, payload.value)


@router.get("/statistics", response_model=AdminStatistics)
async def get_statistics(
    service: AdminService = Depends(get_admin_service),
) -> AdminStatistics:
    """Dashboard counters plus the ten most recent admin actions."""

    return await service.statistics()


@router.get("/activity", response_model=AdminActivityList)
async def list_activity(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    service: AdminService = Depends(get_admin_service),
) -> AdminActivityList:
    return await service.list_activity(page=page, limit=limit)
