"""Back-office operations: role gate, moderation, settings and reporting."""

from __future__ import annotations

import json
from decimal import Decimal

import pytest
from sqlalchemy import select

from storefront.db.models import AdminActivity, AdminSetting, Order, UserProfile
from storefront.services.admin_service import (
    AdminService,
    decode_setting_value,
    page_offset,
    require_admin,
    total_pages,
)
from storefront.services.auth_service import AuthenticationError, AuthorizationError
from tests.storefront.conftest import ADMIN, ALICE

ADMIN_ROLES = frozenset({"admin", "super_admin"})


def _order(user_id: str, status: str, **values) -> Order:
    return Order(
        user_id=user_id,
        total_amount=Decimal("2.00"),
        processing_fee=Decimal("0.00"),
        status=status,
        **values,
    )


@pytest.mark.parametrize(
    ("page", "limit", "expected"),
    [(1, 20, 0), (3, 20, 40), (0, 10, 0)],
)
def test_page_offset(page: int, limit: int, expected: int) -> None:
    assert page_offset(page, limit) == expected


def test_total_pages_rounds_up() -> None:
    assert total_pages(41, 20) == 3
    assert total_pages(0, 20) == 0


def test_decode_setting_value_falls_back_to_raw_string() -> None:
    assert decode_setting_value("20") == 20
    assert decode_setting_value('{"a": 1}') == {"a": 1}
    assert decode_setting_value("HolaCupid") == "HolaCupid"


@pytest.mark.asyncio
async def test_require_admin_checks_identity_and_role(session, admin_user) -> None:
    session.add(UserProfile(id=ALICE.id, email=ALICE.email, role="user"))
    await session.flush()

    with pytest.raises(AuthenticationError):
        await require_admin(session, None, ADMIN_ROLES)
    with pytest.raises(AuthorizationError):
        await require_admin(session, ALICE, ADMIN_ROLES)
    assert (await require_admin(session, ADMIN, ADMIN_ROLES)) is admin_user


@pytest.mark.asyncio
async def test_update_profile_status_records_activity(
    session, admin_user, make_profile
) -> None:
    profile = make_profile(status="pending")
    session.add(profile)
    await session.flush()
    service = AdminService(session, admin_user)

    updated = await service.update_profile_status(
        profile.id, "approved", admin_notes="Photos verified"
    )

    assert updated.status == "approved"
    assert updated.admin_notes == "Photos verified"
    assert updated.contact_info["email"] == profile.contact_email
    activity = (await session.scalars(select(AdminActivity))).all()
    assert [row.action for row in activity] == ["profile_approved"]
    assert activity[0].admin_id == ADMIN.id
    assert activity[0].details["previous_status"] == "pending"


@pytest.mark.asyncio
async def test_update_profile_status_rejects_unknown_status(
    session, admin_user, make_profile
) -> None:
    profile = make_profile()
    session.add(profile)
    await session.flush()

    with pytest.raises(ValueError):
        await AdminService(session, admin_user).update_profile_status(profile.id, "deleted")
    with pytest.raises(LookupError):
        await AdminService(session, admin_user).get_profile(9999)


@pytest.mark.asyncio
async def test_list_profiles_filters_by_status_and_paginates(
    session, admin_user, make_profile
) -> None:
    session.add_all([make_profile(status="pending") for _ in range(5)])
    session.add(make_profile(status="approved"))
    await session.flush()
    service = AdminService(session, admin_user)

    pending = await service.list_profiles(status="pending", page=2, limit=2)
    everything = await service.list_profiles()

    assert pending.total == 5
    assert pending.total_pages == 3
    assert len(pending.profiles) == 2
    assert {profile.status for profile in pending.profiles} == {"pending"}
    assert everything.total == 6


@pytest.mark.asyncio
async def test_user_search_and_role_update(session, admin_user) -> None:
    session.add(UserProfile(id=ALICE.id, email=ALICE.email, full_name="Alice", role="user"))
    await session.flush()
    service = AdminService(session, admin_user)

    found = await service.list_users(search="alice")
    promoted = await service.update_user_role(ALICE.id, "admin")

    assert [user.id for user in found.users] == [ALICE.id]
    assert promoted.role == "admin"
    with pytest.raises(LookupError):
        await service.update_user_role("nobody", "admin")


@pytest.mark.asyncio
async def test_settings_round_trip_and_unknown_key(session, admin_user) -> None:
    session.add_all(
        [
            AdminSetting(key="max_profiles_per_page", value="20", category="general"),
            AdminSetting(key="site_name", value="HolaCupid", category="general"),
            AdminSetting(key="currency", value='"USD"', category="payment"),
        ]
    )
    await session.flush()
    service = AdminService(session, admin_user)

    listed = await service.list_settings()
    assert [(setting.key, setting.value) for setting in listed] == [
        ("max_profiles_per_page", 20),
        ("site_name", "HolaCupid"),
        ("currency", "USD"),
    ]

    updated = await service.update_setting("max_profiles_per_page", 30)
    stored = await session.get(AdminSetting, "max_profiles_per_page")
    assert updated.value == 30
    assert json.loads(stored.value) == 30
    with pytest.raises(LookupError):
        await service.update_setting("missing_key", 1)


@pytest.mark.asyncio
async def test_order_status_update_and_search(session, admin_user) -> None:
    session.add(
        _order(
            ALICE.id,
            "pending",
            id="order-1",
            billing_email="alice@example.com",
            billing_name="Alice",
        )
    )
    await session.flush()
    service = AdminService(session, admin_user)

    found = await service.list_orders(search="alice")
    refunded = await service.update_order_status("order-1", "refunded")

    assert found.total == 1
    assert refunded.status == "refunded"
    actions = (await session.scalars(select(AdminActivity.action))).all()
    assert actions == ["order_refunded"]


@pytest.mark.asyncio
async def test_statistics_summarise_catalog_and_purchasers(
    session, admin_user, make_profile
) -> None:
    session.add_all(
        [
            make_profile(status="approved"),
            make_profile(status="approved"),
            make_profile(status="pending"),
            UserProfile(id=ALICE.id, email=ALICE.email, role="user"),
            _order(ALICE.id, "completed"),
            _order(ALICE.id, "completed"),
            _order("user-other", "pending"),
        ]
    )
    await session.flush()

    stats = await AdminService(session, admin_user).statistics()

    assert stats.profiles_by_status == {
        "pending": 1,
        "approved": 2,
        "rejected": 0,
        "suspended": 0,
    }
    assert stats.total_profiles == 3
    assert stats.total_users == 2
    assert stats.users_with_purchases == 1
    assert stats.recent_activity == []
