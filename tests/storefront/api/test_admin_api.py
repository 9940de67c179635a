"""Admin routes: role gate, moderation and settings over HTTP."""

from __future__ import annotations

import pytest
import pytest_asyncio

from storefront.db.models import AdminSetting, UserProfile
from tests.storefront.conftest import ADMIN, ALICE


@pytest_asyncio.fixture
async def admin_headers(seed, bearer) -> dict[str, str]:
    await seed(UserProfile(id=ADMIN.id, email=ADMIN.email, role="admin"))
    return bearer(ADMIN)


@pytest.mark.asyncio
async def test_admin_routes_reject_guests_and_regular_users(client, seed, bearer) -> None:
    await seed(UserProfile(id=ALICE.id, email=ALICE.email, role="user"))

    guest = await client.get("/admin/statistics")
    regular = await client.get("/admin/statistics", headers=bearer(ALICE))

    assert guest.status_code == 401
    assert regular.status_code == 403
    body = regular.json()
    assert body["error_type"] == "authorization_error"
    assert body["message"] == "Access denied - admin role required"


@pytest.mark.asyncio
async def test_moderation_publishes_profile(
    client, seed, make_profile, admin_headers
) -> None:
    (profile,) = await seed(make_profile(status="pending", slug="rosa-single-dominican"))

    queue = await client.get(
        "/admin/profiles", params={"status": "pending"}, headers=admin_headers
    )
    approved = await client.patch(
        f"/admin/profiles/{profile.id}/status",
        json={"status": "approved", "admin_notes": "ok"},
        headers=admin_headers,
    )

    assert queue.json()["total"] == 1
    assert queue.json()["profiles"][0]["contact_info"]["email"] == profile.contact_email
    assert approved.status_code == 200
    assert approved.json()["status"] == "approved"
    assert (await client.get("/profiles/rosa-single-dominican")).status_code == 200
    activity = await client.get("/admin/activity", headers=admin_headers)
    assert [row["action"] for row in activity.json()["activities"]] == ["profile_approved"]


@pytest.mark.asyncio
async def test_invalid_status_and_missing_profile(client, admin_headers) -> None:
    invalid = await client.patch(
        "/admin/profiles/1/status", json={"status": "deleted"}, headers=admin_headers
    )
    missing = await client.get("/admin/profiles/9999", headers=admin_headers)

    assert invalid.status_code == 422
    assert missing.status_code == 404
    assert missing.json()["error_type"] == "not_found"


@pytest.mark.asyncio
async def test_settings_update(client, seed, admin_headers) -> None:
    await seed(AdminSetting(key="max_profiles_per_page", value="20", category="general"))

    updated = await client.put(
        "/admin/settings/max_profiles_per_page", json={"value": 30}, headers=admin_headers
    )
    listed = await client.get("/admin/settings", headers=admin_headers)
    unknown = await client.put(
        "/admin/settings/nope", json={"value": 1}, headers=admin_headers
    )

    assert updated.status_code == 200
    assert updated.json()["value"] == 30
    assert listed.json()[0]["value"] == 30
    assert unknown.status_code == 404


@pytest.mark.asyncio
async def test_statistics_and_user_roles(client, seed, admin_headers) -> None:
    await seed(UserProfile(id=ALICE.id, email=ALICE.email, role="user"))

    promoted = await client.patch(
        f"/admin/users/{ALICE.id}/role", json={"role": "admin"}, headers=admin_headers
    )
    stats = await client.get("/admin/statistics", headers=admin_headers)

    assert promoted.json()["role"] == "admin"
    body = stats.json()
    assert body["total_users"] == 2
    assert body["recent_activity"][0]["action"] == "user_role_updated"
