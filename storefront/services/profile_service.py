"""Catalog reads and profile submissions.

Only ``approved`` profiles are visible through the catalog, and catalog reads
never expose contact details; those are delivered by completed orders.
"""

from __future__ import annotations

import logging

from fastapi import Depends
from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.db.connection import get_db
from storefront.db.models import Profile, ProfileImage, UserProfile
from storefront.schemas.auth import UserIdentity
from storefront.schemas.profile import (
    ProfileDetail,
    ProfileListResponse,
    ProfileSubmission,
    ProfileSubmissionResponse,
    ProfileSummary,
)
from storefront.services.auth_service import AuthenticationError
from storefront.utils.slugs import (
    ensure_unique_slug,
    generate_profile_slug,
    parse_profile_identifier,
)

logger = logging.getLogger(__name__)

APPROVED = "approved"


def _catalog_query() -> Select[tuple[Profile]]:
    return (
        select(Profile)
        .options(selectinload(Profile.images))
        .where(Profile.status == APPROVED)
    )


class ProfileService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_profiles(
        self,
        *,
        search: str | None = None,
        location: str | None = None,
        min_age: int | None = None,
        max_age: int | None = None,
        verified: bool | None = None,
        featured: bool | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> ProfileListResponse:
        """Return approved profiles, featured first and then newest."""

        filters = [Profile.status == APPROVED]
        if search:
            pattern = f"%{search.strip()}%"
            filters.append(
                or_(
                    Profile.name.ilike(pattern),
                    Profile.location.ilike(pattern),
                    Profile.description.ilike(pattern),
                )
            )
        if location:
            filters.append(Profile.location.ilike(f"%{location.strip()}%"))
        if min_age is not None:
            filters.append(Profile.age >= min_age)
        if max_age is not None:
            filters.append(Profile.age <= max_age)
        if verified is not None:
            filters.append(Profile.verified == verified)
        if featured is not None:
            filters.append(Profile.featured == featured)

        total = await self._session.scalar(
            select(func.count()).select_from(Profile).where(*filters)
        )
        result = await self._session.execute(
            select(Profile)
            .options(selectinload(Profile.images))
            .where(*filters)
            .order_by(
                Profile.featured.desc(),
                Profile.created_at.desc(),
                Profile.id.desc(),
            )
            .limit(limit)
            .offset(offset)
        )
        profiles = result.scalars().all()
        total = total or 0
        return ProfileListResponse(
            profiles=[ProfileSummary.model_validate(profile) for profile in profiles],
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + len(profiles) < total,
        )

    async def get_profile(self, identifier: str | int) -> ProfileDetail | None:
        """Look up an approved profile by numeric id or slug."""

        key = parse_profile_identifier(identifier)
        query = _catalog_query()
        if isinstance(key, int):
            query = query.where(Profile.id == key)
        else:
            query = query.where(Profile.slug == key)
        profile = (await self._session.execute(query)).scalar_one_or_none()
        if profile is None:
            return None
        return ProfileDetail.model_validate(profile)

    async def approved_profiles(self, profile_ids: list[int]) -> dict[int, Profile]:
        if not profile_ids:
            return {}
        result = await self._session.execute(
            select(Profile).where(
                Profile.id.in_(profile_ids), Profile.status == APPROVED
            )
        )
        return {profile.id: profile for profile in result.scalars().all()}

    async def ensure_user_profile(
        self, identity: UserIdentity, *, full_name: str | None = None
    ) -> UserProfile:
        """Create the application-side user row for ``identity`` if missing."""

        user = await self._session.get(UserProfile, identity.id)
        if user is None:
            user = UserProfile(
                id=identity.id,
                email=identity.email or "",
                full_name=full_name,
                role="user",
            )
            self._session.add(user)
            await self._session.flush()
            logger.info("Created user profile for %s", identity.id)
        elif full_name and user.full_name != full_name:
            user.full_name = full_name
        return user

    async def submit_profile(
        self, payload: ProfileSubmission, identity: UserIdentity | None
    ) -> ProfileSubmissionResponse:
        """Store a new profile awaiting moderation."""

        if identity is None:
            raise AuthenticationError("Not authenticated")
        await self.ensure_user_profile(identity)

        base_slug = generate_profile_slug(payload.name, payload.location)
        existing = await self._session.scalars(
            select(Profile.slug).where(
                or_(Profile.slug == base_slug, Profile.slug.like(f"{base_slug}-%"))
            )
        )
        slug = ensure_unique_slug(base_slug, set(existing.all()))

        profile = Profile(
            **payload.model_dump(exclude={"image_urls"}),
            slug=slug,
            status="pending",
            created_by=identity.id,
            images=[
                ProfileImage(image_url=url, is_primary=index == 0, display_order=index)
                for index, url in enumerate(payload.image_urls)
            ],
        )
        self._session.add(profile)
        await self._session.flush()
        logger.info("Profile %s submitted by %s as %s", profile.id, identity.id, slug)
        return ProfileSubmissionResponse.model_validate(profile)


async def get_profile_service(
    session: AsyncSession = Depends(get_db),
) -> ProfileService:
    return ProfileService(session)


__all__ = ["ProfileService", "get_profile_service"]
