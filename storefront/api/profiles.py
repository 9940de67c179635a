"""Public catalog and profile submission endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from storefront.schemas.auth import UserIdentity
from storefront.schemas.profile import (
    ProfileDetail,
    ProfileListResponse,
    ProfileSubmission,
    ProfileSubmissionResponse,
)
from storefront.services.auth_service import require_identity
from storefront.services.profile_service import ProfileService, get_profile_service

router = APIRouter()


@router.get("", response_model=ProfileListResponse)
async def list_profiles(
    search: str | None = Query(None, max_length=100, description="Name, location or description"),
    location: str | None = Query(None, max_length=100),
    min_age: int | None = Query(None, ge=18, le=99),
    max_age: int | None = Query(None, ge=18, le=99),
    verified: bool | None = Query(None),
    featured: bool | None = Query(None),
    limit: int = Query(20, ge=1, le=100, description="Number of profiles to return"),
    offset: int = Query(0, ge=0, description="Number of profiles to skip"),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileListResponse:
    """List approved profiles, featured first."""

    return await service.list_profiles(
        search=search,
        location=location,
        min_age=min_age,
        max_age=max_age,
        verified=verified,
        featured=featured,
        limit=limit,
        offset=offset,
    )


@router.post(
    "/submit",
    response_model=ProfileSubmissionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_profile(
    payload: ProfileSubmission,
    identity: UserIdentity = Depends(require_identity),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileSubmissionResponse:
    """Queue a new profile for moderation."""

    return await service.submit_profile(payload, identity)


@router.get("/{identifier}", response_model=ProfileDetail)
async def get_profile(
    identifier: str,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetail:
    """Fetch an approved profile by numeric id or slug."""

    profile = await service.get_profile(identifier)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile
