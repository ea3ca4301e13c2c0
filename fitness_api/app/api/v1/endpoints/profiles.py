"""
Profile endpoints for API v1.

All routes act on the authenticated user's own profile (``/me``) or
search other members' profiles.  ``/stats`` additionally requires the
``view:analytics`` permission.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ....core.security import get_current_user, require_permissions
from ....schemas.profile import (
    AgeRange,
    FitnessGoal,
    FitnessLevel,
    LocationFilter,
    ProfileCompletion,
    ProfileCreate,
    ProfileRead,
    ProfileSearchFilters,
    ProfileSearchResult,
    ProfileStats,
    ProfileUpdate,
)
from ....schemas.user import UserPermission
from ....services.profile_service import DEFAULT_NEARBY_DISTANCE, ProfileService

router = APIRouter()


@router.post("/", response_model=ProfileRead, status_code=status.HTTP_201_CREATED)
def create_profile(data: ProfileCreate, current_user: dict = Depends(get_current_user)) -> ProfileRead:
    """Create the caller's profile.  A user can only have one."""
    return ProfileService.create_profile(current_user["user_id"], data)


@router.get("/me", response_model=ProfileRead)
def get_my_profile(current_user: dict = Depends(get_current_user)) -> ProfileRead:
    return ProfileService.get_profile(current_user["user_id"])


@router.put("/me", response_model=ProfileRead)
def update_my_profile(data: ProfileUpdate, current_user: dict = Depends(get_current_user)) -> ProfileRead:
    """Update the caller's profile.

    Nested objects such as ``address`` are replaced as a whole; the
    completion percentage is recalculated.
    """
    return ProfileService.update_profile(current_user["user_id"], data)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def delete_my_profile(current_user: dict = Depends(get_current_user)) -> None:
    ProfileService.delete_profile(current_user["user_id"])
    return None


@router.get("/nearby", response_model=List[ProfileRead])
def nearby_profiles(
    longitude: float = Query(..., ge=-180, le=180),
    latitude: float = Query(..., ge=-90, le=90),
    max_distance: float = Query(DEFAULT_NEARBY_DISTANCE, gt=0, description="Radius in meters"),
    current_user: dict = Depends(get_current_user),
) -> List[ProfileRead]:
    """Profiles of other members within ``max_distance`` metres of a point."""
    return ProfileService.find_nearby_profiles(current_user["user_id"], longitude, latitude, max_distance)


@router.get("/search", response_model=ProfileSearchResult)
def search_profiles(
    fitness_level: Optional[FitnessLevel] = Query(None),
    fitness_goals: Optional[List[FitnessGoal]] = Query(None),
    min_age: Optional[int] = Query(None, ge=0),
    max_age: Optional[int] = Query(None, ge=0),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    max_distance: float = Query(DEFAULT_NEARBY_DISTANCE, gt=0),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user),
) -> ProfileSearchResult:
    """Search other members' profiles.

    Every supplied filter must match.  ``fitness_goals`` may be repeated
    and matches profiles sharing any of the goals.  A location filter
    needs both ``longitude`` and ``latitude``.
    """
    if (longitude is None) != (latitude is None):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="longitude and latitude must be provided together",
        )
    filters = ProfileSearchFilters(
        fitness_level=fitness_level,
        fitness_goals=fitness_goals,
        age_range=AgeRange(min=min_age, max=max_age) if min_age is not None or max_age is not None else None,
        location=(
            LocationFilter(longitude=longitude, latitude=latitude, max_distance=max_distance)
            if longitude is not None
            else None
        ),
    )
    return ProfileService.search_profiles(current_user["user_id"], page=page, limit=limit, filters=filters)


@router.get("/completion", response_model=ProfileCompletion)
def profile_completion(current_user: dict = Depends(get_current_user)) -> ProfileCompletion:
    """Completion percentage of the caller's profile and the fields still missing."""
    return ProfileService.get_profile_completion_status(current_user["user_id"])


@router.get("/stats", response_model=ProfileStats)
def profile_stats(
    current_user: dict = Depends(require_permissions(UserPermission.VIEW_ANALYTICS)),
) -> ProfileStats:
    return ProfileService.get_profile_stats()
