"""
Workout-preference endpoints for API v1.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, status

from ....core.security import get_current_user, require_permissions
from ....schemas.user import UserPermission
from ....schemas.workout_preference import (
    PartnerMatch,
    PreferenceStats,
    WorkoutPreferenceCreate,
    WorkoutPreferenceRead,
    WorkoutPreferenceUpdate,
    WorkoutRecommendations,
)
from ....services.workout_preference_service import DEFAULT_PARTNER_DISTANCE, WorkoutPreferenceService

router = APIRouter()


@router.post("/", response_model=WorkoutPreferenceRead, status_code=status.HTTP_201_CREATED)
def create_preference(
    data: WorkoutPreferenceCreate,
    current_user: dict = Depends(get_current_user),
) -> WorkoutPreferenceRead:
    return WorkoutPreferenceService.create_preference(current_user["user_id"], data)


@router.get("/", response_model=WorkoutPreferenceRead)
def get_preference(current_user: dict = Depends(get_current_user)) -> WorkoutPreferenceRead:
    return WorkoutPreferenceService.get_preference(current_user["user_id"])


@router.put("/", response_model=WorkoutPreferenceRead)
def update_preference(
    data: WorkoutPreferenceUpdate,
    current_user: dict = Depends(get_current_user),
) -> WorkoutPreferenceRead:
    return WorkoutPreferenceService.update_preference(current_user["user_id"], data)


@router.get("/partners", response_model=List[PartnerMatch])
def workout_partners(
    max_distance: float = Query(DEFAULT_PARTNER_DISTANCE, gt=0, description="Radius in meters"),
    intensity_tolerance: int = Query(1, ge=0, le=4),
    time_overlap: bool = Query(True),
    current_user: dict = Depends(get_current_user),
) -> List[PartnerMatch]:
    """Members with compatible preferences, best match first.

    See ``workout_preference_service`` for the scoring rules.
    """
    return WorkoutPreferenceService.find_matching_workout_partners(
        current_user["user_id"],
        max_distance=max_distance,
        intensity_tolerance=intensity_tolerance,
        time_overlap=time_overlap,
    )


@router.get("/stats", response_model=PreferenceStats)
def preference_stats(
    current_user: dict = Depends(require_permissions(UserPermission.VIEW_ANALYTICS)),
) -> PreferenceStats:
    return WorkoutPreferenceService.get_preference_stats()


@router.get("/recommendations", response_model=WorkoutRecommendations)
def recommendations(current_user: dict = Depends(get_current_user)) -> WorkoutRecommendations:
    return WorkoutPreferenceService.generate_workout_recommendations(current_user["user_id"])
