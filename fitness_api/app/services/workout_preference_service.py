"""
Service layer for workout preferences.

Besides CRUD on the single preference document of each user, this
module finds compatible workout partners and produces simple
recommendations.

Partner matching
----------------
Candidates are the other users who list the caller's first preferred
workout type.  When the caller's profile has a location, candidates
are further limited to users whose profiles lie within
``max_distance`` metres.  Each candidate is scored by
``score_partner``:

* 10 points per shared workout type;
* 20 points when the cardio intensities differ by at most
  ``intensity_tolerance``;
* 15 points for at least one shared preferred day (only when
  ``time_overlap`` is requested);
* 5 points per shared equipment item;
* 10 points when both prefer (or both avoid) group workouts.

Only candidates scoring more than ``MIN_MATCH_SCORE`` are returned,
best first.
"""

import logging
from typing import Any, Dict, List, Tuple

from pymongo.errors import DuplicateKeyError

from ..core.exceptions import ConflictError, NotFoundError
from ..repositories.base import serialize_document, to_document, to_object_id
from ..repositories.profile_repository import ProfileRepository
from ..repositories.workout_preference_repository import WorkoutPreferenceRepository
from ..schemas.workout_preference import WorkoutPreferenceCreate, WorkoutPreferenceUpdate, WorkoutType

logger = logging.getLogger(__name__)

MIN_MATCH_SCORE = 20
DEFAULT_PARTNER_DISTANCE = 10000
BALANCED_WORKOUT_TYPES = (WorkoutType.CARDIO.value, WorkoutType.STRENGTH.value, WorkoutType.FLEXIBILITY.value)


def _shared(mine: List[Any], theirs: List[Any]) -> List[Any]:
    return [item for item in mine if item in theirs]


def score_partner(
    preference: Dict[str, Any],
    candidate: Dict[str, Any],
    intensity_tolerance: int = 1,
    time_overlap: bool = True,
) -> Tuple[int, List[str]]:
    """Return the match score of ``candidate`` and the reasons behind it."""
    score = 0
    criteria: List[str] = []

    types = _shared(preference.get("preferred_workout_types") or [], candidate.get("preferred_workout_types") or [])
    if types:
        score += len(types) * 10
        criteria.append(f"{len(types)} matching workout types")

    mine = (preference.get("intensity_preference") or {}).get("cardio_intensity")
    theirs = (candidate.get("intensity_preference") or {}).get("cardio_intensity")
    if mine is not None and theirs is not None and abs(mine - theirs) <= intensity_tolerance:
        score += 20
        criteria.append("Similar intensity preferences")

    if time_overlap:
        days = _shared(
            (preference.get("time_preference") or {}).get("preferred_days") or [],
            (candidate.get("time_preference") or {}).get("preferred_days") or [],
        )
        if days:
            score += 15
            criteria.append("Overlapping schedule")

    equipment = _shared(preference.get("available_equipment") or [], candidate.get("available_equipment") or [])
    if equipment:
        score += len(equipment) * 5
        criteria.append(f"{len(equipment)} matching equipment")

    if bool(preference.get("prefer_group_workouts")) == bool(candidate.get("prefer_group_workouts")):
        score += 10
        criteria.append("Matching group workout preference")

    return score, criteria


def recommend_workouts(preference: Dict[str, Any]) -> Dict[str, List[str]]:
    recommended_workouts: List[str] = []
    recommended_equipment: List[str] = []
    schedule_suggestions: List[str] = []

    types = preference.get("preferred_workout_types") or []
    if len(types) < 3:
        missing = [name for name in BALANCED_WORKOUT_TYPES if name not in types]
        if missing:
            recommended_workouts.append(
                f"Consider adding {', '.join(missing)} to your routine for a more balanced workout"
            )

    if len(preference.get("available_equipment") or []) < 3:
        recommended_equipment.append(
            "Consider investing in basic equipment like resistance bands or dumbbells for more workout variety"
        )

    schedule = preference.get("time_preference") or {}
    if len(schedule.get("preferred_days") or []) < 3:
        schedule_suggestions.append("Try to schedule at least 3 workout days per week for optimal results")
    if (schedule.get("preferred_duration") or 0) < 45:
        schedule_suggestions.append("Consider increasing workout duration to 45-60 minutes for better results")

    return {
        "recommended_workouts": recommended_workouts,
        "recommended_equipment": recommended_equipment,
        "schedule_suggestions": schedule_suggestions,
    }


class WorkoutPreferenceService:
    repository_factory = WorkoutPreferenceRepository
    profile_repository_factory = ProfileRepository

    @classmethod
    def _repository(cls) -> WorkoutPreferenceRepository:
        return cls.repository_factory()

    @classmethod
    def _get_document(cls, user_id: str) -> Dict[str, Any]:
        oid = to_object_id(user_id, "Invalid user ID")
        document = cls._repository().find_by_user_id(oid)
        if document is None:
            raise NotFoundError("Workout preferences not found")
        return document

    @classmethod
    def create_preference(cls, user_id: str, data: WorkoutPreferenceCreate) -> Dict[str, Any]:
        oid = to_object_id(user_id, "Invalid user ID")
        repository = cls._repository()
        if repository.find_by_user_id(oid) is not None:
            raise ConflictError("Workout preferences already exist for this user")
        document = to_document(data)
        document["user_id"] = oid
        try:
            created = repository.create(document)
        except DuplicateKeyError:
            raise ConflictError("Workout preferences already exist for this user")
        logger.info("Created workout preferences for user %s", user_id)
        return serialize_document(created)

    @classmethod
    def get_preference(cls, user_id: str) -> Dict[str, Any]:
        return serialize_document(cls._get_document(user_id))

    @classmethod
    def update_preference(cls, user_id: str, data: WorkoutPreferenceUpdate) -> Dict[str, Any]:
        oid = to_object_id(user_id, "Invalid user ID")
        repository = cls._repository()
        fields = to_document(data, exclude_unset=True, exclude_none=True)
        if fields:
            document = repository.update_by_user_id(oid, fields)
        else:
            document = repository.find_by_user_id(oid)
        if document is None:
            raise NotFoundError("Workout preferences not found")
        logger.info("Updated workout preferences for user %s", user_id)
        return serialize_document(document)

    @classmethod
    def find_matching_workout_partners(
        cls,
        user_id: str,
        max_distance: float = DEFAULT_PARTNER_DISTANCE,
        intensity_tolerance: int = 1,
        time_overlap: bool = True,
    ) -> List[Dict[str, Any]]:
        preference = cls._get_document(user_id)
        oid = preference["user_id"]

        nearby_user_ids = None
        profile = cls.profile_repository_factory().find_by_user_id(oid)
        location = ((profile or {}).get("address") or {}).get("location")
        if location:
            longitude, latitude = location
            nearby_user_ids = cls.profile_repository_factory().find_user_ids_within(longitude, latitude, max_distance)

        candidates = cls._repository().find_by_workout_type(
            preference["preferred_workout_types"][0],
            exclude_user_id=oid,
            user_ids=nearby_user_ids,
        )
        matches = []
        for candidate in candidates:
            if candidate["user_id"] == oid:
                continue
            score, criteria = score_partner(preference, candidate, intensity_tolerance, time_overlap)
            if score > MIN_MATCH_SCORE:
                matches.append({
                    "user_id": str(candidate["user_id"]),
                    "match_score": score,
                    "matching_criteria": criteria,
                })
        matches.sort(key=lambda match: match["match_score"], reverse=True)
        return matches

    @classmethod
    def get_preference_stats(cls) -> Dict[str, Any]:
        return cls._repository().get_preference_stats()

    @classmethod
    def generate_workout_recommendations(cls, user_id: str) -> Dict[str, List[str]]:
        return recommend_workouts(cls._get_document(user_id))
