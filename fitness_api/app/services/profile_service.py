"""
Service layer for member profiles.

A user has at most one profile.  Besides CRUD the service keeps the
stored ``completion_percentage`` current, answers geographic and
attribute searches and reports profile statistics.
"""

import logging
import math
from typing import Any, Dict, List, Optional

from pymongo.errors import DuplicateKeyError

from ..core.exceptions import BadRequestError, NotFoundError
from ..repositories.base import serialize_document, to_document, to_object_id
from ..repositories.profile_repository import ProfileRepository
from ..schemas.profile import COMPLETION_FIELDS, ProfileCreate, ProfileSearchFilters, ProfileUpdate

logger = logging.getLogger(__name__)

DEFAULT_NEARBY_DISTANCE = 5000


def missing_profile_fields(document: Dict[str, Any]) -> List[str]:
    """Completion fields that are unset (``None``) or empty lists."""
    missing = []
    for name in COMPLETION_FIELDS:
        value = document.get(name)
        if value is None or (isinstance(value, list) and not value):
            missing.append(name)
    return missing


def completion_percentage(document: Dict[str, Any]) -> int:
    done = len(COMPLETION_FIELDS) - len(missing_profile_fields(document))
    return int(round(done / len(COMPLETION_FIELDS) * 100))


class ProfileService:
    repository_factory = ProfileRepository

    @classmethod
    def _repository(cls) -> ProfileRepository:
        return cls.repository_factory()

    @classmethod
    def create_profile(cls, user_id: str, data: ProfileCreate) -> Dict[str, Any]:
        oid = to_object_id(user_id, "Invalid user ID")
        repository = cls._repository()
        if repository.find_by_user_id(oid) is not None:
            raise BadRequestError("Profile already exists for this user")
        document = to_document(data)
        document["user_id"] = oid
        document["completion_percentage"] = completion_percentage(document)
        try:
            created = repository.create(document)
        except DuplicateKeyError:
            raise BadRequestError("Profile already exists for this user")
        logger.info("Created profile for user %s", user_id)
        return serialize_document(created)

    @classmethod
    def get_profile(cls, user_id: str) -> Dict[str, Any]:
        oid = to_object_id(user_id, "Invalid user ID")
        document = cls._repository().find_by_user_id(oid)
        if document is None:
            raise NotFoundError("Profile not found")
        return serialize_document(document)

    @classmethod
    def update_profile(cls, user_id: str, data: ProfileUpdate) -> Dict[str, Any]:
        """Update the supplied fields and refresh the completion percentage.

        Nested objects (address, emergency contact, health information)
        are replaced as a whole.
        """
        oid = to_object_id(user_id, "Invalid user ID")
        repository = cls._repository()
        fields = to_document(data, exclude_unset=True, exclude_none=True)
        if fields:
            document = repository.update_by_user_id(oid, fields)
        else:
            document = repository.find_by_user_id(oid)
        if document is None:
            raise NotFoundError("Profile not found")
        percentage = completion_percentage(document)
        if percentage != document.get("completion_percentage"):
            document = repository.set_completion_percentage(oid, percentage) or document
        logger.info("Updated profile for user %s", user_id)
        return serialize_document(document)

    @classmethod
    def delete_profile(cls, user_id: str) -> None:
        oid = to_object_id(user_id, "Invalid user ID")
        if not cls._repository().delete_by_user_id(oid):
            raise NotFoundError("Profile not found")
        logger.info("Deleted profile for user %s", user_id)

    @classmethod
    def find_nearby_profiles(
        cls,
        user_id: str,
        longitude: float,
        latitude: float,
        max_distance: float = DEFAULT_NEARBY_DISTANCE,
    ) -> List[Dict[str, Any]]:
        """Profiles within ``max_distance`` metres of a point, excluding the caller."""
        oid = to_object_id(user_id, "Invalid user ID")
        documents = cls._repository().find_by_location(longitude, latitude, max_distance, exclude_user_id=oid)
        return serialize_document(documents)

    @classmethod
    def find_profiles_by_fitness_level(cls, fitness_level: str) -> List[Dict[str, Any]]:
        return serialize_document(cls._repository().find_by_fitness_level(getattr(fitness_level, "value", fitness_level)))

    @classmethod
    def find_profiles_by_fitness_goals(cls, goals: List[str]) -> List[Dict[str, Any]]:
        return serialize_document(cls._repository().find_by_fitness_goals(getattr(g, "value", g) for g in goals))

    @classmethod
    def search_profiles(
        cls,
        user_id: str,
        page: int = 1,
        limit: int = 10,
        filters: Optional[ProfileSearchFilters] = None,
    ) -> Dict[str, Any]:
        """Search other members' profiles.

        All supplied filters must hold at once; ``fitness_goals``
        matches profiles sharing any of the goals.
        """
        oid = to_object_id(user_id, "Invalid user ID")
        filters = filters or ProfileSearchFilters()
        age_range = filters.age_range
        location = filters.location.model_dump() if filters.location else None
        query = ProfileRepository.build_search_query(
            fitness_level=getattr(filters.fitness_level, "value", filters.fitness_level),
            fitness_goals=[getattr(g, "value", g) for g in filters.fitness_goals or []],
            min_age=age_range.min if age_range else None,
            max_age=age_range.max if age_range else None,
            location=location,
            exclude_user_id=oid,
        )
        result = cls._repository().search(query, page=page, limit=limit)
        return {
            "profiles": serialize_document(result["items"]),
            "total": result["total"],
            "page": result["page"],
            "total_pages": math.ceil(result["total"] / result["limit"]),
        }

    @classmethod
    def get_profile_completion_status(cls, user_id: str) -> Dict[str, Any]:
        profile = cls.get_profile(user_id)
        return {
            "completion_percentage": completion_percentage(profile),
            "missing_fields": missing_profile_fields(profile),
        }

    @classmethod
    def get_profile_stats(cls) -> Dict[str, Any]:
        return cls._repository().get_profile_stats()
