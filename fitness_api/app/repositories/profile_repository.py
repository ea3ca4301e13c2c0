"""
Repository for the ``profiles`` collection.

Profiles are keyed by ``user_id`` (one profile per user).  Geographic
lookups use ``$geoWithin``/``$centerSphere`` on ``address.location``,
which needs the ``2dsphere`` index created in ``ensure_indexes``.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo import ASCENDING, GEOSPHERE

from .base import BaseRepository, PaginatedResult, utcnow

EARTH_RADIUS_METERS = 6371000


def within_radius(longitude: float, latitude: float, max_distance: float) -> Dict[str, Any]:
    """Build a ``$geoWithin`` clause for a circle of ``max_distance`` metres."""
    return {
        "$geoWithin": {
            "$centerSphere": [[longitude, latitude], max_distance / EARTH_RADIUS_METERS],
        }
    }


def years_ago(years: int, now: Optional[datetime] = None) -> datetime:
    now = now or utcnow()
    try:
        return now.replace(year=now.year - years)
    except ValueError:
        # 29 February in a non-leap target year
        return now.replace(year=now.year - years, day=28)


class ProfileRepository(BaseRepository):
    collection_name = "profiles"

    def ensure_indexes(self) -> None:
        self.collection.create_index("user_id", unique=True)
        self.collection.create_index([("address.location", GEOSPHERE)])
        self.collection.create_index("fitness_level")
        self.collection.create_index("fitness_goals")
        self.collection.create_index("completion_percentage")

    def find_by_user_id(self, user_id: ObjectId) -> Optional[Dict[str, Any]]:
        return self.find_one({"user_id": user_id})

    def update_by_user_id(self, user_id: ObjectId, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self.update({"user_id": user_id}, fields)

    def delete_by_user_id(self, user_id: ObjectId) -> bool:
        return self.hard_delete({"user_id": user_id})

    def find_by_location(
        self,
        longitude: float,
        latitude: float,
        max_distance: float,
        exclude_user_id: Optional[ObjectId] = None,
    ) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {"address.location": within_radius(longitude, latitude, max_distance)}
        if exclude_user_id is not None:
            query["user_id"] = {"$ne": exclude_user_id}
        return self.find(query)

    def find_user_ids_within(
        self,
        longitude: float,
        latitude: float,
        max_distance: float,
    ) -> List[ObjectId]:
        """Return the ``user_id`` of every profile inside the circle."""
        documents = self.find(
            {"address.location": within_radius(longitude, latitude, max_distance)},
            projection={"user_id": 1},
        )
        return [document["user_id"] for document in documents]

    def find_by_fitness_level(self, fitness_level: str) -> List[Dict[str, Any]]:
        return self.find({"fitness_level": fitness_level})

    def find_by_fitness_goals(self, goals: Iterable[str]) -> List[Dict[str, Any]]:
        return self.find({"fitness_goals": {"$in": list(goals)}})

    @staticmethod
    def build_search_query(
        fitness_level: Optional[str] = None,
        fitness_goals: Optional[List[str]] = None,
        min_age: Optional[int] = None,
        max_age: Optional[int] = None,
        location: Optional[Dict[str, float]] = None,
        exclude_user_id: Optional[ObjectId] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Combine the search filters into a single query document.

        Ages are turned into a ``date_of_birth`` window: ``max_age``
        bounds the earliest birth date and ``min_age`` the latest.
        """
        query: Dict[str, Any] = {}
        if fitness_level:
            query["fitness_level"] = fitness_level
        if fitness_goals:
            query["fitness_goals"] = {"$in": list(fitness_goals)}
        if min_age is not None or max_age is not None:
            birth_window: Dict[str, datetime] = {}
            if max_age is not None:
                birth_window["$gte"] = years_ago(max_age, now)
            if min_age is not None:
                birth_window["$lte"] = years_ago(min_age, now)
            query["date_of_birth"] = birth_window
        if location:
            query["address.location"] = within_radius(
                location["longitude"], location["latitude"], location["max_distance"]
            )
        if exclude_user_id is not None:
            query["user_id"] = {"$ne": exclude_user_id}
        return query

    def search(self, query: Dict[str, Any], page: int = 1, limit: int = 10) -> PaginatedResult:
        return self.paginate(query, page=page, limit=limit, sort=[("created_at", -1)])

    def set_completion_percentage(self, user_id: ObjectId, percentage: int) -> Optional[Dict[str, Any]]:
        return self.update({"user_id": user_id}, {"completion_percentage": percentage})

    def get_profile_stats(self) -> Dict[str, Any]:
        average = self.aggregate([
            {"$match": {"is_deleted": {"$ne": True}}},
            {"$group": {"_id": None, "average": {"$avg": "$completion_percentage"}}},
        ])
        levels = self.aggregate([
            {"$match": {"is_deleted": {"$ne": True}}},
            {"$group": {"_id": "$fitness_level", "count": {"$sum": 1}}},
            {"$sort": {"_id": ASCENDING}},
        ])
        goals = self.aggregate([
            {"$match": {"is_deleted": {"$ne": True}}},
            {"$unwind": "$fitness_goals"},
            {"$group": {"_id": "$fitness_goals", "count": {"$sum": 1}}},
            {"$sort": {"_id": ASCENDING}},
        ])
        return {
            "total_profiles": self.count(),
            "average_completion": (average[0]["average"] if average else None) or 0,
            "fitness_level_distribution": {row["_id"]: row["count"] for row in levels},
            "goal_distribution": {row["_id"]: row["count"] for row in goals},
        }
