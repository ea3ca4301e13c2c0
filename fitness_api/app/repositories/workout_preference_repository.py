"""
Repository for the ``workout_preferences`` collection.
"""

from typing import Any, Dict, List, Optional, Sequence

from bson import ObjectId

from .base import BaseRepository


class WorkoutPreferenceRepository(BaseRepository):
    collection_name = "workout_preferences"

    def ensure_indexes(self) -> None:
        self.collection.create_index("user_id", unique=True)
        self.collection.create_index("preferred_workout_types")
        self.collection.create_index("time_preference.preferred_days")
        self.collection.create_index("workouts_per_week")

    def find_by_user_id(self, user_id: ObjectId) -> Optional[Dict[str, Any]]:
        return self.find_one({"user_id": user_id})

    def update_by_user_id(self, user_id: ObjectId, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self.update({"user_id": user_id}, fields)

    def find_by_workout_type(
        self,
        workout_type: str,
        exclude_user_id: Optional[ObjectId] = None,
        user_ids: Optional[Sequence[ObjectId]] = None,
    ) -> List[Dict[str, Any]]:
        """Preferences listing ``workout_type``, optionally limited to ``user_ids``."""
        user_filter: Dict[str, Any] = {}
        if user_ids is not None:
            user_filter["$in"] = list(user_ids)
        if exclude_user_id is not None:
            user_filter["$ne"] = exclude_user_id
        query: Dict[str, Any] = {"preferred_workout_types": workout_type}
        if user_filter:
            query["user_id"] = user_filter
        return self.find(query, sort=[("created_at", 1)])

    def get_preference_stats(self) -> Dict[str, Any]:
        active = {"$match": {"is_deleted": {"$ne": True}}}
        types = self.aggregate([
            active,
            {"$unwind": "$preferred_workout_types"},
            {"$group": {"_id": "$preferred_workout_types", "count": {"$sum": 1}}},
        ])
        intensities = self.aggregate([
            active,
            {
                "$group": {
                    "_id": None,
                    "cardio": {"$avg": "$intensity_preference.cardio_intensity"},
                    "strength": {"$avg": "$intensity_preference.strength_intensity"},
                    "flexibility": {"$avg": "$intensity_preference.flexibility_intensity"},
                }
            },
        ])
        time_slots = self.aggregate([
            active,
            {"$group": {"_id": "$time_preference.preferred_time_slot", "count": {"$sum": 1}}},
            {"$sort": {"count": -1}},
            {"$limit": 5},
        ])
        groups = self.aggregate([
            active,
            {"$group": {"_id": "$prefer_group_workouts", "count": {"$sum": 1}}},
        ])
        averages = intensities[0] if intensities else {}
        group_counts = {row["_id"]: row["count"] for row in groups}
        return {
            "workout_type_distribution": {row["_id"]: row["count"] for row in types},
            "average_intensities": {
                name: averages.get(name) or 0 for name in ("cardio", "strength", "flexibility")
            },
            "popular_time_slots": [{"time_slot": row["_id"], "count": row["count"]} for row in time_slots],
            "group_preference": {
                "group": group_counts.get(True, 0),
                "individual": group_counts.get(False, 0),
            },
        }
