"""
Repository for the ``fitness_progress`` collection.

Each series lives at ``<category>.<series>`` (for example
``body_measurements.weight``) and holds its newest entry first.  New
entries are pushed at position 0 and the array is sliced to
``MAX_SERIES_LENGTH`` in the same update.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import DESCENDING

from ..schemas.fitness_progress import FITNESS_METRIC_TYPES, FITNESS_METRICS, MAX_SERIES_LENGTH
from .base import BaseRepository, utcnow


class FitnessProgressRepository(BaseRepository):
    collection_name = "fitness_progress"

    def ensure_indexes(self) -> None:
        self.collection.create_index("user_id", unique=True)
        self.collection.create_index([("body_measurements.weight.date", DESCENDING)])
        self.collection.create_index([("body_measurements.body_fat.date", DESCENDING)])
        self.collection.create_index([("fitness_metrics.running_distance.date", DESCENDING)])

    def find_by_user_id(self, user_id: ObjectId) -> Optional[Dict[str, Any]]:
        return self.find_one({"user_id": user_id})

    def update_by_user_id(self, user_id: ObjectId, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self.update({"user_id": user_id}, fields)

    def push_entry(self, user_id: ObjectId, path: str, entry: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Prepend ``entry`` to the series at ``path`` and return the updated document."""
        return self.update(
            {"user_id": user_id},
            {
                "$push": {
                    path: {
                        "$each": [entry],
                        "$position": 0,
                        "$slice": MAX_SERIES_LENGTH,
                    }
                }
            },
        )

    def get_series(self, user_id: ObjectId, path: str) -> Optional[List[Dict[str, Any]]]:
        """Return the entries of one series, or ``None`` without a tracking document."""
        document = self.collection.find_one(
            self._scoped({"user_id": user_id}),
            {path: 1},
        )
        if document is None:
            return None
        category, series = path.split(".", 1)
        return list((document.get(category) or {}).get(series) or [])

    def get_series_since(self, user_id: ObjectId, path: str, start: datetime, end: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Entries of one series dated in ``[start, end]``, oldest first."""
        end = end or utcnow()
        return self.aggregate([
            {"$match": {"user_id": user_id, "is_deleted": {"$ne": True}}},
            {"$unwind": f"${path}"},
            {"$match": {f"{path}.date": {"$gte": start, "$lte": end}}},
            {"$project": {"_id": 0, "value": f"${path}.value", "date": f"${path}.date"}},
            {"$sort": {"date": 1}},
        ])

    def get_metric_summary(self, user_id: ObjectId) -> Optional[Dict[str, Any]]:
        """Per-metric personal bests and averages computed by the server.

        Personal bests are maxima, except ``running_time`` where lower
        is better.
        """
        bests = {}
        averages = {}
        for metric in FITNESS_METRIC_TYPES:
            values = f"${FITNESS_METRICS}.{metric}.value"
            bests[metric] = {"$min" if metric == "running_time" else "$max": values}
            averages[metric] = {"$avg": values}
        rows = self.aggregate([
            {"$match": {"user_id": user_id, "is_deleted": {"$ne": True}}},
            {"$project": {"_id": 0, "personal_bests": bests, "average_metrics": averages}},
        ])
        return rows[0] if rows else None
