"""
Service layer for fitness-progress tracking.

The service owns one progress document per user, appends new
measurements, and derives figures from the stored series: body-mass
index from the latest weight and the height in the user's profile,
the latest body-fat percentage, per-series progress percentages,
period-over-period change, aggregate statistics and a plain-language
trend analysis.

The arithmetic lives in module-level functions (``derive_body_metrics``,
``progress_between``, ``count_workout_days``, ``analyze_progress``)
so it can be exercised without a database.
"""

import calendar
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pymongo.errors import DuplicateKeyError

from ..core.exceptions import BadRequestError, ConflictError, NotFoundError
from ..repositories.base import serialize_document, to_document, to_object_id, utcnow
from ..repositories.fitness_progress_repository import FitnessProgressRepository
from ..repositories.profile_repository import ProfileRepository
from ..schemas.fitness_progress import (
    BODY_MEASUREMENT_TYPES,
    BODY_MEASUREMENTS,
    FITNESS_METRIC_TYPES,
    FITNESS_METRICS,
    MAX_SERIES_LENGTH,
    FitnessProgressCreate,
    FitnessProgressUpdate,
    ProgressPeriod,
)

logger = logging.getLogger(__name__)

SERIES_BY_CATEGORY = {
    BODY_MEASUREMENTS: BODY_MEASUREMENT_TYPES,
    FITNESS_METRICS: FITNESS_METRIC_TYPES,
}

# Body series where a decrease counts as progress.
REDUCTION_GOALS = ("weight", "body_fat")


def _aware(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _months_ago(now: datetime, months: int) -> datetime:
    month = now.month - months
    year = now.year
    while month < 1:
        month += 12
        year -= 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def period_start(period: str, now: datetime) -> datetime:
    period = getattr(period, "value", period)
    if period == ProgressPeriod.WEEK.value:
        return now - timedelta(days=7)
    if period == ProgressPeriod.MONTH.value:
        return _months_ago(now, 1)
    if period == ProgressPeriod.YEAR.value:
        return _months_ago(now, 12)
    raise BadRequestError(f"Invalid period: {period}")


def resolve_series(progress_type: str) -> Tuple[str, str]:
    """Map ``weight`` or ``body_measurements.weight`` to ``(category, series)``."""
    if "." in progress_type:
        category, series = progress_type.split(".", 1)
        if series in SERIES_BY_CATEGORY.get(category, ()):
            return category, series
    else:
        for category, names in SERIES_BY_CATEGORY.items():
            if progress_type in names:
                return category, progress_type
    raise BadRequestError(f"Invalid progress type: {progress_type}")


def _series(document: Dict[str, Any], category: str, series: str) -> List[Dict[str, Any]]:
    return list((document.get(category) or {}).get(series) or [])


def _newest_first(entries: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    ordered = sorted(entries, key=lambda entry: _aware(entry["date"]), reverse=True)
    return ordered[:MAX_SERIES_LENGTH]


def bmi_category(bmi: float) -> str:
    if bmi < 18.5:
        return "underweight"
    if bmi < 25:
        return "normal"
    if bmi < 30:
        return "overweight"
    return "obese"


def _percent_change(oldest: float, latest: float) -> Optional[float]:
    if not oldest:
        return None
    return (latest - oldest) / oldest * 100


def derive_body_metrics(document: Dict[str, Any], height_cm: Optional[float] = None) -> Dict[str, Any]:
    """Compute the derived fields stored next to the series.

    ``bmi`` needs both a weight entry and a positive height; without
    them it is ``None``.  ``progress_percentages`` maps each series with
    at least two entries to its change from oldest to newest entry.
    """
    weights = _series(document, BODY_MEASUREMENTS, "weight")
    body_fat = _series(document, BODY_MEASUREMENTS, "body_fat")

    bmi = None
    if weights and height_cm:
        height_m = height_cm / 100
        bmi = round(weights[0]["value"] / (height_m * height_m), 1)

    percentages = {}
    for category, names in SERIES_BY_CATEGORY.items():
        for name in names:
            entries = _series(document, category, name)
            if len(entries) < 2:
                continue
            change = _percent_change(entries[-1]["value"], entries[0]["value"])
            if change is not None:
                percentages[name] = round(change, 1)

    return {
        "bmi": bmi,
        "bmi_category": bmi_category(bmi) if bmi is not None else None,
        "body_fat_percentage": body_fat[0]["value"] if body_fat else None,
        "progress_percentages": percentages,
    }


def progress_between(values: List[float]) -> Dict[str, Any]:
    """Change between the first and last of chronologically ordered values."""
    if len(values) < 2:
        return {"change": 0, "change_percentage": 0, "trend": "stable"}
    first, last = values[0], values[-1]
    change = last - first
    percentage = change / first * 100 if first else 0
    if change > 0:
        trend = "up"
    elif change < 0:
        trend = "down"
    else:
        trend = "stable"
    return {"change": change, "change_percentage": percentage, "trend": trend}


def count_workout_days(document: Optional[Dict[str, Any]]) -> int:
    """Number of distinct calendar days with at least one fitness-metric entry."""
    if not document:
        return 0
    days = set()
    for name in FITNESS_METRIC_TYPES:
        for entry in _series(document, FITNESS_METRICS, name):
            days.add(_aware(entry["date"]).date())
    return len(days)


def analyze_progress(document: Dict[str, Any], total_workouts: int) -> Dict[str, List[str]]:
    """Turn the stored series into improvements, focus areas and advice.

    Each series compares its newest entry with its oldest one.  Series
    whose oldest value is zero have no meaningful percentage and are
    skipped.
    """
    improvements: List[str] = []
    areas_to_focus: List[str] = []
    recommendations: List[str] = []

    for name in BODY_MEASUREMENT_TYPES:
        entries = _series(document, BODY_MEASUREMENTS, name)
        if len(entries) < 2 or name not in REDUCTION_GOALS:
            continue
        change = _percent_change(entries[-1]["value"], entries[0]["value"])
        if change is None:
            continue
        if change < 0:
            improvements.append(f"{name} reduced by {abs(change):.1f}%")
        elif change > 5:
            areas_to_focus.append(f"{name} increased by {change:.1f}%")

    for name in FITNESS_METRIC_TYPES:
        entries = _series(document, FITNESS_METRICS, name)
        if len(entries) < 2:
            continue
        change = _percent_change(entries[-1]["value"], entries[0]["value"])
        if change is None:
            continue
        if change > 10:
            improvements.append(f"{name} improved by {change:.1f}%")
        elif change < 0:
            areas_to_focus.append(f"{name} decreased by {abs(change):.1f}%")

    if total_workouts < 3:
        recommendations.append("Try to increase workout frequency to at least 3 times per week")
    if len(areas_to_focus) > len(improvements):
        recommendations.append("Consider reviewing your workout routine and nutrition plan")
    if not improvements:
        recommendations.append("Start tracking more metrics to better monitor your progress")

    return {
        "improvements": improvements,
        "areas_to_focus": areas_to_focus,
        "recommendations": recommendations,
    }


class FitnessProgressService:
    repository_factory = FitnessProgressRepository
    profile_repository_factory = ProfileRepository

    @classmethod
    def _repository(cls) -> FitnessProgressRepository:
        return cls.repository_factory()

    @classmethod
    def _height_of(cls, user_id) -> Optional[float]:
        profile = cls.profile_repository_factory().find_by_user_id(user_id)
        return (profile or {}).get("height")

    @classmethod
    def _refresh_derived(cls, repository: FitnessProgressRepository, document: Dict[str, Any]) -> Dict[str, Any]:
        derived = derive_body_metrics(document, cls._height_of(document["user_id"]))
        if all(document.get(key) == value for key, value in derived.items()):
            return document
        return repository.update_by_user_id(document["user_id"], derived) or document

    @classmethod
    def _get_document(cls, user_id: str) -> Dict[str, Any]:
        oid = to_object_id(user_id, "Invalid user ID")
        document = cls._repository().find_by_user_id(oid)
        if document is None:
            raise NotFoundError("Fitness progress not found")
        return document

    @classmethod
    def create_progress(cls, user_id: str, data: FitnessProgressCreate) -> Dict[str, Any]:
        oid = to_object_id(user_id, "Invalid user ID")
        repository = cls._repository()
        if repository.find_by_user_id(oid) is not None:
            raise ConflictError("Fitness progress tracking already exists for this user")
        document = to_document(data)
        for category in SERIES_BY_CATEGORY:
            for name, entries in document[category].items():
                document[category][name] = _newest_first(entries)
        document["user_id"] = oid
        document.update(derive_body_metrics(document, cls._height_of(oid)))
        try:
            created = repository.create(document)
        except DuplicateKeyError:
            raise ConflictError("Fitness progress tracking already exists for this user")
        logger.info("Started fitness progress tracking for user %s", user_id)
        return serialize_document(created)

    @classmethod
    def get_progress(cls, user_id: str) -> Dict[str, Any]:
        return serialize_document(cls._get_document(user_id))

    @classmethod
    def update_progress(cls, user_id: str, data: FitnessProgressUpdate) -> Dict[str, Any]:
        """Replace the series supplied in ``data``; other series are kept."""
        oid = to_object_id(user_id, "Invalid user ID")
        repository = cls._repository()
        fields = {}
        for category, series in to_document(data, exclude_unset=True).items():
            for name, entries in (series or {}).items():
                fields[f"{category}.{name}"] = _newest_first(entries)
        if fields:
            document = repository.update_by_user_id(oid, fields)
        else:
            document = repository.find_by_user_id(oid)
        if document is None:
            raise NotFoundError("Fitness progress not found")
        logger.info("Updated fitness progress for user %s", user_id)
        return serialize_document(cls._refresh_derived(repository, document))

    @classmethod
    def _add_entry(cls, user_id: str, category: str, series: str, value: float, notes: Optional[str]) -> Dict[str, Any]:
        if series not in SERIES_BY_CATEGORY[category]:
            kind = "body measurement" if category == BODY_MEASUREMENTS else "fitness metric"
            raise BadRequestError(f"Invalid {kind} type: {series}")
        if value is None or value < 0:
            raise BadRequestError("Value must be a non-negative number")
        oid = to_object_id(user_id, "Invalid user ID")
        repository = cls._repository()
        entry = {"value": value, "date": utcnow(), "notes": notes}
        document = repository.push_entry(oid, f"{category}.{series}", entry)
        if document is None:
            raise NotFoundError("Fitness progress not found")
        logger.info("Recorded %s=%s for user %s", series, value, user_id)
        return serialize_document(cls._refresh_derived(repository, document))

    @classmethod
    def add_body_measurement(cls, user_id: str, measurement_type: str, value: float, notes: Optional[str] = None) -> Dict[str, Any]:
        return cls._add_entry(user_id, BODY_MEASUREMENTS, measurement_type, value, notes)

    @classmethod
    def add_fitness_metric(cls, user_id: str, metric_type: str, value: float, notes: Optional[str] = None) -> Dict[str, Any]:
        return cls._add_entry(user_id, FITNESS_METRICS, metric_type, value, notes)

    @classmethod
    def get_progress_history(
        cls,
        user_id: str,
        progress_type: str,
        start_date: datetime,
        end_date: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Entries of one series between two dates (inclusive), newest first."""
        if "." not in progress_type:
            raise BadRequestError(f"Invalid progress type: {progress_type}")
        category, series = resolve_series(progress_type)
        oid = to_object_id(user_id, "Invalid user ID")
        start = _aware(start_date)
        end = _aware(end_date) if end_date else utcnow()
        entries = cls._repository().get_series(oid, f"{category}.{series}")
        if not entries:
            return []
        selected = [entry for entry in entries if start <= _aware(entry["date"]) <= end]
        selected.sort(key=lambda entry: _aware(entry["date"]), reverse=True)
        return selected

    @classmethod
    def calculate_progress(cls, user_id: str, progress_type: str, period: str) -> Dict[str, Any]:
        category, series = resolve_series(progress_type)
        oid = to_object_id(user_id, "Invalid user ID")
        now = utcnow()
        rows = cls._repository().get_series_since(oid, f"{category}.{series}", period_start(period, now), now)
        return progress_between([row["value"] for row in rows])

    @classmethod
    def get_aggregate_stats(cls, user_id: str) -> Dict[str, Any]:
        oid = to_object_id(user_id, "Invalid user ID")
        repository = cls._repository()
        document = repository.find_by_user_id(oid)
        if document is None:
            return {"total_workouts": 0, "average_metrics": {}, "personal_bests": {}}
        summary = repository.get_metric_summary(oid) or {}
        return {
            "total_workouts": count_workout_days(document),
            "average_metrics": summary.get("average_metrics") or {},
            "personal_bests": summary.get("personal_bests") or {},
        }

    @classmethod
    def analyze_trends(cls, user_id: str) -> Dict[str, List[str]]:
        document = cls._get_document(user_id)
        return analyze_progress(document, count_workout_days(document))
