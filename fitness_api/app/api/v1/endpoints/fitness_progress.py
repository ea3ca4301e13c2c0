"""
Fitness-progress endpoints for API v1.

Series are addressed by name: ``type=weight`` for the measurement and
metric routes, ``type=body_measurements.weight`` for ``/history``.
``/progress`` accepts either form.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ....core.security import get_current_user
from ....schemas.fitness_progress import (
    AggregateStats,
    FitnessProgressCreate,
    FitnessProgressRead,
    FitnessProgressUpdate,
    Measurement,
    ProgressPeriod,
    ProgressResult,
    TrendAnalysis,
)
from ....services.fitness_progress_service import FitnessProgressService

router = APIRouter()


@router.post("/", response_model=FitnessProgressRead, status_code=status.HTTP_201_CREATED)
def create_progress(
    data: FitnessProgressCreate,
    current_user: dict = Depends(get_current_user),
) -> FitnessProgressRead:
    """Start progress tracking for the caller (HTTP 409 if already started)."""
    return FitnessProgressService.create_progress(current_user["user_id"], data)


@router.get("/", response_model=FitnessProgressRead)
def get_progress(current_user: dict = Depends(get_current_user)) -> FitnessProgressRead:
    return FitnessProgressService.get_progress(current_user["user_id"])


@router.put("/", response_model=FitnessProgressRead)
def update_progress(
    data: FitnessProgressUpdate,
    current_user: dict = Depends(get_current_user),
) -> FitnessProgressRead:
    """Replace the series present in the body; other series are unchanged."""
    return FitnessProgressService.update_progress(current_user["user_id"], data)


@router.post("/measurements", response_model=FitnessProgressRead, status_code=status.HTTP_201_CREATED)
def add_measurement(
    measurement_type: str = Query(..., alias="type", examples=["weight"]),
    value: float = Query(...),
    notes: Optional[str] = Query(None),
    current_user: dict = Depends(get_current_user),
) -> FitnessProgressRead:
    """Record a body measurement dated now."""
    return FitnessProgressService.add_body_measurement(current_user["user_id"], measurement_type, value, notes)


@router.post("/metrics", response_model=FitnessProgressRead, status_code=status.HTTP_201_CREATED)
def add_metric(
    metric_type: str = Query(..., alias="type", examples=["push_ups"]),
    value: float = Query(...),
    notes: Optional[str] = Query(None),
    current_user: dict = Depends(get_current_user),
) -> FitnessProgressRead:
    """Record a fitness metric dated now."""
    return FitnessProgressService.add_fitness_metric(current_user["user_id"], metric_type, value, notes)


@router.get("/history", response_model=List[Measurement])
def progress_history(
    progress_type: str = Query(..., alias="type", examples=["body_measurements.weight"]),
    start_date: datetime = Query(...),
    end_date: Optional[datetime] = Query(None),
    current_user: dict = Depends(get_current_user),
) -> List[Measurement]:
    """Entries of one series between two dates, newest first."""
    return FitnessProgressService.get_progress_history(current_user["user_id"], progress_type, start_date, end_date)


@router.get("/progress", response_model=ProgressResult)
def progress(
    progress_type: str = Query(..., alias="type", examples=["weight"]),
    period: ProgressPeriod = Query(...),
    current_user: dict = Depends(get_current_user),
) -> ProgressResult:
    """Change of one series over the last week, month or year."""
    return FitnessProgressService.calculate_progress(current_user["user_id"], progress_type, period.value)


@router.get("/stats", response_model=AggregateStats)
def aggregate_stats(current_user: dict = Depends(get_current_user)) -> AggregateStats:
    return FitnessProgressService.get_aggregate_stats(current_user["user_id"])


@router.get("/trends", response_model=TrendAnalysis)
def trends(current_user: dict = Depends(get_current_user)) -> TrendAnalysis:
    return FitnessProgressService.analyze_trends(current_user["user_id"])
