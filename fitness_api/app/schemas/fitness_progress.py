"""
Pydantic models for fitness-progress tracking.

Each user has one progress document with two groups of measurement
series: body measurements (weight in kg, body fat in %, girths in cm)
and fitness metrics (repetitions per minute, plank seconds, running
kilometres and minutes).  Every series is a list of
``{value, date, notes}`` entries stored newest first.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

BODY_MEASUREMENT_TYPES = ("weight", "body_fat", "chest", "waist", "hips", "biceps", "thighs")
FITNESS_METRIC_TYPES = ("push_ups", "pull_ups", "squats", "plank_time", "running_distance", "running_time")

BODY_MEASUREMENTS = "body_measurements"
FITNESS_METRICS = "fitness_metrics"

# Entries kept per series; older ones are dropped on insert.
MAX_SERIES_LENGTH = 100


class ProgressPeriod(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class Measurement(BaseModel):
    model_config = ConfigDict(extra="forbid")

    value: float = Field(..., ge=0, examples=[75.5])
    date: datetime = Field(..., examples=["2023-12-23"])
    notes: Optional[str] = Field(None, examples=["After morning workout"])


class BodyMeasurements(BaseModel):
    model_config = ConfigDict(extra="forbid")

    weight: List[Measurement] = Field(default_factory=list)
    body_fat: List[Measurement] = Field(default_factory=list)
    chest: List[Measurement] = Field(default_factory=list)
    waist: List[Measurement] = Field(default_factory=list)
    hips: List[Measurement] = Field(default_factory=list)
    biceps: List[Measurement] = Field(default_factory=list)
    thighs: List[Measurement] = Field(default_factory=list)


class FitnessMetrics(BaseModel):
    model_config = ConfigDict(extra="forbid")

    push_ups: List[Measurement] = Field(default_factory=list)
    pull_ups: List[Measurement] = Field(default_factory=list)
    squats: List[Measurement] = Field(default_factory=list)
    plank_time: List[Measurement] = Field(default_factory=list)
    running_distance: List[Measurement] = Field(default_factory=list)
    running_time: List[Measurement] = Field(default_factory=list)


class FitnessProgressCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    body_measurements: BodyMeasurements = Field(default_factory=BodyMeasurements)
    fitness_metrics: FitnessMetrics = Field(default_factory=FitnessMetrics)


class FitnessProgressUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    body_measurements: Optional[BodyMeasurements] = None
    fitness_metrics: Optional[FitnessMetrics] = None


class FitnessProgressRead(BaseModel):
    id: str
    user_id: str
    body_measurements: Dict[str, List[Dict]] = {}
    fitness_metrics: Dict[str, List[Dict]] = {}
    bmi: Optional[float] = None
    bmi_category: Optional[str] = None
    body_fat_percentage: Optional[float] = None
    progress_percentages: Dict[str, float] = {}
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProgressResult(BaseModel):
    change: float
    change_percentage: float
    trend: Trend


class AggregateStats(BaseModel):
    total_workouts: int
    average_metrics: Dict[str, Optional[float]]
    personal_bests: Dict[str, Optional[float]]


class TrendAnalysis(BaseModel):
    improvements: List[str]
    areas_to_focus: List[str]
    recommendations: List[str]
