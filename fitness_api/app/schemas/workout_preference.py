"""
Pydantic models for workout preferences and partner matching.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WorkoutType(str, Enum):
    CARDIO = "CARDIO"
    STRENGTH = "STRENGTH"
    FLEXIBILITY = "FLEXIBILITY"
    HIIT = "HIIT"
    YOGA = "YOGA"
    PILATES = "PILATES"
    CROSSFIT = "CROSSFIT"
    SWIMMING = "SWIMMING"
    CYCLING = "CYCLING"
    RUNNING = "RUNNING"


class Equipment(str, Enum):
    DUMBBELLS = "DUMBBELLS"
    BARBELLS = "BARBELLS"
    TREADMILL = "TREADMILL"
    ELLIPTICAL = "ELLIPTICAL"
    RESISTANCE_BANDS = "RESISTANCE_BANDS"
    KETTLEBELLS = "KETTLEBELLS"
    YOGA_MAT = "YOGA_MAT"
    FOAM_ROLLER = "FOAM_ROLLER"
    PULL_UP_BAR = "PULL_UP_BAR"
    BENCH = "BENCH"


class _Request(BaseModel):
    model_config = ConfigDict(extra="forbid", use_enum_values=True)


class TimePreference(_Request):
    preferred_days: List[str] = Field(..., examples=[["monday", "wednesday", "friday"]])
    preferred_time_slot: str = Field(..., examples=["06:00-08:00"])
    preferred_duration: int = Field(..., ge=30, le=240, description="Minutes")


class IntensityPreference(_Request):
    cardio_intensity: int = Field(..., ge=1, le=5)
    strength_intensity: int = Field(..., ge=1, le=5)
    flexibility_intensity: int = Field(..., ge=1, le=5)


class WorkoutPreferenceCreate(_Request):
    preferred_workout_types: List[WorkoutType] = Field(..., min_length=1)
    available_equipment: List[Equipment]
    time_preference: TimePreference
    intensity_preference: IntensityPreference
    workouts_per_week: int = Field(..., ge=1, le=7)
    needs_modification: bool = False
    injury_considerations: List[str] = Field(default_factory=list)
    excluded_exercises: List[str] = Field(default_factory=list)
    prefer_group_workouts: bool
    special_instructions: Optional[str] = Field(None, examples=["Prefer low-impact exercises"])


class WorkoutPreferenceUpdate(_Request):
    preferred_workout_types: Optional[List[WorkoutType]] = Field(None, min_length=1)
    available_equipment: Optional[List[Equipment]] = None
    time_preference: Optional[TimePreference] = None
    intensity_preference: Optional[IntensityPreference] = None
    workouts_per_week: Optional[int] = Field(None, ge=1, le=7)
    needs_modification: Optional[bool] = None
    injury_considerations: Optional[List[str]] = None
    excluded_exercises: Optional[List[str]] = None
    prefer_group_workouts: Optional[bool] = None
    special_instructions: Optional[str] = None


class WorkoutPreferenceRead(BaseModel):
    id: str
    user_id: str
    preferred_workout_types: List[WorkoutType]
    available_equipment: List[Equipment] = []
    time_preference: Dict
    intensity_preference: Dict
    workouts_per_week: int
    needs_modification: bool = False
    injury_considerations: List[str] = []
    excluded_exercises: List[str] = []
    prefer_group_workouts: bool
    special_instructions: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PartnerMatch(BaseModel):
    user_id: str
    match_score: int
    matching_criteria: List[str]


class AverageIntensities(BaseModel):
    cardio: float
    strength: float
    flexibility: float


class TimeSlotCount(BaseModel):
    time_slot: Optional[str]
    count: int


class GroupPreference(BaseModel):
    group: int
    individual: int


class PreferenceStats(BaseModel):
    workout_type_distribution: Dict[str, int]
    average_intensities: AverageIntensities
    popular_time_slots: List[TimeSlotCount]
    group_preference: GroupPreference


class WorkoutRecommendations(BaseModel):
    recommended_workouts: List[str]
    recommended_equipment: List[str]
    schedule_suggestions: List[str]
