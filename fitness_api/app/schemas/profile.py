"""
Pydantic models for member profiles.

A profile holds the personal, physical and health information of one
user.  ``ProfileCreate`` requires the whole document; ``ProfileUpdate``
makes every field optional and replaces nested objects (address,
emergency contact, health information) as a whole.
"""

from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Fields counted by the profile completion percentage.
COMPLETION_FIELDS = (
    "date_of_birth",
    "gender",
    "address",
    "emergency_contact",
    "height",
    "weight",
    "fitness_level",
    "fitness_goals",
    "preferred_workout_types",
    "health_info",
)


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class FitnessLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class FitnessGoal(str, Enum):
    WEIGHT_LOSS = "weight_loss"
    MUSCLE_GAIN = "muscle_gain"
    ENDURANCE = "endurance"
    FLEXIBILITY = "flexibility"
    STRENGTH = "strength"
    GENERAL_FITNESS = "general_fitness"
    ATHLETIC_PERFORMANCE = "athletic_performance"
    REHABILITATION = "rehabilitation"


class _Request(BaseModel):
    model_config = ConfigDict(extra="forbid", use_enum_values=True, validate_default=True)


class Address(_Request):
    street: str = Field(..., min_length=1, examples=["123 Fitness Street"])
    city: str = Field(..., min_length=1, examples=["New York"])
    state: str = Field(..., min_length=1, examples=["NY"])
    zip_code: str = Field(..., min_length=1, examples=["10001"])
    # [longitude, latitude]
    location: List[float] = Field(..., min_length=2, max_length=2, examples=[[-73.935242, 40.730610]])

    @field_validator("street", "city", "state", "zip_code")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("location")
    @classmethod
    def _check_coordinates(cls, value: List[float]) -> List[float]:
        longitude, latitude = value
        if not -180 <= longitude <= 180:
            raise ValueError("longitude must be between -180 and 180")
        if not -90 <= latitude <= 90:
            raise ValueError("latitude must be between -90 and 90")
        return value


class EmergencyContact(_Request):
    name: str = Field(..., min_length=1, examples=["John Doe"])
    relationship: str = Field(..., min_length=1, examples=["Parent"])
    phone_number: str = Field(..., min_length=1, examples=["+1-555-555-5555"])


class HealthInformation(_Request):
    medical_conditions: List[str] = Field(default_factory=list, examples=[["Asthma"]])
    allergies: List[str] = Field(default_factory=list, examples=[["Peanuts"]])
    medications: List[str] = Field(default_factory=list, examples=[["Ventolin"]])
    blood_type: Optional[str] = Field(None, examples=["O+"])
    last_medical_checkup: Optional[date] = None
    has_insurance: bool = False
    insurance_provider: Optional[str] = None
    insurance_policy_number: Optional[str] = None


class ProfileCreate(_Request):
    date_of_birth: date = Field(..., examples=["1990-01-01"])
    gender: Gender
    address: Address
    emergency_contact: EmergencyContact
    height: Optional[float] = Field(None, ge=0, description="Height in centimeters")
    weight: Optional[float] = Field(None, ge=0, description="Weight in kilograms")
    body_fat_percentage: Optional[float] = Field(None, ge=0, le=100)
    fitness_level: FitnessLevel = FitnessLevel.BEGINNER
    fitness_goals: List[FitnessGoal] = Field(..., min_length=1)
    preferred_workout_types: List[str] = Field(default_factory=list, examples=[["yoga", "strength-training"]])
    preferred_workout_days: List[str] = Field(default_factory=list, examples=[["monday", "wednesday"]])
    preferred_workout_time: Optional[str] = Field(None, examples=["18:00"])
    health_info: HealthInformation
    receive_notifications: bool = True
    receive_emails: bool = True
    receive_sms: bool = True
    preferred_language: str = "en"


class ProfileUpdate(_Request):
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    address: Optional[Address] = None
    emergency_contact: Optional[EmergencyContact] = None
    height: Optional[float] = Field(None, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    body_fat_percentage: Optional[float] = Field(None, ge=0, le=100)
    fitness_level: Optional[FitnessLevel] = None
    fitness_goals: Optional[List[FitnessGoal]] = Field(None, min_length=1)
    preferred_workout_types: Optional[List[str]] = None
    preferred_workout_days: Optional[List[str]] = None
    preferred_workout_time: Optional[str] = None
    health_info: Optional[HealthInformation] = None
    receive_notifications: Optional[bool] = None
    receive_emails: Optional[bool] = None
    receive_sms: Optional[bool] = None
    preferred_language: Optional[str] = None


class ProfileRead(BaseModel):
    """Schema for reading a profile.  Dates come back as stored datetimes."""

    id: str
    user_id: str
    date_of_birth: datetime
    gender: Gender
    address: Dict
    emergency_contact: Dict
    height: Optional[float] = None
    weight: Optional[float] = None
    body_fat_percentage: Optional[float] = None
    fitness_level: FitnessLevel
    fitness_goals: List[FitnessGoal] = []
    preferred_workout_types: List[str] = []
    preferred_workout_days: List[str] = []
    preferred_workout_time: Optional[str] = None
    health_info: Optional[Dict] = None
    receive_notifications: bool = True
    receive_emails: bool = True
    receive_sms: bool = True
    preferred_language: str = "en"
    completion_percentage: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AgeRange(BaseModel):
    min: Optional[int] = Field(None, ge=0)
    max: Optional[int] = Field(None, ge=0)


class LocationFilter(BaseModel):
    longitude: float = Field(..., ge=-180, le=180)
    latitude: float = Field(..., ge=-90, le=90)
    max_distance: float = Field(5000, gt=0, description="Radius in meters")


class ProfileSearchFilters(BaseModel):
    fitness_level: Optional[FitnessLevel] = None
    fitness_goals: Optional[List[FitnessGoal]] = None
    age_range: Optional[AgeRange] = None
    location: Optional[LocationFilter] = None


class ProfileSearchResult(BaseModel):
    profiles: List[ProfileRead]
    total: int
    page: int
    total_pages: int


class ProfileCompletion(BaseModel):
    completion_percentage: int
    missing_fields: List[str]


class ProfileStats(BaseModel):
    total_profiles: int
    average_completion: float
    fitness_level_distribution: Dict[str, int]
    goal_distribution: Dict[str, int]
