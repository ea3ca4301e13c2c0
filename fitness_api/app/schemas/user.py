"""
Pydantic models and enums for user accounts.

Roles are coarse-grained (``user``, ``trainer``, ``admin``,
``super_admin``); permissions are the fine-grained capabilities the
route guards check.  ``ROLE_PERMISSIONS`` gives the permissions a new
account receives for its role.  Passwords never appear in read
schemas.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class UserRole(str, Enum):
    USER = "user"  # regular gym member
    TRAINER = "trainer"
    ADMIN = "admin"  # gym administrator
    SUPER_ADMIN = "super_admin"  # system owner


class UserPermission(str, Enum):
    MANAGE_USERS = "manage:users"
    MANAGE_TRAINERS = "manage:trainers"
    MANAGE_WORKOUTS = "manage:workouts"
    MANAGE_CLASSES = "manage:classes"
    VIEW_ANALYTICS = "view:analytics"
    SYSTEM_SETTINGS = "system:settings"


ROLE_PERMISSIONS: Dict[str, List[str]] = {
    UserRole.SUPER_ADMIN.value: [p.value for p in UserPermission],
    UserRole.ADMIN.value: [
        UserPermission.MANAGE_USERS.value,
        UserPermission.MANAGE_TRAINERS.value,
        UserPermission.MANAGE_WORKOUTS.value,
        UserPermission.MANAGE_CLASSES.value,
        UserPermission.VIEW_ANALYTICS.value,
    ],
    UserRole.TRAINER.value: [
        UserPermission.MANAGE_WORKOUTS.value,
        UserPermission.MANAGE_CLASSES.value,
        UserPermission.VIEW_ANALYTICS.value,
    ],
    UserRole.USER.value: [],
}


def _validate_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Please enter a valid email")
    return value.lower()


def _clean_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


class UserBase(BaseModel):
    first_name: str = Field(..., min_length=1, examples=["John"])
    last_name: str = Field(..., min_length=1, examples=["Doe"])
    email: str = Field(..., examples=["user@example.com"])
    phone_number: Optional[str] = Field(None, examples=["+1234567890"])

    @field_validator("first_name", "last_name")
    @classmethod
    def _strip_names(cls, value: str) -> str:
        return _clean_name(value)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        return _validate_email(value)


class UserCreate(UserBase):
    """Schema for creating an account (registration or by an administrator).

    Password strength is enforced by ``UserService`` so that the same
    rule applies to every creation path.
    """

    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    password: str = Field(..., min_length=6, examples=["Password123!"])
    role: Optional[UserRole] = None


class UserUpdate(BaseModel):
    """Schema for updating a user.  Only provided fields are changed."""

    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = Field(None, min_length=8)
    phone_number: Optional[str] = None
    profile_picture: Optional[str] = None
    role: Optional[UserRole] = None
    permissions: Optional[List[UserPermission]] = None
    is_active: Optional[bool] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def _strip_names(cls, value: Optional[str]) -> Optional[str]:
        return _clean_name(value) if value is not None else None

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: Optional[str]) -> Optional[str]:
        return _validate_email(value)


class UserRead(BaseModel):
    """Schema for reading a user from the API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    email: str
    role: UserRole
    permissions: List[UserPermission] = []
    is_email_verified: bool = False
    phone_number: Optional[str] = None
    profile_picture: Optional[str] = None
    is_active: bool = True
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
