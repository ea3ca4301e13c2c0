"""
Pydantic models for the authentication endpoints.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .user import UserBase, UserRole, _validate_email


class RegisterRequest(UserBase):
    """Self-registration payload.  New accounts always get the ``user`` role."""

    model_config = ConfigDict(extra="forbid")

    password: str = Field(..., min_length=6, examples=["Password123!"])


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str = Field(..., examples=["user@example.com"])
    password: str = Field(..., min_length=6, examples=["Password123!"])

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        return _validate_email(value)


class AuthUser(BaseModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: AuthUser


class CurrentUser(BaseModel):
    """The identity attached to an authenticated request."""

    user_id: str
    email: Optional[str] = None
    role: UserRole
    permissions: List[str] = []
