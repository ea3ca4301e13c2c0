"""
Service layer for authentication.

Registration creates a member account through ``UserService`` and
logs the new user in straight away; login checks the credentials,
records the login time and issues a token.  Every successful call
returns the same auth response shape: an access token plus a short
summary of the user.
"""

import logging
from typing import Any, Dict

from ..core.exceptions import AuthenticationError
from ..core.security import create_access_token
from ..repositories.base import serialize_document
from ..schemas.auth import LoginRequest, RegisterRequest
from ..schemas.user import UserCreate
from .user_service import UserService

logger = logging.getLogger(__name__)


def build_auth_response(user: Dict[str, Any]) -> Dict[str, Any]:
    token = create_access_token({
        "sub": user["id"],
        "email": user.get("email"),
        "role": user.get("role"),
    })
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": {
            "id": user["id"],
            "email": user.get("email"),
            "first_name": user.get("first_name"),
            "last_name": user.get("last_name"),
            "role": user.get("role"),
        },
    }


class AuthService:
    @classmethod
    def validate_user(cls, email: str, password: str) -> Dict[str, Any]:
        user = UserService.validate_credentials(email, password)
        if user is None:
            logger.warning("Failed login attempt for %s", email)
            raise AuthenticationError("Invalid credentials")
        return user

    @classmethod
    def register(cls, data: RegisterRequest) -> Dict[str, Any]:
        # Self-registration never grants a role above ``user``.
        user = UserService.create(UserCreate(**data.model_dump()))
        return build_auth_response(user)

    @classmethod
    def login(cls, data: LoginRequest) -> Dict[str, Any]:
        user = cls.validate_user(data.email, data.password)
        UserService.update_last_login(user["id"])
        logger.info("User %s logged in", user["email"])
        return build_auth_response(user)

    @classmethod
    def refresh_token(cls, user_id: str) -> Dict[str, Any]:
        document = UserService.get_active_user(user_id)
        if document is None:
            raise AuthenticationError("User not found")
        return build_auth_response(serialize_document(document))
