"""
Authentication endpoints for API v1.

Clients register or log in to obtain a bearer token and send it in
the ``Authorization`` header of every other request.  ``/profile``
echoes the identity the token resolves to and ``/refresh`` issues a
fresh token for it.
"""

from fastapi import APIRouter, Depends, status

from ....core.security import get_current_user
from ....schemas.auth import AuthResponse, CurrentUser, LoginRequest, RegisterRequest
from ....services.auth_service import AuthService

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest) -> AuthResponse:
    """Create a member account and return a token for it."""
    return AuthService.register(data)


@router.post("/login", response_model=AuthResponse)
def login(data: LoginRequest) -> AuthResponse:
    """Authenticate with e-mail and password.

    Returns HTTP 401 with ``Invalid credentials`` when the e-mail is
    unknown, the password is wrong or the account is disabled.
    """
    return AuthService.login(data)


@router.get("/profile", response_model=CurrentUser)
def profile(current_user: dict = Depends(get_current_user)) -> CurrentUser:
    return current_user


@router.post("/refresh", response_model=AuthResponse)
def refresh(current_user: dict = Depends(get_current_user)) -> AuthResponse:
    """Issue a new token for the authenticated user."""
    return AuthService.refresh_token(current_user["user_id"])
