"""
User management endpoints for API v1.

Every route requires a bearer token.  Trainer accounts are managed
with the ``manage:trainers`` permission, administrator accounts with
``system:settings`` and all other user operations with
``manage:users``.  Service errors (invalid id, unknown user, taken
e-mail) are turned into HTTP responses by the application's
exception handler.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ....core.security import require_permissions
from ....schemas.user import UserCreate, UserPermission, UserRead, UserRole, UserUpdate
from ....services.user_service import UserService

router = APIRouter()


@router.post("/trainers", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_trainer(
    data: UserCreate,
    current_user: dict = Depends(require_permissions(UserPermission.MANAGE_TRAINERS)),
) -> UserRead:
    """Create a trainer account."""
    return UserService.create_trainer(data)


@router.post("/admins", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_admin(
    data: UserCreate,
    current_user: dict = Depends(require_permissions(UserPermission.SYSTEM_SETTINGS)),
) -> UserRead:
    """Create a gym administrator account (super administrators only)."""
    return UserService.create_admin(data, super_admin=False)


@router.get("/trainers", response_model=List[UserRead])
def list_trainers(
    current_user: dict = Depends(require_permissions(UserPermission.MANAGE_TRAINERS)),
) -> List[UserRead]:
    return UserService.find_all_trainers()


@router.get("/admins", response_model=List[UserRead])
def list_admins(
    current_user: dict = Depends(require_permissions(UserPermission.SYSTEM_SETTINGS)),
) -> List[UserRead]:
    """List administrators and super administrators."""
    return UserService.find_all_admins()


@router.get("", response_model=List[UserRead])
def list_users(
    role: Optional[UserRole] = Query(None),
    is_active: Optional[bool] = Query(None),
    current_user: dict = Depends(require_permissions(UserPermission.MANAGE_USERS)),
) -> List[UserRead]:
    """List users, optionally filtered by role and active flag."""
    return UserService.find_all(role=role.value if role else None, is_active=is_active)


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: str,
    current_user: dict = Depends(require_permissions(UserPermission.MANAGE_USERS)),
) -> UserRead:
    return UserService.find_by_id(user_id)


@router.put("/{user_id}", response_model=UserRead)
def update_user(
    user_id: str,
    data: UserUpdate,
    current_user: dict = Depends(require_permissions(UserPermission.MANAGE_USERS)),
) -> UserRead:
    """Update a user.  Only fields present in the body are changed."""
    return UserService.update(user_id, data)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    current_user: dict = Depends(require_permissions(UserPermission.MANAGE_USERS)),
) -> None:
    """Soft-delete a user.  The account can no longer log in."""
    UserService.remove(user_id)
    return None
