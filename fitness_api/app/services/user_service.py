"""
Service layer for user accounts.

``UserService`` implements account creation (members, trainers and
administrators), lookups, partial updates, last-login tracking,
credential checks and soft deletion.  Passwords are stored as PBKDF2
hashes and never leave this module: every public method returns the
user document serialised for the API with the ``password`` field
removed.

Error conditions raise the exceptions from ``core.exceptions``:

* malformed ids and weak passwords raise ``BadRequestError``;
* unknown or deleted users raise ``NotFoundError``;
* duplicate e-mail addresses raise ``ConflictError``.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from pymongo.errors import DuplicateKeyError

from ..core.exceptions import BadRequestError, ConflictError, NotFoundError
from ..core.security import hash_password, verify_password
from ..repositories.base import is_valid_object_id, serialize_document, to_object_id, utcnow
from ..repositories.user_repository import UserRepository
from ..schemas.user import EMAIL_PATTERN, ROLE_PERMISSIONS, UserCreate, UserRole, UserUpdate

logger = logging.getLogger(__name__)

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$")
PASSWORD_MESSAGE = (
    "Password must be at least 8 characters long and contain at least one uppercase letter, "
    "one lowercase letter, one number, and one special character"
)


def is_strong_password(password: str) -> bool:
    return bool(PASSWORD_PATTERN.match(password or ""))


def public_user(document: Dict[str, Any]) -> Dict[str, Any]:
    """Serialise a user document for the API, dropping the password hash."""
    user = serialize_document(document)
    user.pop("password", None)
    return user


class UserService:
    """Service class for managing user accounts."""

    repository_factory = UserRepository

    @classmethod
    def _repository(cls) -> UserRepository:
        return cls.repository_factory()

    @classmethod
    def _get_document(cls, user_id: str) -> Dict[str, Any]:
        oid = to_object_id(user_id, "Invalid user ID")
        document = cls._repository().find_by_id(oid)
        if document is None:
            raise NotFoundError("User not found")
        return document

    @classmethod
    def create(cls, data: UserCreate) -> Dict[str, Any]:
        """Create a user and return it without its password.

        The role defaults to ``user`` and the permissions to the
        defaults of the role.
        """
        email = data.email.strip().lower()
        if not EMAIL_PATTERN.match(email):
            raise BadRequestError("Invalid email format")
        repository = cls._repository()
        if repository.find_by_email(email, include_deleted=True) is not None:
            raise ConflictError("Email already exists")
        if not is_strong_password(data.password):
            raise BadRequestError(PASSWORD_MESSAGE)

        role = getattr(data.role, "value", data.role) or UserRole.USER.value
        document = data.model_dump(exclude={"password", "role"})
        document.update(
            email=email,
            password=hash_password(data.password),
            role=role,
            permissions=list(ROLE_PERMISSIONS[role]),
            is_email_verified=False,
            profile_picture=None,
            is_active=True,
            last_login=None,
        )
        try:
            created = repository.create(document)
        except DuplicateKeyError:
            raise ConflictError("Email already exists")
        logger.info("Created %s account %s", role, email)
        return public_user(created)

    @classmethod
    def create_trainer(cls, data: UserCreate) -> Dict[str, Any]:
        return cls.create(data.model_copy(update={"role": UserRole.TRAINER.value}))

    @classmethod
    def create_admin(cls, data: UserCreate, super_admin: bool = False) -> Dict[str, Any]:
        role = UserRole.SUPER_ADMIN if super_admin else UserRole.ADMIN
        return cls.create(data.model_copy(update={"role": role.value}))

    @classmethod
    def find_all(cls, role: Optional[str] = None, is_active: Optional[bool] = None) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {}
        if role:
            query["role"] = getattr(role, "value", role)
        if is_active is not None:
            query["is_active"] = is_active
        documents = cls._repository().find(query, sort=[("created_at", -1)])
        return [public_user(document) for document in documents]

    @classmethod
    def find_all_trainers(cls) -> List[Dict[str, Any]]:
        return cls.find_all(role=UserRole.TRAINER.value)

    @classmethod
    def find_all_admins(cls) -> List[Dict[str, Any]]:
        """Return administrators and super administrators."""
        documents = cls._repository().find_by_roles([UserRole.ADMIN.value, UserRole.SUPER_ADMIN.value])
        return [public_user(document) for document in documents]

    @classmethod
    def find_by_id(cls, user_id: str) -> Dict[str, Any]:
        return public_user(cls._get_document(user_id))

    @classmethod
    def find_by_email(cls, email: Optional[str]) -> Optional[Dict[str, Any]]:
        if not email:
            return None
        document = cls._repository().find_by_email(email)
        return public_user(document) if document else None

    @classmethod
    def get_active_user(cls, user_id: str) -> Optional[Dict[str, Any]]:
        """Return the stored user for a token subject, or ``None``.

        Used by the authentication dependency; malformed ids are
        treated as unknown users rather than client errors.
        """
        if not is_valid_object_id(user_id):
            return None
        return cls._repository().find_by_id(user_id)

    @classmethod
    def update(cls, user_id: str, data: UserUpdate) -> Dict[str, Any]:
        """Apply a partial update.

        A new e-mail must not belong to another account, a new password
        must satisfy the strength rule and is re-hashed, and a role
        change resets the permissions to the role defaults unless
        permissions are supplied as well.  Fields sent as ``null`` are
        left unchanged.
        """
        document = cls._get_document(user_id)
        repository = cls._repository()
        fields = data.model_dump(exclude_unset=True, exclude_none=True)

        email = fields.get("email")
        if email and email != document.get("email"):
            if repository.find_by_email(email, include_deleted=True) is not None:
                raise ConflictError("Email already exists")

        if "password" in fields:
            if not is_strong_password(fields["password"] or ""):
                raise BadRequestError(PASSWORD_MESSAGE)
            fields["password"] = hash_password(fields["password"])

        if fields.get("role") and "permissions" not in fields:
            fields["permissions"] = list(ROLE_PERMISSIONS[fields["role"]])

        if not fields:
            return public_user(document)
        try:
            updated = repository.update({"_id": document["_id"]}, fields)
        except DuplicateKeyError:
            raise ConflictError("Email already exists")
        if updated is None:
            raise NotFoundError("User not found")
        logger.info("Updated user %s (%s)", user_id, ", ".join(sorted(fields)))
        return public_user(updated)

    @classmethod
    def update_last_login(cls, user_id: str) -> None:
        oid = to_object_id(user_id, "Invalid user ID")
        updated = cls._repository().update({"_id": oid}, {"last_login": utcnow()})
        if updated is None:
            raise NotFoundError("User not found")

    @classmethod
    def validate_credentials(cls, email: str, password: str) -> Optional[Dict[str, Any]]:
        """Return the user when the e-mail and password match an active account."""
        if not email:
            return None
        document = cls._repository().find_by_email(email)
        if document is None or not verify_password(password, document.get("password")):
            return None
        if not document.get("is_active", True):
            return None
        return public_user(document)

    @classmethod
    def remove(cls, user_id: str) -> None:
        oid = to_object_id(user_id, "Invalid user ID")
        if cls._repository().soft_delete({"_id": oid}) is None:
            raise NotFoundError("User not found")
        logger.info("Deleted user %s", user_id)
