"""
Initial data for a fresh database.

``seed_initial_users`` creates the super administrator and the gym
administrator accounts configured in ``settings`` when no account of
that role exists yet.  Running it again is a no-op.
"""

import logging
from typing import List

from ..core.config import settings
from ..core.security import hash_password
from ..repositories.user_repository import UserRepository
from ..schemas.user import ROLE_PERMISSIONS, UserRole

logger = logging.getLogger(__name__)


class SeedService:
    repository_factory = UserRepository

    @classmethod
    def seed_initial_users(cls) -> List[str]:
        """Create the missing administrator accounts and return their e-mails."""
        repository = cls.repository_factory()
        accounts = (
            (UserRole.SUPER_ADMIN, "Super", "Admin", settings.super_admin_email, settings.super_admin_password),
            (UserRole.ADMIN, "Gym", "Admin", settings.admin_email, settings.admin_password),
        )
        created = []
        for role, first_name, last_name, email, password in accounts:
            if repository.exists_with_role(role.value):
                logger.info("%s account already present, skipping", role.value)
                continue
            email = email.strip().lower()
            if repository.find_by_email(email, include_deleted=True) is not None:
                logger.warning("Cannot seed %s: e-mail %s is taken by another account", role.value, email)
                continue
            repository.create({
                "first_name": first_name,
                "last_name": last_name,
                "email": email,
                "password": hash_password(password),
                "role": role.value,
                "permissions": list(ROLE_PERMISSIONS[role.value]),
                "is_email_verified": True,
                "phone_number": None,
                "profile_picture": None,
                "is_active": True,
                "last_login": None,
            })
            logger.info("Seeded %s account %s", role.value, email)
            created.append(email)
        return created
