"""Shared fixtures.

Every service gets its repository from a ``repository_factory`` class
attribute.  The autouse ``repositories`` fixture replaces those
factories with ``MagicMock`` repositories so no test touches MongoDB.
"""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from fitness_api.app.core.security import create_access_token, hash_password
from fitness_api.app.main import app
from fitness_api.app.schemas.user import ROLE_PERMISSIONS
from fitness_api.app.services.fitness_progress_service import FitnessProgressService
from fitness_api.app.services.profile_service import ProfileService
from fitness_api.app.services.seed_service import SeedService
from fitness_api.app.services.user_service import UserService
from fitness_api.app.services.workout_preference_service import WorkoutPreferenceService

PASSWORD = "Password1!"
PASSWORD_HASH = hash_password(PASSWORD)
CREATED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_user_document(role="user", **overrides):
    document = {
        "_id": ObjectId(),
        "first_name": "Jane",
        "last_name": "Doe",
        "email": f"{role}@example.com",
        "password": PASSWORD_HASH,
        "role": role,
        "permissions": list(ROLE_PERMISSIONS[role]),
        "is_email_verified": False,
        "phone_number": None,
        "profile_picture": None,
        "is_active": True,
        "last_login": None,
        "created_at": CREATED_AT,
        "updated_at": CREATED_AT,
        "is_deleted": False,
        "deleted_at": None,
    }
    document.update(overrides)
    return document


def _repository():
    repository = MagicMock()
    for method in ("find_by_id", "find_one", "find_by_email", "find_by_user_id", "get_series", "get_metric_summary"):
        getattr(repository, method).return_value = None
    repository.find.return_value = []
    return repository


@pytest.fixture(autouse=True)
def repositories(monkeypatch):
    repos = SimpleNamespace(
        users=_repository(),
        profiles=_repository(),
        progress=_repository(),
        preferences=_repository(),
    )
    monkeypatch.setattr(UserService, "repository_factory", lambda: repos.users)
    monkeypatch.setattr(SeedService, "repository_factory", lambda: repos.users)
    monkeypatch.setattr(ProfileService, "repository_factory", lambda: repos.profiles)
    monkeypatch.setattr(FitnessProgressService, "repository_factory", lambda: repos.progress)
    monkeypatch.setattr(FitnessProgressService, "profile_repository_factory", lambda: repos.profiles)
    monkeypatch.setattr(WorkoutPreferenceService, "repository_factory", lambda: repos.preferences)
    monkeypatch.setattr(WorkoutPreferenceService, "profile_repository_factory", lambda: repos.profiles)
    return repos


@pytest.fixture
def known_users(repositories):
    """Users resolvable through ``UserRepository.find_by_id``, keyed by id string."""
    users = {}

    def find_by_id(user_id, include_deleted=False):
        return users.get(str(user_id))

    repositories.users.find_by_id.side_effect = find_by_id
    return users


@pytest.fixture
def login_as(known_users):
    """Register a stored user and return it with matching auth headers."""

    def _login(role="user", **overrides):
        document = make_user_document(role, **overrides)
        known_users[str(document["_id"])] = document
        token = create_access_token({"sub": str(document["_id"]), "email": document["email"], "role": role})
        return document, {"Authorization": f"Bearer {token}"}

    return _login


@pytest.fixture
def client():
    # Not used as a context manager: startup hooks would connect to MongoDB.
    return TestClient(app)


@pytest.fixture
def make_user():
    return make_user_document
