"""
MongoDB integration.

This module owns the single ``MongoClient`` used by the process
(``get_client``), hands out the application database
(``get_database``), creates collection indexes on application start
(``init_db``) and provides a connectivity probe used by the health
endpoint and the ``check_db_connection.py`` script.

``MongoClient`` connects lazily, so importing this module or calling
``get_database`` never blocks on the network; the first query does.
"""

import logging
from functools import lru_cache
from typing import Any, Dict

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from .config import settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_client() -> MongoClient:
    """Create (once) and return the shared MongoDB client."""
    logger.info("Creating MongoDB client for database %s", settings.mongodb_db_name)
    return MongoClient(
        settings.mongodb_uri,
        maxPoolSize=settings.mongodb_max_pool_size,
        serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
        socketTimeoutMS=settings.mongodb_socket_timeout_ms,
        retryWrites=True,
        retryReads=True,
        tz_aware=True,
    )


def get_database() -> Database:
    """Return the application database."""
    return get_client()[settings.mongodb_db_name]


def close_client() -> None:
    """Close the shared client, if one was created."""
    if get_client.cache_info().currsize:
        get_client().close()
        get_client.cache_clear()
        logger.info("MongoDB connection closed")


def init_db() -> None:
    """Create the indexes every collection relies on.

    ``create_index`` is idempotent, so running this on every start is
    safe.  Repositories are imported here to keep ``core`` free of
    import cycles.
    """
    from ..repositories.fitness_progress_repository import FitnessProgressRepository
    from ..repositories.profile_repository import ProfileRepository
    from ..repositories.user_repository import UserRepository
    from ..repositories.workout_preference_repository import WorkoutPreferenceRepository

    database = get_database()
    for repository_cls in (
        UserRepository,
        ProfileRepository,
        FitnessProgressRepository,
        WorkoutPreferenceRepository,
    ):
        repository_cls(database).ensure_indexes()
        logger.info("Indexes ensured for collection %s", repository_cls.collection_name)


def check_connection() -> Dict[str, Any]:
    """Ping the server and describe the connection.

    Returns a dict with ``ok`` plus the database name, host and port on
    success, or the error message on failure.  Never raises on driver
    errors.
    """
    client = get_client()
    try:
        client.admin.command("ping")
    except PyMongoError as exc:
        logger.error("MongoDB connection check failed: %s", exc)
        return {"ok": False, "error": str(exc)}
    host, port = client.address or (None, None)
    details = {
        "ok": True,
        "database": settings.mongodb_db_name,
        "host": host,
        "port": port,
    }
    logger.info("Connected to MongoDB %(database)s at %(host)s:%(port)s", details)
    return details
