"""Seed the initial administrator accounts.

Creates the super administrator and the gym administrator configured
through ``SUPER_ADMIN_EMAIL``/``SUPER_ADMIN_PASSWORD`` and
``ADMIN_EMAIL``/``ADMIN_PASSWORD`` unless accounts with those roles
already exist.

Usage:
    python seed.py
"""
import logging

from fitness_api.app.core.config import settings
from fitness_api.app.core.db import close_client, init_db
from fitness_api.app.core.logging_config import setup_logging
from fitness_api.app.services.seed_service import SeedService


def main() -> None:
    setup_logging(settings.log_level, settings.log_file or None)
    try:
        init_db()
        created = SeedService.seed_initial_users()
        if created:
            logging.info("Seed completed, created: %s", ", ".join(created))
        else:
            logging.info("Seed completed, nothing to create")
    finally:
        close_client()


if __name__ == "__main__":
    main()
