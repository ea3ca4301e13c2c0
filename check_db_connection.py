"""Check that the configured MongoDB server is reachable.

Pings the server at ``MONGODB_URI`` and prints the database, host and
port.  Exits with status 1 when the server cannot be reached.

Usage:
    python check_db_connection.py
"""
import sys

from fitness_api.app.core.config import settings
from fitness_api.app.core.db import check_connection, close_client
from fitness_api.app.core.logging_config import setup_logging


def main() -> int:
    setup_logging(settings.log_level)
    try:
        result = check_connection()
    finally:
        close_client()
    if not result["ok"]:
        print(f"MongoDB connection failed: {result['error']}")
        return 1
    print(f"Connected to {result['database']} at {result['host']}:{result['port']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
