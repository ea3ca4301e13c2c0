"""Entry point for the fitness API.

Starts the FastAPI application with Uvicorn.  Host and port are read
from the environment variables ``API_HOST`` and ``API_PORT`` (defaults
``0.0.0.0`` and ``8000``); the remaining configuration is read by
``fitness_api.app.core.config``.

Usage:
    python run.py
"""
import os

import uvicorn


def main() -> None:
    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    uvicorn.run("fitness_api.app.main:app", host=host, port=port, reload=False, log_level="info")


if __name__ == "__main__":
    try:
        main()
    except (KeyboardInterrupt, SystemExit):
        pass
