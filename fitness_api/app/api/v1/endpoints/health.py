"""
Health check endpoint.  Public; reports whether MongoDB answers a ping.
"""

from fastapi import APIRouter

from ....core.db import check_connection

router = APIRouter()


@router.get("/health")
def health() -> dict:
    database = "up" if check_connection().get("ok") else "down"
    return {"status": "ok", "database": database}
