"""
Top-level router for version 1 of the API.

This router aggregates the domain routers under a unified prefix.
When a new domain is introduced, include its router here.
"""

from fastapi import APIRouter

from .endpoints import auth, fitness_progress, health, profiles, users, workout_preferences

router = APIRouter()

router.include_router(health.router, tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(profiles.router, prefix="/profiles", tags=["profiles"])
router.include_router(fitness_progress.router, prefix="/fitness-progress", tags=["fitness-progress"])
router.include_router(workout_preferences.router, prefix="/workout-preferences", tags=["workout-preferences"])
