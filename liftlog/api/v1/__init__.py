"""API v1 router aggregation."""

from fastapi import APIRouter

from liftlog.api.v1.endpoints import analytics, exercises, health, templates, workouts

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(exercises.router, prefix="/exercises", tags=["exercises"])
api_router.include_router(templates.router, prefix="/templates", tags=["templates"])
api_router.include_router(workouts.router, prefix="/workouts", tags=["workouts"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
