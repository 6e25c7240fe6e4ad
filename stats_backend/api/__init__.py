"""
Backend API package initialization.

This package contains FastAPI router modules for the Stats Query backend:
- stats: Query normalization for dashboard requests
"""

from fastapi import APIRouter

from stats_backend.api.stats import router as stats_router

# Create main API router
api_router = APIRouter()

api_router.include_router(stats_router, prefix="/stats", tags=["stats"])

__all__ = [
    "api_router",
    "stats_router",
]
