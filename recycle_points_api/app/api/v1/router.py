"""
Top-level router for version 1 of the API.

This router aggregates the domain routers (points, items, sessions)
under a unified prefix.  When new domains are introduced, update this
file to include their routers.
"""

from fastapi import APIRouter

from .endpoints import items, points, sessions

router = APIRouter()

router.include_router(points.router, prefix="/points", tags=["points"])
router.include_router(items.router, prefix="/items", tags=["items"])
router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
