"""
Top‑level API router.

Aggregates the domain routers.  When a new domain is introduced,
include its router here.
"""

from fastapi import APIRouter

from .endpoints import health, tasks, users


router = APIRouter()

router.include_router(health.router, tags=["health"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
