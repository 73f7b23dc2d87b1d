"""
FastAPI dependency providers.

Handlers receive their services through ``Depends`` so tests can swap
them via ``app.dependency_overrides``.
"""

from ..services.task_service import TaskService
from ..services.user_service import UserService


def get_user_service() -> UserService:
    return UserService()


def get_task_service() -> TaskService:
    return TaskService()
