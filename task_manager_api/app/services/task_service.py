"""
Business logic for tasks.

Every task must point to an existing user.  ``TaskService`` checks
this before a task is created, before it is moved to another user and
before tasks are listed for a particular user.  It also computes the
aggregate statistics shown on the dashboard.
"""

import asyncio
import logging
from typing import List, Optional

from ..core.errors import NotFoundError
from ..repositories.base import Page
from ..repositories.task_repository import TaskRepository
from ..repositories.user_repository import UserRepository
from ..schemas.task import (
    ListTasksQuery,
    TaskCreate,
    TaskRead,
    TaskStatistics,
    TaskStatus,
    TaskUpdate,
)
from .user_service import USER_NOT_FOUND


logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found"


def completion_rate(done: int, total: int) -> int:
    """Percentage of finished tasks, rounded half up; 0 without tasks."""
    if total <= 0:
        return 0
    return (done * 200 + total) // (total * 2)


class TaskService:
    """Service for managing tasks and their statistics."""

    def __init__(
        self,
        tasks: Optional[TaskRepository] = None,
        users: Optional[UserRepository] = None,
    ) -> None:
        self.tasks = tasks or TaskRepository()
        self.users = users or UserRepository()

    async def _validate_user_exists(self, user_id: str) -> None:
        if not await self.users.exists(user_id):
            logger.warning("Referenced user %s does not exist", user_id)
            raise NotFoundError(USER_NOT_FOUND)

    async def create_task(self, data: TaskCreate) -> TaskRead:
        """Create a task for an existing user.

        Raises
        ------
        NotFoundError
            If ``data.user_id`` does not reference a user.  Nothing is
            written in that case.
        """
        await self._validate_user_exists(data.user_id)
        task = await self.tasks.create(data)
        logger.info("Created task %s for user %s", task.id, task.user_id)
        return task

    async def get_task(self, task_id: str) -> TaskRead:
        task = await self.tasks.find_by_id(task_id)
        if task is None:
            raise NotFoundError(TASK_NOT_FOUND)
        return task

    async def list_tasks(self, params: ListTasksQuery) -> Page[TaskRead]:
        if params.user_id:
            await self._validate_user_exists(params.user_id)
        return await self.tasks.find_all(params)

    async def update_task(self, task_id: str, data: TaskUpdate) -> TaskRead:
        """Apply a partial update, re‑validating the owner if it changes."""
        existing = await self.get_task(task_id)
        if data.user_id is not None and data.user_id != existing.user_id:
            await self._validate_user_exists(data.user_id)
        updated = await self.tasks.update(task_id, data)
        if updated is None:
            raise NotFoundError(TASK_NOT_FOUND)
        logger.info("Updated task %s", task_id)
        return updated

    async def delete_task(self, task_id: str) -> TaskRead:
        await self.get_task(task_id)
        removed = await self.tasks.delete(task_id)
        if removed is None:
            raise NotFoundError(TASK_NOT_FOUND)
        logger.info("Deleted task %s", task_id)
        return removed

    async def get_tasks_by_user(self, user_id: str) -> List[TaskRead]:
        await self._validate_user_exists(user_id)
        return await self.tasks.find_by_owner(user_id)

    async def get_statistics(self) -> TaskStatistics:
        """Count pending, done and all tasks concurrently."""
        pending, done, total = await asyncio.gather(
            self.tasks.count_by_status(TaskStatus.PENDING),
            self.tasks.count_by_status(TaskStatus.DONE),
            self.tasks.count(),
        )
        return TaskStatistics(
            pending=pending,
            done=done,
            total=total,
            completion_rate=completion_rate(done, total),
        )
