"""
Task endpoints.

Besides CRUD, tasks can be listed with filters (status, owner, creation
date range, free‑text search over the task and its owner), listed per
user, and summarised by ``/tasks/statistics``.

``/statistics`` is registered before ``/{task_id}`` so it is not
captured by the ID route.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse

from ...schemas.common import validate
from ...schemas.task import ListTasksQuery, TaskCreate, TaskIdParams, TaskOwnerParams, TaskUpdate
from ...services.task_service import TaskService
from ..dependencies import get_task_service
from ..responses import handle


router = APIRouter()


@router.get("", summary="List tasks")
async def list_tasks(
    request: Request,
    service: TaskService = Depends(get_task_service),
) -> JSONResponse:
    """Return a page of tasks.

    Query parameters: ``search``, ``status`` (``PENDING``/``DONE``),
    ``userId``, ``dateFrom``/``dateTo`` (ISO‑8601, inclusive, applied to
    the creation time), ``sortBy`` (``title``, ``status``, ``createdAt``,
    ``updatedAt``), ``sortOrder``, ``page`` and ``limit``.
    """

    async def action():
        params = validate(ListTasksQuery, request.query_params)
        return await service.list_tasks(params)

    return await handle(action)


@router.get("/statistics", summary="Task statistics")
async def get_statistics(service: TaskService = Depends(get_task_service)) -> JSONResponse:
    """Return pending, done and total counts and the completion rate."""
    return await handle(service.get_statistics)


@router.get("/user/{user_id}", summary="List tasks of a user")
async def get_tasks_by_user(
    user_id: str,
    service: TaskService = Depends(get_task_service),
) -> JSONResponse:
    async def action():
        params = validate(TaskOwnerParams, {"userId": user_id})
        return await service.get_tasks_by_user(params.user_id)

    return await handle(action)


@router.get("/{task_id}", summary="Get a task by ID")
async def get_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
) -> JSONResponse:
    async def action():
        params = validate(TaskIdParams, {"id": task_id})
        return await service.get_task(params.id)

    return await handle(action)


@router.post("", summary="Create a task", status_code=status.HTTP_201_CREATED)
async def create_task(
    body: Any = Body(None),
    service: TaskService = Depends(get_task_service),
) -> JSONResponse:
    """Create a task for an existing user (``userId``)."""

    async def action():
        data = validate(TaskCreate, body)
        return await service.create_task(data)

    return await handle(action, message="Task created successfully", status_code=status.HTTP_201_CREATED)


@router.put("/{task_id}", summary="Update a task")
async def update_task(
    task_id: str,
    body: Any = Body(None),
    service: TaskService = Depends(get_task_service),
) -> JSONResponse:
    async def action():
        params = validate(TaskIdParams, {"id": task_id})
        data = validate(TaskUpdate, body)
        return await service.update_task(params.id, data)

    return await handle(action, message="Task updated successfully")


@router.delete("/{task_id}", summary="Delete a task")
async def delete_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
) -> JSONResponse:
    async def action():
        params = validate(TaskIdParams, {"id": task_id})
        await service.delete_task(params.id)
        return None

    return await handle(action, message="Task deleted successfully")
