"""
User endpoints.

Provide listing with search, sorting and pagination, plus the usual
create/read/update/delete operations.  Every handler validates its
inputs explicitly and returns the uniform response envelope.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse

from ...schemas.common import validate
from ...schemas.user import ListUsersQuery, UserCreate, UserIdParams, UserUpdate
from ...services.user_service import UserService
from ..dependencies import get_user_service
from ..responses import handle


router = APIRouter()


@router.get("", summary="List users")
async def list_users(
    request: Request,
    service: UserService = Depends(get_user_service),
) -> JSONResponse:
    """Return a page of users.

    Query parameters: ``search`` (name or e‑mail, case‑insensitive),
    ``sortBy`` (``name``, ``email``, ``createdAt``), ``sortOrder``
    (``asc``/``desc``), ``page`` and ``limit`` (1–100).  Each user
    carries a short summary of its tasks.
    """

    async def action():
        params = validate(ListUsersQuery, request.query_params)
        return await service.list_users(params)

    return await handle(action)


@router.get("/{user_id}", summary="Get a user by ID")
async def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
) -> JSONResponse:
    async def action():
        params = validate(UserIdParams, {"id": user_id})
        return await service.get_user(params.id)

    return await handle(action)


@router.post("", summary="Create a user", status_code=status.HTTP_201_CREATED)
async def create_user(
    body: Any = Body(None),
    service: UserService = Depends(get_user_service),
) -> JSONResponse:
    """Register a new user.  The e‑mail address must not be in use."""

    async def action():
        data = validate(UserCreate, body)
        return await service.create_user(data)

    return await handle(action, message="User created successfully", status_code=status.HTTP_201_CREATED)


@router.put("/{user_id}", summary="Update a user")
async def update_user(
    user_id: str,
    body: Any = Body(None),
    service: UserService = Depends(get_user_service),
) -> JSONResponse:
    """Partially update ``name`` and/or ``email``."""

    async def action():
        params = validate(UserIdParams, {"id": user_id})
        data = validate(UserUpdate, body)
        return await service.update_user(params.id, data)

    return await handle(action, message="User updated successfully")


@router.delete("/{user_id}", summary="Delete a user")
async def delete_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
) -> JSONResponse:
    """Delete a user.  Its tasks are removed as well."""

    async def action():
        params = validate(UserIdParams, {"id": user_id})
        return await service.delete_user(params.id)

    return await handle(action, message="User deleted successfully")
