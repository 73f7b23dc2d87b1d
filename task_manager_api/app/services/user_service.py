"""
Business logic for users.

``UserService`` enforces the rules the storage layer does not express
on its own: e‑mail addresses are unique and operations on a missing
user fail with ``NotFoundError`` instead of silently doing nothing.
"""

import logging
from typing import Optional

from ..core.errors import ConflictError, NotFoundError
from ..repositories.base import Page
from ..repositories.user_repository import UserRepository
from ..schemas.user import ListUsersQuery, UserCreate, UserRead, UserUpdate, UserWithTasks


logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"
EMAIL_EXISTS = "Email already exists"


class UserService:
    """Service for creating, reading, updating and deleting users."""

    def __init__(self, users: Optional[UserRepository] = None) -> None:
        self.users = users or UserRepository()

    async def create_user(self, data: UserCreate) -> UserRead:
        """Register a new user.

        Raises
        ------
        ConflictError
            If another user already uses ``data.email``.
        """
        if await self.users.find_by_email(data.email):
            logger.warning("Rejected user creation, email %s already in use", data.email)
            raise ConflictError(EMAIL_EXISTS)
        user = await self.users.create(data)
        logger.info("Created user %s (%s)", user.id, user.email)
        return user

    async def get_user(self, user_id: str) -> UserRead:
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND)
        return user

    async def list_users(self, params: ListUsersQuery) -> Page[UserWithTasks]:
        return await self.users.find_all(params)

    async def update_user(self, user_id: str, data: UserUpdate) -> UserRead:
        """Apply a partial update.

        When the e‑mail changes, uniqueness is checked again against
        every other user.

        Raises
        ------
        NotFoundError
            If the user does not exist.
        ConflictError
            If the new e‑mail belongs to another user.
        """
        existing = await self.get_user(user_id)
        if data.email is not None and data.email != existing.email:
            if await self.users.find_by_email(data.email):
                logger.warning("Rejected email change for user %s, %s already in use", user_id, data.email)
                raise ConflictError(EMAIL_EXISTS)
        updated = await self.users.update(user_id, data)
        if updated is None:
            # Deleted between the existence check and the write.
            raise NotFoundError(USER_NOT_FOUND)
        logger.info("Updated user %s", user_id)
        return updated

    async def delete_user(self, user_id: str) -> UserWithTasks:
        """Delete a user and its tasks; return the removed user."""
        await self.get_user(user_id)
        removed = await self.users.delete(user_id)
        if removed is None:
            raise NotFoundError(USER_NOT_FOUND)
        logger.info("Deleted user %s together with %d task(s)", user_id, len(removed.tasks))
        return removed

    async def validate_user_exists(self, user_id: str) -> None:
        if not await self.users.exists(user_id):
            logger.warning("User %s does not exist", user_id)
            raise NotFoundError(USER_NOT_FOUND)

    async def get_user_by_email(self, email: str) -> Optional[UserRead]:
        return await self.users.find_by_email(email)
