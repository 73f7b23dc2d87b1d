"""
Data access for users.

Missing rows are reported as ``None``; deciding whether that is an
error is left to ``UserService``.
"""

import asyncio
import logging
import sqlite3
import uuid
from typing import Dict, List, Optional

from ..core.db import run_in_connection, utc_now
from ..core.errors import ConflictError
from ..schemas.user import (
    ListUsersQuery,
    UserCreate,
    UserRead,
    UserSortField,
    UserTaskSummary,
    UserUpdate,
    UserWithTasks,
)
from .base import Column, Page, Search, build_filter, build_sort, offset, paginate


logger = logging.getLogger(__name__)


ID = Column("id", "u")
NAME = Column("name", "u")
EMAIL = Column("email", "u")
CREATED_AT = Column("created_at", "u")

SEARCH_COLUMNS = (NAME, EMAIL)

SORT_COLUMNS: Dict[UserSortField, Column] = {
    UserSortField.NAME: NAME,
    UserSortField.EMAIL: EMAIL,
    UserSortField.CREATED_AT: CREATED_AT,
}

_SELECT = "SELECT u.id, u.name, u.email, u.created_at, u.updated_at FROM users u"


def _to_user(row: sqlite3.Row) -> UserRead:
    return UserRead(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _task_summaries(
    conn: sqlite3.Connection, user_ids: List[str]
) -> Dict[str, List[UserTaskSummary]]:
    summaries: Dict[str, List[UserTaskSummary]] = {user_id: [] for user_id in user_ids}
    if not user_ids:
        return summaries
    placeholders = ", ".join("?" for _ in user_ids)
    rows = conn.execute(
        f"SELECT id, title, status, created_at, user_id FROM tasks "
        f"WHERE user_id IN ({placeholders}) ORDER BY created_at DESC, id DESC",
        tuple(user_ids),
    ).fetchall()
    for row in rows:
        summaries[row["user_id"]].append(
            UserTaskSummary(
                id=row["id"],
                title=row["title"],
                status=row["status"],
                created_at=row["created_at"],
            )
        )
    return summaries


class UserRepository:
    """Repository for the ``users`` table."""

    async def find_by_id(self, user_id: str) -> Optional[UserRead]:
        def query(conn: sqlite3.Connection) -> Optional[UserRead]:
            row = conn.execute(f"{_SELECT} WHERE u.id = ?", (user_id,)).fetchone()
            return _to_user(row) if row else None

        return await run_in_connection(query)

    async def find_by_email(self, email: str) -> Optional[UserRead]:
        def query(conn: sqlite3.Connection) -> Optional[UserRead]:
            row = conn.execute(f"{_SELECT} WHERE u.email = ?", (email,)).fetchone()
            return _to_user(row) if row else None

        return await run_in_connection(query)

    async def exists(self, user_id: str) -> bool:
        def query(conn: sqlite3.Connection) -> bool:
            row = conn.execute("SELECT 1 FROM users WHERE id = ? LIMIT 1", (user_id,)).fetchone()
            return row is not None

        return await run_in_connection(query)

    async def find_all(self, params: ListUsersQuery) -> Page[UserWithTasks]:
        """Return one page of users, each with a summary of its tasks.

        The page and the total count are fetched concurrently.
        """
        predicate = build_filter(Search(params.search, SEARCH_COLUMNS))
        sort = build_sort(SORT_COLUMNS[params.sort_by], params.sort_order, tiebreaker=ID)

        def fetch_page(conn: sqlite3.Connection) -> List[UserWithTasks]:
            rows = conn.execute(
                f"{_SELECT} {predicate.where} {sort.sql} LIMIT ? OFFSET ?",
                predicate.params + (params.limit, offset(params.page, params.limit)),
            ).fetchall()
            users = [_to_user(row) for row in rows]
            tasks = _task_summaries(conn, [user.id for user in users])
            return [UserWithTasks(**user.model_dump(), tasks=tasks[user.id]) for user in users]

        def count(conn: sqlite3.Connection) -> int:
            row = conn.execute(
                f"SELECT COUNT(*) AS total FROM users u {predicate.where}", predicate.params
            ).fetchone()
            return row["total"]

        users, total = await asyncio.gather(
            run_in_connection(fetch_page), run_in_connection(count)
        )
        return paginate(users, total, params.page, params.limit)

    async def create(self, data: UserCreate) -> UserRead:
        user_id = str(uuid.uuid4())
        now = utc_now()

        def insert(conn: sqlite3.Connection) -> UserRead:
            conn.execute(
                "INSERT INTO users (id, name, email, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                (user_id, data.name, data.email, now, now),
            )
            row = conn.execute(f"{_SELECT} WHERE u.id = ?", (user_id,)).fetchone()
            return _to_user(row)

        try:
            user = await run_in_connection(insert)
        except sqlite3.IntegrityError as exc:
            # Lost a race with a concurrent insert of the same email.
            logger.warning("Unique constraint violated while creating user %s: %s", data.email, exc)
            raise ConflictError("Email already exists")
        logger.debug("Inserted user %s", user.id)
        return user

    async def update(self, user_id: str, data: UserUpdate) -> Optional[UserRead]:
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        def write(conn: sqlite3.Connection) -> Optional[UserRead]:
            assignments = [f"{name} = ?" for name in changes] + ["updated_at = ?"]
            values = list(changes.values()) + [utc_now(), user_id]
            conn.execute(f"UPDATE users SET {', '.join(assignments)} WHERE id = ?", values)
            row = conn.execute(f"{_SELECT} WHERE u.id = ?", (user_id,)).fetchone()
            return _to_user(row) if row else None

        try:
            return await run_in_connection(write)
        except sqlite3.IntegrityError as exc:
            logger.warning("Unique constraint violated while updating user %s: %s", user_id, exc)
            raise ConflictError("Email already exists")

    async def delete(self, user_id: str) -> Optional[UserWithTasks]:
        """Delete a user and return it with the tasks removed by the cascade."""

        def remove(conn: sqlite3.Connection) -> Optional[UserWithTasks]:
            row = conn.execute(f"{_SELECT} WHERE u.id = ?", (user_id,)).fetchone()
            if not row:
                return None
            user = _to_user(row)
            tasks = _task_summaries(conn, [user_id])[user_id]
            conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
            return UserWithTasks(**user.model_dump(), tasks=tasks)

        return await run_in_connection(remove)
