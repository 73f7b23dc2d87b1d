"""
Data access for tasks.

Every read joins the owning user so that tasks are returned with an
owner summary (``id``, ``name``, ``email``).  Free‑text search covers
the task's title and description as well as the owner's name and
email.
"""

import asyncio
import logging
import sqlite3
import uuid
from typing import Dict, List, Optional

from ..core.db import run_in_connection, to_storage_timestamp, utc_now
from ..schemas.task import (
    ListTasksQuery,
    TaskCreate,
    TaskOwner,
    TaskRead,
    TaskSortField,
    TaskStatus,
    TaskUpdate,
)
from .base import (
    Column,
    Equals,
    Page,
    Range,
    Search,
    build_filter,
    build_sort,
    offset,
    paginate,
)


logger = logging.getLogger(__name__)


ID = Column("id", "t")
TITLE = Column("title", "t")
DESCRIPTION = Column("description", "t")
STATUS = Column("status", "t")
USER_ID = Column("user_id", "t")
CREATED_AT = Column("created_at", "t")
UPDATED_AT = Column("updated_at", "t")
OWNER_NAME = Column("name", "u")
OWNER_EMAIL = Column("email", "u")

SEARCH_COLUMNS = (TITLE, DESCRIPTION, OWNER_NAME, OWNER_EMAIL)

SORT_COLUMNS: Dict[TaskSortField, Column] = {
    TaskSortField.TITLE: TITLE,
    TaskSortField.STATUS: STATUS,
    TaskSortField.CREATED_AT: CREATED_AT,
    TaskSortField.UPDATED_AT: UPDATED_AT,
}

_FROM = "FROM tasks t JOIN users u ON u.id = t.user_id"
_SELECT = (
    "SELECT t.id, t.title, t.description, t.status, t.user_id, t.created_at, "
    "t.updated_at, u.name AS user_name, u.email AS user_email " + _FROM
)


def _to_task(row: sqlite3.Row) -> TaskRead:
    return TaskRead(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        status=row["status"],
        user_id=row["user_id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        user=TaskOwner(id=row["user_id"], name=row["user_name"], email=row["user_email"]),
    )


def _select_by_id(conn: sqlite3.Connection, task_id: str) -> Optional[TaskRead]:
    row = conn.execute(f"{_SELECT} WHERE t.id = ?", (task_id,)).fetchone()
    return _to_task(row) if row else None


class TaskRepository:
    """Repository for the ``tasks`` table."""

    async def find_by_id(self, task_id: str) -> Optional[TaskRead]:
        return await run_in_connection(lambda conn: _select_by_id(conn, task_id))

    async def exists(self, task_id: str) -> bool:
        def query(conn: sqlite3.Connection) -> bool:
            row = conn.execute("SELECT 1 FROM tasks WHERE id = ? LIMIT 1", (task_id,)).fetchone()
            return row is not None

        return await run_in_connection(query)

    async def find_all(self, params: ListTasksQuery) -> Page[TaskRead]:
        """Return one page of tasks matching the query's filters.

        The page and the total count are fetched concurrently.
        """
        predicate = build_filter(
            Search(params.search, SEARCH_COLUMNS),
            Equals(STATUS, params.status.value if params.status else None),
            Equals(USER_ID, params.user_id),
            Range(
                CREATED_AT,
                lower=to_storage_timestamp(params.date_from) if params.date_from else None,
                upper=to_storage_timestamp(params.date_to) if params.date_to else None,
            ),
        )
        sort = build_sort(SORT_COLUMNS[params.sort_by], params.sort_order, tiebreaker=ID)

        def fetch_page(conn: sqlite3.Connection) -> List[TaskRead]:
            rows = conn.execute(
                f"{_SELECT} {predicate.where} {sort.sql} LIMIT ? OFFSET ?",
                predicate.params + (params.limit, offset(params.page, params.limit)),
            ).fetchall()
            return [_to_task(row) for row in rows]

        def count(conn: sqlite3.Connection) -> int:
            row = conn.execute(
                f"SELECT COUNT(*) AS total {_FROM} {predicate.where}", predicate.params
            ).fetchone()
            return row["total"]

        tasks, total = await asyncio.gather(
            run_in_connection(fetch_page), run_in_connection(count)
        )
        return paginate(tasks, total, params.page, params.limit)

    async def find_by_owner(self, user_id: str) -> List[TaskRead]:
        """Return every task of ``user_id``, newest first."""

        def query(conn: sqlite3.Connection) -> List[TaskRead]:
            rows = conn.execute(
                f"{_SELECT} WHERE t.user_id = ? ORDER BY t.created_at DESC, t.id DESC", (user_id,)
            ).fetchall()
            return [_to_task(row) for row in rows]

        return await run_in_connection(query)

    async def count_by_status(self, status: TaskStatus) -> int:
        def query(conn: sqlite3.Connection) -> int:
            row = conn.execute(
                "SELECT COUNT(*) AS total FROM tasks WHERE status = ?", (TaskStatus(status).value,)
            ).fetchone()
            return row["total"]

        return await run_in_connection(query)

    async def count(self) -> int:
        def query(conn: sqlite3.Connection) -> int:
            return conn.execute("SELECT COUNT(*) AS total FROM tasks").fetchone()["total"]

        return await run_in_connection(query)

    async def create(self, data: TaskCreate) -> TaskRead:
        task_id = str(uuid.uuid4())
        now = utc_now()
        values = data.model_dump(mode="json")

        def insert(conn: sqlite3.Connection) -> TaskRead:
            conn.execute(
                "INSERT INTO tasks (id, title, description, status, user_id, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    task_id,
                    values["title"],
                    values["description"],
                    values["status"],
                    values["user_id"],
                    now,
                    now,
                ),
            )
            return _select_by_id(conn, task_id)

        task = await run_in_connection(insert)
        logger.debug("Inserted task %s for user %s", task_id, data.user_id)
        return task

    async def update(self, task_id: str, data: TaskUpdate) -> Optional[TaskRead]:
        changes = data.changes()

        def write(conn: sqlite3.Connection) -> Optional[TaskRead]:
            assignments = [f"{name} = ?" for name in changes] + ["updated_at = ?"]
            values = list(changes.values()) + [utc_now(), task_id]
            conn.execute(f"UPDATE tasks SET {', '.join(assignments)} WHERE id = ?", values)
            return _select_by_id(conn, task_id)

        return await run_in_connection(write)

    async def delete(self, task_id: str) -> Optional[TaskRead]:
        """Delete a task and return it as it was before removal."""

        def remove(conn: sqlite3.Connection) -> Optional[TaskRead]:
            task = _select_by_id(conn, task_id)
            if task is None:
                return None
            conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            return task

        return await run_in_connection(remove)
