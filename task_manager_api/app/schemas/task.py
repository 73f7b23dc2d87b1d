"""
Pydantic models for tasks.

A task belongs to exactly one user (``userId``) and moves between the
``PENDING`` and ``DONE`` states.  Read models embed a short summary of
the owning user so clients do not need a second request.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from .common import APIModel, IdParams, PageQuery, PaginationMeta, UUIDStr


TITLE_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 1000


class TaskStatus(str, Enum):
    PENDING = "PENDING"
    DONE = "DONE"


class TaskCreate(APIModel):
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH, examples=["Write report"])
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    status: TaskStatus = TaskStatus.PENDING
    user_id: UUIDStr


class TaskUpdate(APIModel):
    """Partial update.  At least one field must be present.

    ``description`` may be set to ``null`` to clear it; ``null`` for any
    other field is treated as "not provided".
    """

    title: Optional[str] = Field(None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    status: Optional[TaskStatus] = None
    user_id: Optional[UUIDStr] = None

    @model_validator(mode="after")
    def require_one_field(self) -> "TaskUpdate":
        provided = [
            name
            for name in self.model_fields_set
            if name == "description" or getattr(self, name) is not None
        ]
        if not provided:
            raise ValueError("At least one field must be provided")
        return self

    def changes(self) -> dict:
        """Return the columns to write, keyed by field name."""
        values = self.model_dump(mode="json", exclude_unset=True)
        return {
            name: value
            for name, value in values.items()
            if name == "description" or value is not None
        }


class TaskIdParams(IdParams):
    pass


class TaskOwnerParams(APIModel):
    user_id: UUIDStr


class TaskSortField(str, Enum):
    TITLE = "title"
    STATUS = "status"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"


class ListTasksQuery(PageQuery):
    search: Optional[str] = None
    status: Optional[TaskStatus] = None
    user_id: Optional[UUIDStr] = None
    sort_by: TaskSortField = TaskSortField.CREATED_AT
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    @field_validator("search")
    @classmethod
    def blank_search_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @field_validator("date_from", "date_to")
    @classmethod
    def to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        # Naive values are treated as UTC, matching how they are stored.
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        try:
            return value.astimezone(timezone.utc)
        except OverflowError:
            raise ValueError("Date is out of range")

    @model_validator(mode="after")
    def check_date_range(self) -> "ListTasksQuery":
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("dateFrom must not be later than dateTo")
        return self


class TaskOwner(APIModel):
    id: str
    name: str
    email: str


class TaskRead(APIModel):
    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    user_id: str
    created_at: datetime
    updated_at: datetime
    user: TaskOwner


class TaskPage(APIModel):
    data: List[TaskRead]
    pagination: PaginationMeta


class TaskStatistics(APIModel):
    pending: int
    done: int
    total: int
    completion_rate: int
