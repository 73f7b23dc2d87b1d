"""
Pydantic models for user data.

Defines schemas for creating, updating, listing and reading users.
Bodies and query strings use camelCase names (``sortBy``), Python code
uses snake_case (``sort_by``).
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, List, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, Field, field_validator, model_validator

from .common import APIModel, IdParams, PageQuery, PaginationMeta


NAME_MAX_LENGTH = 255
EMAIL_MAX_LENGTH = 255


def _check_email(value: str) -> str:
    """Check the address format and return it exactly as given.

    Addresses are compared case-sensitively, so the domain is not
    normalised and the ``Name <address>`` form is refused.
    """
    if len(value) > EMAIL_MAX_LENGTH:
        raise ValueError("Email is too long")
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError(f"Invalid email format: {exc}")
    return value


Email = Annotated[str, AfterValidator(_check_email)]


class UserCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH, examples=["John Doe"])
    email: Email = Field(..., examples=["john@example.com"])


class UserUpdate(APIModel):
    """Partial update.  At least one field must be present."""

    name: Optional[str] = Field(None, min_length=1, max_length=NAME_MAX_LENGTH)
    email: Optional[Email] = None

    @model_validator(mode="after")
    def require_one_field(self) -> "UserUpdate":
        provided = {name for name in self.model_fields_set if getattr(self, name) is not None}
        if not provided:
            raise ValueError("At least one field must be provided")
        return self


class UserIdParams(IdParams):
    pass


class UserSortField(str, Enum):
    NAME = "name"
    EMAIL = "email"
    CREATED_AT = "createdAt"


class ListUsersQuery(PageQuery):
    search: Optional[str] = None
    sort_by: UserSortField = UserSortField.CREATED_AT

    @field_validator("search")
    @classmethod
    def blank_search_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class UserTaskSummary(APIModel):
    """Lightweight view of a task embedded in a user listing."""

    id: str
    title: str
    status: str
    created_at: datetime


class UserRead(APIModel):
    """Schema for reading a user from the API."""

    id: str
    name: str
    email: str
    created_at: datetime
    updated_at: datetime


class UserWithTasks(UserRead):
    tasks: List[UserTaskSummary] = []


class UserPage(APIModel):
    data: List[UserWithTasks]
    pagination: PaginationMeta
