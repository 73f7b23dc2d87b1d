"""
Shared building blocks for request and response schemas.

Every schema derives from ``APIModel`` so that field names are
snake_case in Python and camelCase on the wire.  ``validate`` turns a
raw mapping (query parameters, path parameters or a JSON body) into a
typed model, converting pydantic's errors into the application's
``ValidationError``.
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Mapping, Type, TypeVar
from uuid import UUID

from pydantic import AfterValidator, BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ..core.errors import ValidationError


ModelT = TypeVar("ModelT", bound=BaseModel)


class APIModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "str_strip_whitespace": True,
        "from_attributes": True,
    }


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def _check_uuid(value: str) -> str:
    try:
        return str(UUID(value))
    except ValueError:
        raise ValueError("Invalid ID format, expected a UUID")


UUIDStr = Annotated[str, AfterValidator(_check_uuid)]


class IdParams(APIModel):
    """Path parameters identifying a single entity."""

    id: UUIDStr


MAX_LIMIT = 100
# Largest page whose offset still fits in a signed 64-bit SQLite integer.
MAX_PAGE = (2**63 - 1) // MAX_LIMIT


class PageQuery(APIModel):
    """Pagination parameters shared by every list query."""

    page: int = Field(1, ge=1, le=MAX_PAGE)
    limit: int = Field(10, ge=1, le=MAX_LIMIT)
    sort_order: SortOrder = SortOrder.DESC


class PaginationMeta(APIModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


def _format_errors(exc: PydanticValidationError) -> List[Dict[str, Any]]:
    details = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "body"
        message = error["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.append({"field": field, "message": message, "code": "VALIDATION_ERROR"})
    return details


def validate(model: Type[ModelT], data: Any) -> ModelT:
    """Validate ``data`` against ``model``.

    Raises
    ------
    ValidationError
        With one entry per invalid field.
    """
    if isinstance(data, Mapping):
        data = dict(data)
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(_format_errors(exc))
