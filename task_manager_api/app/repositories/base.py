"""
Pagination, filtering and sorting helpers shared by the repositories.

Repositories do not inherit from a common base class.  Instead they
declare their columns as ``Column`` constants and combine the helpers
in this module:

* ``Search``, ``Equals`` and ``Range`` are typed filter expressions.
  ``build_filter`` drops the ones that carry no value and joins the
  rest into a single ``Predicate`` (SQL text plus bound parameters).
* ``build_sort`` renders an ``ORDER BY`` clause on one field, followed
  by the primary key when one is given.
* ``paginate`` wraps one page of rows together with the pagination
  block returned to clients.

Column names never come from user input; callers map validated enum
values to ``Column`` constants before reaching this module.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, Sequence, Tuple, TypeVar, Union

from ..schemas.common import PaginationMeta, SortOrder


T = TypeVar("T")


@dataclass(frozen=True)
class Column:
    """A column reference, optionally qualified by a table alias."""

    name: str
    table: Optional[str] = None

    @property
    def sql(self) -> str:
        return f"{self.table}.{self.name}" if self.table else self.name


@dataclass(frozen=True)
class Search:
    """Case‑insensitive substring match against any of ``columns``."""

    term: Optional[str]
    columns: Tuple[Column, ...]


@dataclass(frozen=True)
class Equals:
    column: Column
    value: Any


@dataclass(frozen=True)
class Range:
    """Inclusive range.  Either bound may be ``None``."""

    column: Column
    lower: Any = None
    upper: Any = None


FilterExpression = Union[Search, Equals, Range]


@dataclass(frozen=True)
class Predicate:
    sql: str = ""
    params: Tuple[Any, ...] = ()

    @property
    def where(self) -> str:
        """The predicate as a ``WHERE`` clause, or an empty string."""
        return f"WHERE {self.sql}" if self.sql else ""


@dataclass(frozen=True)
class Sort:
    """Sort on one column, with an optional unique column to break ties."""

    column: Column
    order: SortOrder = SortOrder.DESC
    tiebreaker: Optional[Column] = None

    @property
    def sql(self) -> str:
        direction = "ASC" if self.order == SortOrder.ASC else "DESC"
        keys = [f"{self.column.sql} {direction}"]
        if self.tiebreaker is not None and self.tiebreaker != self.column:
            keys.append(f"{self.tiebreaker.sql} {direction}")
        return "ORDER BY " + ", ".join(keys)


@dataclass
class Page(Generic[T]):
    data: List[T]
    pagination: PaginationMeta


@dataclass
class _Clauses:
    parts: List[str] = field(default_factory=list)
    params: List[Any] = field(default_factory=list)


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so ``term`` matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _compile(expression: FilterExpression, clauses: _Clauses) -> None:
    if isinstance(expression, Search):
        if not expression.term or not expression.columns:
            return
        pattern = f"%{escape_like(expression.term.casefold())}%"
        alternatives = [
            f"casefold({column.sql}) LIKE ? ESCAPE '\\'" for column in expression.columns
        ]
        clauses.parts.append("(" + " OR ".join(alternatives) + ")")
        clauses.params.extend([pattern] * len(expression.columns))
    elif isinstance(expression, Equals):
        if expression.value is None:
            return
        clauses.parts.append(f"{expression.column.sql} = ?")
        clauses.params.append(expression.value)
    elif isinstance(expression, Range):
        if expression.lower is not None:
            clauses.parts.append(f"{expression.column.sql} >= ?")
            clauses.params.append(expression.lower)
        if expression.upper is not None:
            clauses.parts.append(f"{expression.column.sql} <= ?")
            clauses.params.append(expression.upper)
    else:
        raise TypeError(f"Unsupported filter expression: {expression!r}")


def build_filter(*expressions: FilterExpression) -> Predicate:
    """Combine filter expressions with ``AND``.

    Expressions without a value (empty search term, ``None`` equality
    value, range without bounds) are skipped.  With nothing left the
    resulting predicate matches every row.
    """
    clauses = _Clauses()
    for expression in expressions:
        _compile(expression, clauses)
    return Predicate(sql=" AND ".join(clauses.parts), params=tuple(clauses.params))


def build_sort(
    column: Column,
    order: SortOrder = SortOrder.DESC,
    tiebreaker: Optional[Column] = None,
) -> Sort:
    """Sort by ``column``, then by ``tiebreaker`` so pages never overlap."""
    return Sort(column=column, order=SortOrder(order), tiebreaker=tiebreaker)


def offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def paginate(items: Sequence[T], total: int, page: int, limit: int) -> Page[T]:
    """Build a page from ``items`` and the total number of matching rows.

    ``totalPages`` is ``ceil(total / limit)``, so an empty result has
    zero pages, ``hasNext`` is false and ``hasPrev`` only depends on the
    requested page.
    """
    total_pages = math.ceil(total / limit)
    return Page(
        data=list(items),
        pagination=PaginationMeta(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        ),
    )
