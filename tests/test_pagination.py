"""
Tests for the shared pagination, filter and sort helpers.
"""

import math

import pytest

from task_manager_api.app.repositories.base import (
    Column,
    Equals,
    Range,
    Search,
    build_filter,
    build_sort,
    escape_like,
    offset,
    paginate,
)
from task_manager_api.app.schemas.common import MAX_LIMIT, MAX_PAGE, SortOrder


class TestPaginate:
    @pytest.mark.parametrize(
        "total,page,limit",
        [
            (0, 1, 10),
            (1, 1, 1),
            (9, 1, 10),
            (10, 1, 10),
            (11, 2, 10),
            (25, 1, 10),
            (25, 3, 10),
            (25, 4, 10),
            (100, 5, 20),
            (101, 1, 100),
        ],
    )
    def test_pagination_block(self, total, page, limit):
        page_obj = paginate([], total, page, limit)
        meta = page_obj.pagination
        assert meta.total_pages == math.ceil(total / limit)
        assert meta.has_next == (page < meta.total_pages)
        assert meta.has_prev == (page > 1)
        assert meta.page == page
        assert meta.limit == limit
        assert meta.total == total

    def test_first_of_three_pages(self):
        page_obj = paginate(list(range(10)), 25, 1, 10)
        assert len(page_obj.data) == 10
        assert page_obj.pagination.total_pages == 3
        assert page_obj.pagination.has_next is True
        assert page_obj.pagination.has_prev is False

    def test_empty_result(self):
        page_obj = paginate([], 0, 1, 10)
        assert page_obj.data == []
        assert page_obj.pagination.total_pages == 0
        assert page_obj.pagination.has_next is False

    def test_serialized_with_camel_case(self):
        dumped = paginate([], 5, 1, 2).pagination.model_dump(by_alias=True)
        assert dumped == {
            "page": 1,
            "limit": 2,
            "total": 5,
            "totalPages": 3,
            "hasNext": True,
            "hasPrev": False,
        }

    def test_offset(self):
        assert offset(1, 10) == 0
        assert offset(3, 10) == 20


class TestBuildFilter:
    title = Column("title", "t")
    owner = Column("name", "u")
    status = Column("status", "t")
    created = Column("created_at", "t")

    def test_no_filters_matches_everything(self):
        predicate = build_filter(
            Search(None, (self.title,)),
            Equals(self.status, None),
            Range(self.created),
        )
        assert predicate.sql == ""
        assert predicate.params == ()
        assert predicate.where == ""

    def test_search_is_or_of_columns(self):
        predicate = build_filter(Search("Report", (self.title, self.owner)))
        assert predicate.sql == (
            "(casefold(t.title) LIKE ? ESCAPE '\\' OR casefold(u.name) LIKE ? ESCAPE '\\')"
        )
        assert predicate.params == ("%report%", "%report%")

    def test_search_term_is_unicode_casefolded(self):
        predicate = build_filter(Search("ÉMILE Straße", (self.owner,)))
        assert predicate.params == ("%émile strasse%",)

    def test_filters_are_combined_with_and(self):
        predicate = build_filter(
            Equals(self.status, "DONE"),
            Range(self.created, lower="2024-01-01", upper="2024-12-31"),
        )
        assert predicate.sql == "t.status = ? AND t.created_at >= ? AND t.created_at <= ?"
        assert predicate.params == ("DONE", "2024-01-01", "2024-12-31")
        assert predicate.where.startswith("WHERE ")

    def test_range_with_single_bound(self):
        predicate = build_filter(Range(self.created, upper="2024-12-31"))
        assert predicate.sql == "t.created_at <= ?"
        assert predicate.params == ("2024-12-31",)

    def test_like_wildcards_are_escaped(self):
        assert escape_like("50%_off\\") == "50\\%\\_off\\\\"

    def test_unknown_expression_rejected(self):
        with pytest.raises(TypeError):
            build_filter("title = 'x'")


class TestBuildSort:
    def test_ascending(self):
        assert build_sort(Column("name", "u"), SortOrder.ASC).sql == "ORDER BY u.name ASC"

    def test_defaults_to_descending(self):
        assert build_sort(Column("created_at")).sql == "ORDER BY created_at DESC"

    def test_accepts_raw_order_value(self):
        assert build_sort(Column("title"), "asc").sql == "ORDER BY title ASC"

    def test_rejects_unknown_order(self):
        with pytest.raises(ValueError):
            build_sort(Column("title"), "sideways")

    def test_tiebreaker_follows_sort_direction(self):
        sort = build_sort(Column("status", "t"), SortOrder.ASC, tiebreaker=Column("id", "t"))
        assert sort.sql == "ORDER BY t.status ASC, t.id ASC"

    def test_tiebreaker_not_repeated_for_same_column(self):
        key = Column("id", "t")
        assert build_sort(key, SortOrder.DESC, tiebreaker=key).sql == "ORDER BY t.id DESC"


def test_last_allowed_page_offset_fits_in_sqlite_integer():
    assert offset(MAX_PAGE, MAX_LIMIT) <= 2**63 - 1
