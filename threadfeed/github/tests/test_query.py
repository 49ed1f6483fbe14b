"""Tests for search query construction."""

from urllib.parse import parse_qs, urlsplit

import pytest
from pydantic import ValidationError

from threadfeed.github.pagination import current_page_from_path
from threadfeed.github.query import (
    SearchScope,
    build_query,
    build_search_params,
    build_search_path,
    search_pagination,
)


def test_build_query_all_filters() -> None:
    """Test every clause appears exactly once, labels individually quoted."""
    scope = SearchScope(
        owner_repo="owner/repo",
        resource_type="issue",
        free_text="bug",
        label_filters={"needs-triage", "P1 urgent"},
        author_filter="alice",
    )

    query = build_query(scope)

    for clause in (
        "repo:owner/repo",
        "type:issue",
        "bug",
        'label:"needs-triage"',
        'label:"P1 urgent"',
        "author:alice",
    ):
        assert query.count(clause) == 1
    assert "needs-triage,P1 urgent" not in query
    assert query.startswith("repo:owner/repo type:issue bug ")


def test_build_query_minimal() -> None:
    """Test a bare scope only anchors repository and type."""
    assert build_query(SearchScope(owner_repo="o/r")) == "repo:o/r type:issue"
    assert build_query(SearchScope(owner_repo="o/r", resource_type="pr")) == "repo:o/r type:pr"


def test_build_query_trims_free_text_and_author() -> None:
    scope = SearchScope(owner_repo="o/r", free_text="  crash on start  ", author_filter="  bob ")

    assert build_query(scope) == "repo:o/r type:issue crash on start author:bob"


def test_blank_author_is_omitted() -> None:
    scope = SearchScope(owner_repo="o/r", author_filter="   ")

    assert scope.author_filter is None
    assert "author:" not in build_query(scope)


def test_labels_keep_selection_order_and_dedupe() -> None:
    scope = SearchScope(owner_repo="o/r", label_filters=["b", "a", "b", " ", "c"])

    assert scope.label_filters == ("b", "a", "c")
    assert build_query(scope).endswith('label:"b" label:"a" label:"c"')


def test_label_quotes_are_dropped_not_escaped() -> None:
    scope = SearchScope(owner_repo="o/r", label_filters=['say "hi"', "back\\slash"])

    assert build_query(scope).endswith('label:"say hi" label:"back\\slash"')


def test_sort_is_not_in_query() -> None:
    """Test sort key and direction travel as separate parameters."""
    scope = SearchScope(owner_repo="o/r", sort_key="comments", sort_direction="asc")

    params = build_search_params(scope, page=2, per_page=50)

    assert params == {
        "q": "repo:o/r type:issue",
        "sort": "comments",
        "order": "asc",
        "per_page": 50,
        "page": 2,
    }
    assert "sort:" not in params["q"]


def test_build_search_path_encodes_query() -> None:
    scope = SearchScope(owner_repo="o/r", label_filters=["P1 urgent"])

    path = build_search_path(scope, page=3)
    parts = urlsplit(path)
    query = parse_qs(parts.query)

    assert parts.path == "/search/issues"
    assert query["q"] == ['repo:o/r type:issue label:"P1 urgent"']
    assert query["page"] == ["3"]
    assert current_page_from_path(path) == 3


def test_invalid_owner_repo_rejected() -> None:
    with pytest.raises(ValidationError):
        SearchScope(owner_repo="just-a-name")


def test_invalid_sort_key_rejected() -> None:
    with pytest.raises(ValidationError):
        SearchScope(owner_repo="o/r", sort_key="reactions")  # type: ignore[arg-type]


def test_scope_is_immutable_and_replace_returns_new_scope() -> None:
    scope = SearchScope(owner_repo="o/r", free_text="bug")

    with pytest.raises(ValidationError):
        scope.free_text = "feature"  # type: ignore[misc]

    narrowed = scope.replace(label_filters=["ui"])

    assert narrowed is not scope
    assert scope.label_filters == ()
    assert narrowed.label_filters == ("ui",)
    assert narrowed.free_text == "bug"


def test_search_pagination_cursors_follow_scope() -> None:
    """Test synthesized cursors are rebuilt from the scope they belong to."""
    scope = SearchScope(owner_repo="o/r", free_text="bug")
    other = scope.replace(free_text="crash")

    first = search_pagination(scope, total_count=95, page=1, per_page=30)
    changed = search_pagination(other, total_count=95, page=1, per_page=30)

    assert first.next_cursor == build_search_path(scope, 2, 30)
    assert changed.next_cursor == build_search_path(other, 2, 30)
    assert first.next_cursor != changed.next_cursor
    assert first.total_pages == 4


def test_search_pagination_last_page() -> None:
    scope = SearchScope(owner_repo="o/r")

    state = search_pagination(scope, total_count=95, page=4, per_page=30)

    assert state.has_next is False
    assert state.has_prev is True
    assert state.prev_cursor == build_search_path(scope, 3, 30)


def test_search_pagination_zero_page_size_is_clamped() -> None:
    scope = SearchScope(owner_repo="o/r")

    state = search_pagination(scope, total_count=10, page=1, per_page=0)

    assert state.page_size == 1
    assert state.total_pages == 10
    assert state.has_next is True
    assert parse_qs(urlsplit(state.next_cursor).query)["per_page"] == ["1"]
    assert build_search_params(scope, per_page=-5)["per_page"] == 1
