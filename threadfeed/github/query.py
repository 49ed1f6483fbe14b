"""Search query construction for the GitHub issue search endpoint.

Issues and pull requests of a repository are both listed through
``/search/issues``; the scope's resource type adds a ``type:`` qualifier so
the one endpoint serves both. Search results are paginated by count, so the
next/prev cursors here are synthesized from the scope rather than read from
a ``Link`` header.
"""

from collections.abc import Iterable
from typing import Any, Literal
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, field_validator

from threadfeed.github.pagination import PaginationState, paginate_by_count

SEARCH_PATH = "/search/issues"

ResourceType = Literal["issue", "pr"]
SortKey = Literal["created", "updated", "comments"]
SortDirection = Literal["asc", "desc"]


class SearchScope(BaseModel):
    """Filters and ordering for one search listing.

    Scopes are immutable: changing a filter means building a new scope with
    :meth:`replace`, which also invalidates any cursors derived from the old one.

    Attributes:
        owner_repo: Repository as "owner/name"
        resource_type: "issue" or "pr"
        free_text: Text searched verbatim (trimmed)
        label_filters: Labels that must all be present, in selection order
        author_filter: Login of the author, if filtering by author
        sort_key: created, updated or comments
        sort_direction: asc or desc
    """

    model_config = ConfigDict(frozen=True)

    owner_repo: str
    resource_type: ResourceType = "issue"
    free_text: str = ""
    label_filters: tuple[str, ...] = ()
    author_filter: str | None = None
    sort_key: SortKey = "created"
    sort_direction: SortDirection = "desc"

    @field_validator("owner_repo")
    @classmethod
    def validate_owner_repo(cls, v: str) -> str:
        owner, sep, name = v.strip().partition("/")
        if not sep or not owner or not name or "/" in name:
            raise ValueError(f"Expected 'owner/repo', got {v!r}")
        return f"{owner}/{name}"

    @field_validator("label_filters", mode="before")
    @classmethod
    def dedupe_labels(cls, v: Iterable[str]) -> tuple[str, ...]:
        if isinstance(v, str):
            v = [v]
        seen: dict[str, None] = {}
        for label in v:
            label = label.strip()
            if label:
                seen.setdefault(label, None)
        return tuple(seen)

    @field_validator("author_filter")
    @classmethod
    def blank_author_is_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None

    def replace(self, **changes: Any) -> "SearchScope":
        """Return a new, re-validated scope with the given fields changed."""
        return SearchScope(**{**self.model_dump(), **changes})


def _quote_label(label: str) -> str:
    # Search qualifiers have no escape syntax inside quotes; a " would end the value early
    value = label.replace('"', "")
    return f'label:"{value}"'


def build_query(scope: SearchScope) -> str:
    """Compose the ``q`` parameter for a scope.

    Example:
        >>> build_query(SearchScope(owner_repo="o/r", free_text=" bug ", label_filters=["P1 urgent"]))
        'repo:o/r type:issue bug label:"P1 urgent"'
    """
    clauses = [f"repo:{scope.owner_repo}", f"type:{scope.resource_type}"]

    free_text = scope.free_text.strip()
    if free_text:
        clauses.append(free_text)

    # One clause per label: GitHub ANDs separate label: qualifiers but ORs comma lists
    clauses.extend(_quote_label(label) for label in scope.label_filters)

    if scope.author_filter:
        clauses.append(f"author:{scope.author_filter}")

    return " ".join(clauses)


def build_search_params(scope: SearchScope, page: int = 1, per_page: int = 30) -> dict[str, Any]:
    """Build the full parameter set for ``/search/issues``.

    Sort key and direction travel as ``sort``/``order``, never inside ``q``.
    """
    return {
        "q": build_query(scope),
        "sort": scope.sort_key,
        "order": scope.sort_direction,
        "per_page": max(per_page, 1),
        "page": max(page, 1),
    }


def build_search_path(scope: SearchScope, page: int = 1, per_page: int = 30) -> str:
    """Build the request path (with encoded query string) for one search page."""
    return f"{SEARCH_PATH}?{urlencode(build_search_params(scope, page, per_page))}"


def search_pagination(
    scope: SearchScope, total_count: int, page: int, per_page: int
) -> PaginationState:
    """Count-mode pagination for a search page, with cursors derived from the scope."""
    per_page = max(per_page, 1)
    return paginate_by_count(
        total_count=total_count,
        page_size=per_page,
        current_page=page,
        cursor_for_page=lambda p: build_search_path(scope, p, per_page),
    )
