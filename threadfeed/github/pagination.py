"""Pagination state for GitHub list and search responses.

GitHub paginates in two ways. List endpoints send a ``Link`` header with
opaque ``next``/``prev`` URLs (cursor mode). The search endpoint instead
returns ``total_count`` and leaves page arithmetic to the client (count
mode). Each response gets exactly one immutable ``PaginationState``; the two
modes are never mixed in one state.
"""

import math
import re
from collections.abc import Callable
from typing import Generic, Literal, TypeVar
from urllib.parse import parse_qs, urlsplit

from pydantic import BaseModel, ConfigDict, Field, model_validator

T = TypeVar("T")

# <https://api.github.com/repos/o/r/issues?page=2>; rel="next"
_LINK_ENTRY_RE = re.compile(r"<(?P<url>[^>]*)>(?P<params>.*)", re.DOTALL)
_REL_RE = re.compile(r"""rel\s*=\s*(?:"(?P<quoted>[^"]*)"|(?P<bare>[^\s;,]+))""", re.IGNORECASE)


class PaginationState(BaseModel):
    """Where a page sits in a paginated result.

    Attributes:
        has_next: Whether a following page exists
        has_prev: Whether a preceding page exists
        current_page: 1-based page number
        next_cursor: Host-stripped path of the next page
        prev_cursor: Host-stripped path of the previous page
        total_count: Total matching items (count mode only)
        page_size: Items per page (count mode only)
    """

    model_config = ConfigDict(frozen=True)

    has_next: bool = False
    has_prev: bool = False
    current_page: int = Field(1, ge=1)
    next_cursor: str | None = None
    prev_cursor: str | None = None
    total_count: int | None = Field(None, ge=0)
    page_size: int | None = Field(None, gt=0)

    @model_validator(mode="after")
    def check_consistency(self) -> "PaginationState":
        if self.has_next and self.next_cursor is None:
            raise ValueError("has_next requires next_cursor")
        if self.has_prev and self.prev_cursor is None:
            raise ValueError("has_prev requires prev_cursor")
        if self.total_count is not None:
            if self.page_size is None:
                raise ValueError("total_count requires page_size")
            total_pages = math.ceil(self.total_count / self.page_size)
            if self.has_next != (self.current_page < total_pages):
                raise ValueError("has_next disagrees with total_count/page_size")
            if self.has_prev != (self.current_page > 1):
                raise ValueError("has_prev disagrees with current_page")
        return self

    @property
    def mode(self) -> Literal["cursor", "count"]:
        return "count" if self.total_count is not None else "cursor"

    @property
    def total_pages(self) -> int | None:
        """Number of pages in count mode, None when only cursors are known."""
        if self.total_count is None or self.page_size is None:
            return None
        return math.ceil(self.total_count / self.page_size)


class Page(BaseModel, Generic[T]):
    """One page of decoded items plus its pagination state."""

    model_config = ConfigDict(frozen=True)

    items: list[T]
    pagination: PaginationState


def current_page_from_path(path: str) -> int:
    """Read the ``page`` query parameter from a request path.

    Returns:
        Page number, or 1 when absent, non-numeric or below 1

    Example:
        >>> current_page_from_path("/repos/o/r/issues?state=all&page=3")
        3
        >>> current_page_from_path("/repos/o/r/issues")
        1
    """
    values = parse_qs(urlsplit(path).query).get("page")
    if not values:
        return 1
    try:
        page = int(values[0])
    except ValueError:
        return 1
    return page if page >= 1 else 1


def strip_host(url: str, base_url: str | None = None) -> str:
    """Drop scheme and host from a URL, keeping path and query string.

    When the URL lives under ``base_url``, the whole base is removed, so a
    base with a path prefix (GitHub Enterprise's ``/api/v3``) is not repeated
    when the result is appended to it again.

    Example:
        >>> strip_host("https://ghe.example.com/api/v3/repos/o/r/issues?page=2",
        ...            "https://ghe.example.com/api/v3")
        '/repos/o/r/issues?page=2'
    """
    url = url.strip()
    if base_url:
        base = base_url.rstrip("/")
        rest = url[len(base):]
        if url.startswith(base) and (not rest or rest[0] in "/?"):
            return rest if rest.startswith("/") else f"/{rest}"
    parts = urlsplit(url)
    if parts.query:
        return f"{parts.path}?{parts.query}"
    return parts.path


def parse_link_header(
    link_header: str | None, request_path: str, base_url: str | None = None
) -> PaginationState:
    """Build cursor-mode pagination from a ``Link`` header.

    Only ``next`` and ``prev`` relations are used; ``first``, ``last`` and
    anything unrecognized or malformed is skipped. Never raises.

    Args:
        link_header: Raw ``Link`` header value, or None when absent
        request_path: Path (with query string) of the request that produced it
        base_url: API base the cursors will be appended to; see ``strip_host``

    Returns:
        PaginationState in cursor mode
    """
    current_page = current_page_from_path(request_path)
    if not link_header or not link_header.strip():
        return PaginationState(current_page=current_page)

    cursors: dict[str, str] = {}
    for entry in link_header.split(","):
        match = _LINK_ENTRY_RE.search(entry)
        if not match:
            continue
        url = match.group("url").strip()
        if not url:
            continue
        for rel_match in _REL_RE.finditer(match.group("params")):
            rel_value = rel_match.group("quoted") or rel_match.group("bare") or ""
            # rel may list several relation types, e.g. rel="next last"
            for rel in rel_value.lower().split():
                if rel in ("next", "prev"):
                    cursors.setdefault(rel, strip_host(url, base_url))

    return PaginationState(
        has_next="next" in cursors,
        has_prev="prev" in cursors,
        current_page=current_page,
        next_cursor=cursors.get("next"),
        prev_cursor=cursors.get("prev"),
    )


def paginate_by_count(
    total_count: int,
    page_size: int,
    current_page: int,
    cursor_for_page: Callable[[int], str],
) -> PaginationState:
    """Build count-mode pagination from a known total.

    Cursors are synthesized by the client through ``cursor_for_page`` rather
    than issued by the server. A page_size below 1 is treated as 1. Never raises.

    Example:
        >>> state = paginate_by_count(95, 30, 1, lambda p: f"?page={p}")
        >>> state.total_pages, state.has_next, state.has_prev
        (4, True, False)
    """
    total_count = max(total_count, 0)
    page_size = max(page_size, 1)
    current_page = max(current_page, 1)
    total_pages = math.ceil(total_count / page_size)
    has_next = current_page < total_pages
    has_prev = current_page > 1
    return PaginationState(
        has_next=has_next,
        has_prev=has_prev,
        current_page=current_page,
        next_cursor=cursor_for_page(current_page + 1) if has_next else None,
        prev_cursor=cursor_for_page(current_page - 1) if has_prev else None,
        total_count=total_count,
        page_size=page_size,
    )
