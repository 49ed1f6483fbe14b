"""GitHub API client with typed decoding and error classification."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar
from urllib.parse import urlencode

import aiohttp
from pydantic import ValidationError

from threadfeed.core.logging import get_logger
from threadfeed.github.pagination import Page, parse_link_header
from threadfeed.github.query import SearchScope, build_search_path, search_pagination
from threadfeed.shared.exceptions import (
    GitHubAPIError,
    NotFoundError,
    RateLimitedError,
    RemoteError,
    TransportError,
    UnauthorizedError,
)
from threadfeed.shared.models import (
    ActivityEvent,
    Comment,
    Issue,
    Label,
    PullRequest,
    Repository,
    ThreadRef,
    decode_thread,
    is_pull_request_payload,
)

logger = get_logger(__name__)

M = TypeVar("M")


@dataclass(frozen=True)
class ApiResponse:
    """Decoded JSON body plus the pagination header of one response.

    Attributes:
        payload: Parsed JSON body
        link_header: Raw ``Link`` header, None when the response has none
        path: Request path (with query string) that produced this response
    """

    payload: Any
    link_header: str | None
    path: str


class GitHubClient:
    """Async GitHub API client.

    Every request is single-shot: failures are classified and raised
    immediately, and the caller decides whether to degrade or propagate.

    Attributes:
        BASE_URL: Default GitHub API base URL
        DEFAULT_PAGE_SIZE: Page size for listing and search endpoints
        MAX_PAGE_SIZE: Largest per_page GitHub accepts; also the cap for
            comment and event batches
    """

    BASE_URL = "https://api.github.com"
    DEFAULT_PAGE_SIZE = 30
    MAX_PAGE_SIZE = 100

    def __init__(
        self,
        token: str,
        base_url: str | None = None,
        timeline_page_size: int = MAX_PAGE_SIZE,
    ) -> None:
        """Initialize GitHub client with an authentication token.

        Args:
            token: GitHub personal access token, supplied by the caller
            base_url: API base URL (defaults to BASE_URL)
            timeline_page_size: per_page for comment and event batches
        """
        self._token = token
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeline_page_size = timeline_page_size
        self.session: aiohttp.ClientSession | None = None

    def __repr__(self) -> str:
        return f"GitHubClient(base_url={self.base_url!r})"

    async def __aenter__(self) -> "GitHubClient":
        """Context manager entry: create aiohttp session.

        Returns:
            Self for use in async with statement
        """
        self.session = aiohttp.ClientSession(
            headers={
                "Authorization": f"token {self._token}",
                "Accept": "application/vnd.github.v3+json",
                "User-Agent": "threadfeed",
            }
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Context manager exit: close aiohttp session."""
        if self.session:
            await self.session.close()
            self.session = None

    async def request(self, path: str) -> ApiResponse:
        """GET a path relative to the API base and decode the JSON body.

        Args:
            path: Path with query string, e.g. "/repos/o/r/issues?page=2"

        Returns:
            ApiResponse with payload and Link header

        Raises:
            UnauthorizedError: 401, or 403 without a rate-limit signal
            RateLimitedError: 429, or 403 with a rate-limit signal
            NotFoundError: 404
            RemoteError: Any other non-2xx status
            TransportError: Network failure or undecodable body
        """
        if not self.session:
            raise TransportError("Session not initialized", path=path)

        url = f"{self.base_url}{path}"
        try:
            async with self.session.get(url) as response:
                if not 200 <= response.status < 300:
                    raise self._classify_error(response, path)
                payload = await response.json()
                link_header = response.headers.get("Link")
        except aiohttp.ContentTypeError as e:
            logger.warning("github.response.not_json", path=path, status=e.status)
            raise TransportError(
                f"Response was not JSON: GET {path}", status=e.status, path=path
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("github.request.network_error", path=path, error=str(e))
            raise TransportError(f"Network error: GET {path}: {e}", path=path) from e
        except ValueError as e:
            logger.warning("github.response.invalid_json", path=path, error=str(e))
            raise TransportError(f"Invalid JSON: GET {path}", path=path) from e

        logger.debug("github.request.ok", path=path, has_link=link_header is not None)
        return ApiResponse(payload=payload, link_header=link_header, path=path)

    def _classify_error(self, response: aiohttp.ClientResponse, path: str) -> GitHubAPIError:
        status = response.status
        headers = response.headers or {}

        if status == 429 or (
            status == 403
            and (headers.get("x-ratelimit-remaining") == "0" or "retry-after" in headers)
        ):
            remaining = headers.get("x-ratelimit-remaining")
            reset = headers.get("x-ratelimit-reset")
            logger.warning(
                "github.ratelimit",
                path=path,
                remaining=remaining,
                reset=reset,
                status=status,
            )
            return RateLimitedError(
                f"Rate limited: {status}",
                status=status,
                remaining=remaining,
                reset=reset,
                path=path,
            )

        logger.warning("github.request.failed", path=path, status=status)
        if status in (401, 403):
            return UnauthorizedError(f"Unauthorized: {status}", status=status, path=path)
        if status == 404:
            return NotFoundError(f"Not found: GET {path}", status=status, path=path)
        return RemoteError(f"API error: {status}", status=status, path=path)

    def _decode(self, path: str, decoder: Callable[[Any], M], payload: Any) -> M:
        try:
            return decoder(payload)
        except (ValidationError, KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("github.response.unexpected_shape", path=path, error=str(e))
            raise TransportError(f"Unexpected payload shape: GET {path}", path=path) from e

    def _decode_list(
        self, path: str, decoder: Callable[[dict[str, Any]], M], payload: Any
    ) -> list[M]:
        if not isinstance(payload, list):
            raise TransportError(f"Expected a JSON array: GET {path}", path=path)
        return [self._decode(path, decoder, item) for item in payload]

    async def get_repository(self, owner: str, repo: str) -> Repository:
        """Fetch repository details."""
        response = await self.request(f"/repos/{owner}/{repo}")
        return self._decode(response.path, Repository.from_github, response.payload)

    async def list_user_repositories(self) -> list[Repository]:
        """List repositories visible to the authenticated user (first 100)."""
        response = await self.request(f"/user/repos?per_page={self.MAX_PAGE_SIZE}")
        return self._decode_list(response.path, Repository.from_github, response.payload)

    async def list_labels(self, owner: str, repo: str) -> list[Label]:
        """List repository labels (first 100)."""
        response = await self.request(f"/repos/{owner}/{repo}/labels?per_page={self.MAX_PAGE_SIZE}")
        return self._decode_list(response.path, Label.from_github, response.payload)

    async def list_issues(
        self,
        owner: str,
        repo: str,
        page: int = 1,
        per_page: int = DEFAULT_PAGE_SIZE,
        cursor: str | None = None,
    ) -> Page[Issue]:
        """List issues (open and closed) for a repository.

        The issues endpoint also returns pull requests; those are dropped here,
        so a page may hold fewer than ``per_page`` items.

        Args:
            owner: Repository owner
            repo: Repository name
            page: Page number, ignored when ``cursor`` is given
            per_page: Page size, ignored when ``cursor`` is given
            cursor: next_cursor/prev_cursor from a previous page

        Returns:
            Page of issues with cursor-mode pagination
        """
        path = cursor or (
            f"/repos/{owner}/{repo}/issues?"
            + urlencode({"state": "all", "per_page": per_page, "page": page})
        )
        response = await self.request(path)
        if not isinstance(response.payload, list):
            raise TransportError(f"Expected a JSON array: GET {path}", path=path)
        issues = [
            self._decode(path, Issue.from_github, item)
            for item in response.payload
            if not (isinstance(item, dict) and is_pull_request_payload(item))
        ]
        return Page[Issue](
            items=issues,
            pagination=parse_link_header(response.link_header, response.path, self.base_url),
        )

    async def list_pull_requests(
        self,
        owner: str,
        repo: str,
        page: int = 1,
        per_page: int = DEFAULT_PAGE_SIZE,
        cursor: str | None = None,
    ) -> Page[PullRequest]:
        """List pull requests (all states) for a repository.

        Returns:
            Page of pull requests with cursor-mode pagination
        """
        path = cursor or (
            f"/repos/{owner}/{repo}/pulls?"
            + urlencode({"state": "all", "per_page": per_page, "page": page})
        )
        response = await self.request(path)
        pulls = self._decode_list(path, PullRequest.from_github, response.payload)
        return Page[PullRequest](
            items=pulls,
            pagination=parse_link_header(response.link_header, response.path, self.base_url),
        )

    async def get_issue(self, ref: ThreadRef) -> Issue:
        response = await self.request(f"/repos/{ref.owner}/{ref.repo}/issues/{ref.number}")
        return self._decode(response.path, Issue.from_github, response.payload)

    async def get_pull_request(self, ref: ThreadRef) -> PullRequest:
        response = await self.request(f"/repos/{ref.owner}/{ref.repo}/pulls/{ref.number}")
        return self._decode(response.path, PullRequest.from_github, response.payload)

    async def get_thread(self, ref: ThreadRef, is_pull_request: bool) -> Issue | PullRequest:
        """Fetch the detail of an issue or a pull request."""
        if is_pull_request:
            return await self.get_pull_request(ref)
        return await self.get_issue(ref)

    async def list_issue_comments(self, ref: ThreadRef) -> list[Comment]:
        """Fetch one batch of conversation comments, capped at timeline_page_size."""
        response = await self.request(
            f"/repos/{ref.owner}/{ref.repo}/issues/{ref.number}/comments"
            f"?per_page={self.timeline_page_size}"
        )
        return self._decode_list(response.path, Comment.from_github, response.payload)

    async def list_issue_events(self, ref: ThreadRef) -> list[ActivityEvent]:
        """Fetch one batch of issue events, capped at timeline_page_size."""
        response = await self.request(
            f"/repos/{ref.owner}/{ref.repo}/issues/{ref.number}/events"
            f"?per_page={self.timeline_page_size}"
        )
        return self._decode_list(response.path, ActivityEvent.from_github, response.payload)

    async def search_threads(
        self,
        scope: SearchScope,
        page: int = 1,
        per_page: int = DEFAULT_PAGE_SIZE,
    ) -> Page[Issue | PullRequest]:
        """Search issues or pull requests of a repository.

        Args:
            scope: Filters and ordering
            page: 1-based page number
            per_page: Page size

        Returns:
            Page of threads with count-mode pagination
        """
        page = max(page, 1)
        per_page = max(per_page, 1)
        path = build_search_path(scope, page, per_page)
        response = await self.request(path)

        payload = response.payload
        if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
            raise TransportError(f"Unexpected search payload: GET {path}", path=path)
        if payload.get("incomplete_results"):
            logger.info("github.search.incomplete", path=path)

        items = [self._decode(path, decode_thread, item) for item in payload["items"]]
        total_count = payload.get("total_count")
        if not isinstance(total_count, int):
            total_count = 0
        return Page[Issue | PullRequest](
            items=items,
            pagination=search_pagination(scope, total_count, page, per_page),
        )
