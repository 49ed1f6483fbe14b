"""Shared test fixtures for GitHub integration tests."""

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from threadfeed.github.client import GitHubClient
from threadfeed.shared.models import ThreadRef


def make_response_context(
    status: int = 200,
    payload: Any = None,
    headers: dict[str, str] | None = None,
) -> MagicMock:
    """Build an async context manager standing in for ``session.get(...)``.

    Args:
        status: HTTP status of the fake response
        payload: Value returned by ``response.json()``
        headers: Response headers

    Returns:
        MagicMock usable in ``async with``
    """
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.headers = headers or {}
    mock_response.json = AsyncMock(return_value=payload)

    mock_context = MagicMock()
    mock_context.__aenter__ = AsyncMock(return_value=mock_response)
    mock_context.__aexit__ = AsyncMock(return_value=None)
    return mock_context


@pytest.fixture
def github_client() -> GitHubClient:
    """Create a GitHub client instance for testing.

    Returns:
        GitHubClient instance with test token and a mocked session
    """
    client = GitHubClient("test_token_12345")
    client.session = AsyncMock()
    return client


@pytest.fixture
def respond(github_client: GitHubClient) -> Callable[..., MagicMock]:
    """Make the client's session answer every GET with one canned response."""

    def _respond(
        status: int = 200, payload: Any = None, headers: dict[str, str] | None = None
    ) -> MagicMock:
        github_client.session.get = MagicMock(  # type: ignore[union-attr]
            return_value=make_response_context(status, payload, headers)
        )
        return github_client.session.get  # type: ignore[union-attr,return-value]

    return _respond


@pytest.fixture
def respond_by_path(github_client: GitHubClient) -> Callable[[dict[str, Any]], MagicMock]:
    """Route GETs to canned responses by URL path suffix.

    Each route value is either a payload (served with status 200) or a
    ``(status, payload)`` tuple. The query string is ignored when matching.
    """

    def _respond(routes: dict[str, Any]) -> MagicMock:
        def _get(url: str, *args: Any, **kwargs: Any) -> MagicMock:
            path = url.split("?", 1)[0]
            for suffix, answer in routes.items():
                if path.endswith(suffix):
                    if isinstance(answer, tuple):
                        return make_response_context(answer[0], answer[1])
                    return make_response_context(200, answer)
            return make_response_context(404, {"message": "Not Found"})

        github_client.session.get = MagicMock(side_effect=_get)  # type: ignore[union-attr]
        return github_client.session.get  # type: ignore[union-attr,return-value]

    return _respond


@pytest.fixture
def thread_ref() -> ThreadRef:
    return ThreadRef(owner="octo", repo="widgets", number=42)


@pytest.fixture
def user_payload() -> Callable[[str], dict[str, Any]]:
    def _user(login: str) -> dict[str, Any]:
        return {
            "login": login,
            "avatar_url": f"https://avatars.example.com/{login}",
            "html_url": f"https://github.com/{login}",
        }

    return _user


@pytest.fixture
def issue_payload(user_payload: Callable[[str], dict[str, Any]]) -> dict[str, Any]:
    """Sample issue as returned by GET /repos/{owner}/{repo}/issues/{number}."""
    return {
        "id": 1001,
        "number": 42,
        "title": "Widgets render upside down",
        "body": "Steps to reproduce...",
        "state": "open",
        "user": user_payload("alice"),
        "created_at": "2025-01-09T10:00:00Z",
        "updated_at": "2025-01-10T08:00:00Z",
        "html_url": "https://github.com/octo/widgets/issues/42",
        "labels": [{"id": 1, "name": "bug", "color": "d73a4a", "description": None}],
        "assignees": [user_payload("bob")],
        "comments": 2,
    }


@pytest.fixture
def pull_request_payload(user_payload: Callable[[str], dict[str, Any]]) -> dict[str, Any]:
    """Sample merged pull request as returned by GET /repos/{owner}/{repo}/pulls/{number}."""
    return {
        "id": 2002,
        "number": 42,
        "title": "Flip widgets the right way up",
        "body": None,
        "state": "closed",
        "merged": True,
        "merged_at": "2025-01-11T09:00:00Z",
        "user": user_payload("carol"),
        "created_at": "2025-01-09T10:00:00Z",
        "updated_at": "2025-01-11T09:00:00Z",
        "html_url": "https://github.com/octo/widgets/pull/42",
        "head": {"ref": "fix-flip"},
        "base": {"ref": "main"},
        "labels": [],
        "assignees": [],
        "comments": 0,
    }


@pytest.fixture
def comment_payload(user_payload: Callable[[str], dict[str, Any]]) -> Callable[..., dict[str, Any]]:
    def _comment(comment_id: int, created_at: str | None, login: str = "bob") -> dict[str, Any]:
        return {
            "id": comment_id,
            "body": f"comment {comment_id}",
            "user": user_payload(login),
            "created_at": created_at,
            "updated_at": created_at,
            "html_url": f"https://github.com/octo/widgets/issues/42#issuecomment-{comment_id}",
        }

    return _comment


@pytest.fixture
def event_payload(user_payload: Callable[[str], dict[str, Any]]) -> Callable[..., dict[str, Any]]:
    def _event(
        event_id: int,
        event: str,
        created_at: str | None,
        actor: str | None = "alice",
        **extra: Any,
    ) -> dict[str, Any]:
        return {
            "id": event_id,
            "event": event,
            "actor": user_payload(actor) if actor else None,
            "created_at": created_at,
            **extra,
        }

    return _event
