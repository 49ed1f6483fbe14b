"""Data models for GitHub threads and their merged timeline.

Every remote payload is decoded into one of these immutable models at the
client boundary, so the rest of the package never touches raw JSON.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a GitHub ISO 8601 timestamp into a timezone-aware datetime.

    Returns:
        Parsed datetime (UTC when the input is naive), or None when the value
        is missing, empty or unparsable
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def _require_timestamp(value: Any) -> datetime:
    parsed = parse_timestamp(value)
    if parsed is None:
        raise ValueError(f"Invalid timestamp: {value!r}")
    return parsed


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Actor(_Frozen):
    """A GitHub user as embedded in other payloads."""

    login: str
    avatar_url: str = ""
    html_url: str = ""

    @classmethod
    def from_github(cls, data: dict[str, Any] | None) -> "Actor | None":
        """Decode a user object, returning None for null or login-less users."""
        if not data or not data.get("login"):
            return None
        return cls(
            login=data["login"],
            avatar_url=data.get("avatar_url") or "",
            html_url=data.get("html_url") or "",
        )


class Label(_Frozen):
    """Repository label."""

    name: str
    color: str = ""
    description: str | None = None

    @classmethod
    def from_github(cls, data: dict[str, Any]) -> "Label":
        return cls(
            name=data["name"],
            color=data.get("color") or "",
            description=data.get("description"),
        )


class Repository(_Frozen):
    """Repository summary returned by the repository and repo-listing endpoints."""

    id: int
    name: str
    full_name: str
    description: str | None = None
    private: bool = False
    owner: Actor
    html_url: str = ""
    updated_at: datetime | None = None

    @classmethod
    def from_github(cls, data: dict[str, Any]) -> "Repository":
        owner = Actor.from_github(data.get("owner"))
        if owner is None:
            raise ValueError("Repository payload is missing its owner")
        return cls(
            id=data["id"],
            name=data["name"],
            full_name=data["full_name"],
            description=data.get("description"),
            private=bool(data.get("private", False)),
            owner=owner,
            html_url=data.get("html_url") or "",
            updated_at=parse_timestamp(data.get("updated_at")),
        )


class ThreadRef(_Frozen):
    """Identifies one issue or pull request: (owner, repo, number)."""

    owner: str
    repo: str
    number: int = Field(..., ge=1)

    @classmethod
    def parse(cls, owner_repo: str, number: int) -> "ThreadRef":
        """Build a reference from an "owner/repo" string.

        Example:
            >>> ThreadRef.parse("octocat/hello-world", 42).full_name
            'octocat/hello-world'
        """
        owner, sep, repo = owner_repo.strip().partition("/")
        if not sep or not owner or not repo or "/" in repo:
            raise ValueError(f"Expected 'owner/repo', got {owner_repo!r}")
        return cls(owner=owner, repo=repo, number=number)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return f"{self.full_name}#{self.number}"


ThreadState = Literal["open", "closed", "merged"]


class _ThreadBase(_Frozen):
    id: int
    number: int
    title: str
    body: str = ""
    state: ThreadState
    author: Actor | None = None
    created_at: datetime
    updated_at: datetime | None = None
    html_url: str = ""
    labels: tuple[Label, ...] = ()
    assignees: tuple[Actor, ...] = ()
    comment_count: int = 0

    @field_validator("created_at", mode="before")
    @classmethod
    def validate_created_at(cls, v: Any) -> datetime:
        return _require_timestamp(v)

    @staticmethod
    def _common_fields(data: dict[str, Any]) -> dict[str, Any]:
        assignees = [Actor.from_github(a) for a in data.get("assignees") or []]
        return {
            "id": data["id"],
            "number": data["number"],
            "title": data.get("title") or "",
            "body": data.get("body") or "",
            "author": Actor.from_github(data.get("user")),
            "created_at": data.get("created_at"),
            "updated_at": parse_timestamp(data.get("updated_at")),
            "html_url": data.get("html_url") or "",
            "labels": tuple(Label.from_github(label) for label in data.get("labels") or []),
            "assignees": tuple(a for a in assignees if a is not None),
            "comment_count": data.get("comments") or 0,
        }


class Issue(_ThreadBase):
    """A plain issue."""

    kind: Literal["issue"] = "issue"

    @classmethod
    def from_github(cls, data: dict[str, Any]) -> "Issue":
        return cls(state=data.get("state") or "open", **cls._common_fields(data))


class PullRequest(_ThreadBase):
    """A pull request, from the pulls endpoints or a PR-backed search result."""

    kind: Literal["pull_request"] = "pull_request"
    head_ref: str | None = None
    base_ref: str | None = None
    merged_at: datetime | None = None

    @classmethod
    def from_github(cls, data: dict[str, Any]) -> "PullRequest":
        # Search results nest merge info under "pull_request"; pulls endpoints inline it
        pr_info = data.get("pull_request") or {}
        merged_at = parse_timestamp(data.get("merged_at") or pr_info.get("merged_at"))
        state = data.get("state") or "open"
        if merged_at is not None or data.get("merged"):
            state = "merged"
        return cls(
            state=state,
            head_ref=(data.get("head") or {}).get("ref"),
            base_ref=(data.get("base") or {}).get("ref"),
            merged_at=merged_at,
            **cls._common_fields(data),
        )


ThreadItem = Annotated[Union[Issue, PullRequest], Field(discriminator="kind")]


def is_pull_request_payload(data: dict[str, Any]) -> bool:
    """Return True when an issue-shaped payload is backed by a pull request."""
    return bool(data.get("pull_request")) or "head" in data


def decode_thread(data: dict[str, Any]) -> Issue | PullRequest:
    """Decode an issue-or-PR payload into the matching variant."""
    if is_pull_request_payload(data):
        return PullRequest.from_github(data)
    return Issue.from_github(data)


class Comment(_Frozen):
    """Issue or pull request conversation comment.

    ``author`` is None when the account was deleted.
    """

    id: int
    author: Actor | None = None
    body: str = ""
    created_at: datetime
    updated_at: datetime | None = None
    html_url: str = ""

    @field_validator("created_at", mode="before")
    @classmethod
    def validate_created_at(cls, v: Any) -> datetime:
        return _require_timestamp(v)

    @classmethod
    def from_github(cls, data: dict[str, Any]) -> "Comment":
        return cls(
            id=data["id"],
            author=Actor.from_github(data.get("user")),
            body=data.get("body") or "",
            created_at=data.get("created_at"),
            updated_at=parse_timestamp(data.get("updated_at")),
            html_url=data.get("html_url") or "",
        )


class EventKind(str, Enum):
    """Issue event kinds understood by the timeline."""

    CLOSED = "closed"
    REOPENED = "reopened"
    LABELED = "labeled"
    UNLABELED = "unlabeled"
    ASSIGNED = "assigned"
    UNASSIGNED = "unassigned"
    MILESTONED = "milestoned"
    DEMILESTONED = "demilestoned"
    RENAMED = "renamed"
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    MERGED = "merged"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def from_name(cls, name: str | None) -> "EventKind":
        try:
            return cls(name) if name else cls.UNRECOGNIZED
        except ValueError:
            return cls.UNRECOGNIZED


class ActivityEvent(_Frozen):
    """An issue event (label change, close, merge, ...).

    Attributes:
        kind: Normalized event kind
        event_name: Raw event name as sent by GitHub
        actor: User who triggered the event, None for system-generated events
        created_at: Event time, None when missing or unparsable
    """

    id: str
    kind: EventKind
    event_name: str
    actor: Actor | None = None
    created_at: datetime | None = None
    label_name: str | None = None
    assignee_login: str | None = None
    milestone_title: str | None = None
    rename_from: str | None = None
    rename_to: str | None = None
    commit_id: str | None = None

    @property
    def is_valid(self) -> bool:
        """Events without a usable timestamp cannot be placed on a timeline."""
        return self.created_at is not None

    @classmethod
    def from_github(cls, data: dict[str, Any]) -> "ActivityEvent":
        event_name = data.get("event") or ""
        assignee = Actor.from_github(data.get("assignee"))
        rename = data.get("rename") or {}
        return cls(
            id=str(data.get("id", "")),
            kind=EventKind.from_name(event_name),
            event_name=event_name,
            actor=Actor.from_github(data.get("actor")),
            created_at=parse_timestamp(data.get("created_at")),
            label_name=(data.get("label") or {}).get("name"),
            assignee_login=assignee.login if assignee else None,
            milestone_title=(data.get("milestone") or {}).get("title"),
            rename_from=rename.get("from"),
            rename_to=rename.get("to"),
            commit_id=data.get("commit_id"),
        )


class ThreadEntry(_Frozen):
    """Timeline entry for the issue or pull request itself."""

    kind: Literal["thread"] = "thread"
    item: ThreadItem
    timestamp: datetime


class CommentEntry(_Frozen):
    """Timeline entry for a comment."""

    kind: Literal["comment"] = "comment"
    comment: Comment
    timestamp: datetime


class EventEntry(_Frozen):
    """Timeline entry for an issue event."""

    kind: Literal["event"] = "event"
    event: ActivityEvent
    timestamp: datetime


TimelineEntry = Annotated[
    Union[ThreadEntry, CommentEntry, EventEntry], Field(discriminator="kind")
]
