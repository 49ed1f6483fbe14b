"""Merge of a thread's detail, comments and events into one timeline."""

import asyncio
from typing import Any

from threadfeed.core.logging import correlation_scope, get_logger
from threadfeed.github.client import GitHubClient
from threadfeed.shared.exceptions import GitHubAPIError
from threadfeed.shared.models import (
    ActivityEvent,
    Comment,
    CommentEntry,
    EventEntry,
    EventKind,
    Issue,
    PullRequest,
    ThreadEntry,
    ThreadRef,
    TimelineEntry,
)

logger = get_logger(__name__)

# Tie-break order for entries sharing a timestamp
_KIND_PRECEDENCE = {"thread": 0, "comment": 1, "event": 2}


def merge_timeline(
    item: Issue | PullRequest,
    comments: list[Comment],
    events: list[ActivityEvent],
    is_pull_request: bool,
) -> list[TimelineEntry]:
    """Merge fetched parts into one chronologically ordered timeline.

    Events without a usable timestamp are dropped. For pull requests,
    ``closed`` events are dropped as well: a merge already appears as a
    ``merged`` event and GitHub records an implicit close next to it.

    Entries are sorted by timestamp; on ties the thread itself comes first,
    then comments, then events, each group keeping its fetch order.

    Args:
        item: Issue or pull request detail
        comments: Comments in fetch order
        events: Events in fetch order
        is_pull_request: Whether the thread is a pull request

    Returns:
        Ordered list of timeline entries

    Example:
        >>> entries = merge_timeline(issue, [c2, c1], [e3], is_pull_request=False)
        >>> [entry.kind for entry in entries]
        ['thread', 'comment', 'comment', 'event']
    """
    entries: list[TimelineEntry] = [ThreadEntry(item=item, timestamp=item.created_at)]
    entries.extend(
        CommentEntry(comment=comment, timestamp=comment.created_at) for comment in comments
    )
    for event in events:
        if event.created_at is None:
            continue
        if is_pull_request and event.kind is EventKind.CLOSED:
            continue
        entries.append(EventEntry(event=event, timestamp=event.created_at))

    # sorted() is stable, so same-kind entries keep their fetch order on ties
    return sorted(entries, key=lambda entry: (entry.timestamp, _KIND_PRECEDENCE[entry.kind]))


class TimelineAggregator:
    """Builds merged timelines for issues and pull requests.

    Example:
        >>> async with GitHubClient(token) as client:
        ...     entries = await TimelineAggregator(client).build_timeline(ref, True)
    """

    def __init__(self, client: GitHubClient) -> None:
        self.client = client

    async def build_timeline(
        self, ref: ThreadRef, is_pull_request: bool = False
    ) -> list[TimelineEntry]:
        """Fetch detail, comments and events concurrently and merge them.

        If comments or events cannot be fetched, the timeline degrades to the
        thread alone, loaded by a separate detail request. A failure to load
        the detail is never recovered from.

        Args:
            ref: Thread to load
            is_pull_request: Load pull request detail and drop ``closed`` events

        Returns:
            Ordered timeline entries

        Raises:
            GitHubAPIError: If the detail request fails
        """
        with correlation_scope(str(ref)):
            logger.info("timeline.build.started", is_pull_request=is_pull_request)

            results: list[Any] = await asyncio.gather(
                self.client.get_thread(ref, is_pull_request),
                self.client.list_issue_comments(ref),
                self.client.list_issue_events(ref),
                return_exceptions=True,
            )
            item, comments, events = results

            if isinstance(item, BaseException):
                logger.warning("timeline.detail.failed", error=str(item))
                raise item

            failures = [r for r in (comments, events) if isinstance(r, BaseException)]
            for failure in failures:
                if not isinstance(failure, GitHubAPIError):
                    raise failure

            if failures:
                logger.warning(
                    "timeline.degraded",
                    comments_failed=isinstance(comments, BaseException),
                    events_failed=isinstance(events, BaseException),
                    error=str(failures[0]),
                )
                return await self._detail_only(ref, is_pull_request)

            entries = merge_timeline(item, comments, events, is_pull_request)
            logger.info(
                "timeline.build.completed",
                entries=len(entries),
                comments=len(comments),
                events=len(events),
            )
            return entries

    async def _detail_only(self, ref: ThreadRef, is_pull_request: bool) -> list[TimelineEntry]:
        item = await self.client.get_thread(ref, is_pull_request)
        return [ThreadEntry(item=item, timestamp=item.created_at)]
