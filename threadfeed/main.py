"""threadfeed command line entry point."""

import argparse
import asyncio
import sys
from collections.abc import Sequence

from pydantic import ValidationError

from threadfeed.core.config import Settings, get_settings
from threadfeed.core.logging import get_logger, setup_logging
from threadfeed.github.client import GitHubClient
from threadfeed.github.events import summarize_entry
from threadfeed.github.query import SearchScope
from threadfeed.github.timeline import TimelineAggregator
from threadfeed.shared.exceptions import ConfigError, GitHubAPIError
from threadfeed.shared.models import ThreadRef

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="threadfeed",
        description="Read GitHub issue and pull request activity.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    timeline = commands.add_parser("timeline", help="print the merged timeline of a thread")
    timeline.add_argument("repo", help="repository as owner/name")
    timeline.add_argument("number", type=int, help="issue or pull request number")
    timeline.add_argument("--pr", action="store_true", help="the thread is a pull request")

    search = commands.add_parser("search", help="search issues or pull requests of a repository")
    search.add_argument("repo", help="repository as owner/name")
    search.add_argument("text", nargs="?", default="", help="free-text query")
    search.add_argument("--pr", action="store_true", help="search pull requests")
    search.add_argument("--label", action="append", default=[], help="required label (repeatable)")
    search.add_argument("--author", default=None, help="author login")
    search.add_argument("--sort", choices=["created", "updated", "comments"], default="created")
    search.add_argument("--order", choices=["asc", "desc"], default="desc")
    search.add_argument("--page", type=int, default=1)

    return parser


async def print_timeline(settings: Settings, ref: ThreadRef, is_pull_request: bool) -> None:
    async with GitHubClient(
        settings.github_token,
        base_url=settings.github_api_url,
        timeline_page_size=settings.timeline_page_size,
    ) as client:
        entries = await TimelineAggregator(client).build_timeline(ref, is_pull_request)

    for entry in entries:
        print(f"{entry.timestamp.isoformat()}  {entry.kind:<7}  {summarize_entry(entry)}")


async def print_search(settings: Settings, scope: SearchScope, page: int) -> None:
    async with GitHubClient(settings.github_token, base_url=settings.github_api_url) as client:
        result = await client.search_threads(scope, page=page, per_page=settings.page_size)

    for item in result.items:
        labels = ", ".join(label.name for label in item.labels)
        print(f"#{item.number:<6} {item.state:<7} {item.title}" + (f"  [{labels}]" if labels else ""))

    pagination = result.pagination
    print(
        f"page {pagination.current_page} of {pagination.total_pages} "
        f"({pagination.total_count} total)"
    )


def run(argv: Sequence[str] | None = None) -> None:
    """Entry point for the threadfeed command."""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except (ConfigError, ValidationError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(log_level=settings.log_level, log_format=settings.log_format)

    try:
        if args.command == "timeline":
            ref = ThreadRef.parse(args.repo, args.number)
            asyncio.run(print_timeline(settings, ref, args.pr))
        else:
            scope = SearchScope(
                owner_repo=args.repo,
                resource_type="pr" if args.pr else "issue",
                free_text=args.text,
                label_filters=args.label,
                author_filter=args.author,
                sort_key=args.sort,
                sort_direction=args.order,
            )
            asyncio.run(print_search(settings, scope, args.page))

    except GitHubAPIError as e:
        logger.error("application.request.failed", error=str(e), status=e.status)
        print(f"GitHub error: {e}", file=sys.stderr)
        sys.exit(2)
    except ValueError as e:
        print(f"Invalid arguments: {e}", file=sys.stderr)
        sys.exit(2)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
