"""Human-readable summaries of timeline entries for consumers that render them."""

from threadfeed.shared.models import (
    ActivityEvent,
    Actor,
    CommentEntry,
    EventEntry,
    EventKind,
    ThreadEntry,
    TimelineEntry,
)

# Shown in place of the actor for system-generated events
SYSTEM_ACTOR = "system"


def login_or_fallback(actor: Actor | None, fallback: str = SYSTEM_ACTOR) -> str:
    """Return the actor's login, or ``fallback`` for system and deleted accounts."""
    return actor.login if actor else fallback


def actor_login(event: ActivityEvent, fallback: str = SYSTEM_ACTOR) -> str:
    """Return the login of the event's actor, or ``fallback`` when there is none."""
    return login_or_fallback(event.actor, fallback)


def describe_event(event: ActivityEvent, fallback_actor: str = SYSTEM_ACTOR) -> str:
    """Describe an issue event in one sentence.

    Args:
        event: Event to describe
        fallback_actor: Name used when the event has no actor

    Returns:
        Sentence such as 'alice added the "bug" label'

    Example:
        >>> describe_event(ActivityEvent(id="1", kind=EventKind.LOCKED, event_name="locked"))
        'system locked this conversation'
    """
    actor = actor_login(event, fallback_actor)
    kind = event.kind

    if kind is EventKind.CLOSED:
        return f"{actor} closed this"
    if kind is EventKind.REOPENED:
        return f"{actor} reopened this"
    if kind is EventKind.LABELED:
        return f'{actor} added the "{event.label_name or ""}" label'
    if kind is EventKind.UNLABELED:
        return f'{actor} removed the "{event.label_name or ""}" label'
    if kind is EventKind.ASSIGNED:
        return f"{actor} assigned {event.assignee_login or ''}".rstrip()
    if kind is EventKind.UNASSIGNED:
        return f"{actor} unassigned {event.assignee_login or ''}".rstrip()
    if kind is EventKind.MILESTONED:
        if event.milestone_title:
            return f'{actor} added this to the "{event.milestone_title}" milestone'
        return f"{actor} set a milestone"
    if kind is EventKind.DEMILESTONED:
        if event.milestone_title:
            return f'{actor} removed this from the "{event.milestone_title}" milestone'
        return f"{actor} removed the milestone"
    if kind is EventKind.RENAMED:
        if event.rename_from is not None and event.rename_to is not None:
            return f'{actor} changed the title from "{event.rename_from}" to "{event.rename_to}"'
        return f"{actor} changed the title"
    if kind is EventKind.LOCKED:
        return f"{actor} locked this conversation"
    if kind is EventKind.UNLOCKED:
        return f"{actor} unlocked this conversation"
    if kind is EventKind.MERGED:
        return f"{actor} merged this pull request"
    return f"{actor} performed {event.event_name or 'an unknown'} action"


def summarize_entry(entry: TimelineEntry) -> str:
    """One-line summary of any timeline entry."""
    if isinstance(entry, ThreadEntry):
        item = entry.item
        author = login_or_fallback(item.author)
        return f"{author} opened #{item.number}: {item.title} [{item.state}]"
    if isinstance(entry, CommentEntry):
        first_line = entry.comment.body.strip().splitlines()[0] if entry.comment.body.strip() else ""
        return f"{login_or_fallback(entry.comment.author)} commented: {first_line}".rstrip()
    if isinstance(entry, EventEntry):
        return describe_event(entry.event)
    raise TypeError(f"Unknown timeline entry: {type(entry).__name__}")
