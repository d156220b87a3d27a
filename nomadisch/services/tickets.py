"""Ticket call-to-action resolution and event ordering. Pure functions, no I/O."""

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime

from nomadisch.models import Event, EventStatus, GlobalSettings

_STATUS_ORDER = {EventStatus.UPCOMING: 0, EventStatus.PAST: 1, EventStatus.CANCELLED: 2}


def resolve_ticket_url(event_ticket_url: str | None, fallback_url: str | None) -> str:
    """The event's own link if it is http(s), else the fallback if it is, else ""."""
    for candidate in (event_ticket_url, fallback_url):
        url = (candidate or "").strip()
        if url.startswith("http"):
            return url
    return ""


def pick_closest_upcoming(events: Iterable[Event], now: datetime | None = None) -> Event | None:
    """Nearest upcoming event that has not started yet, else the earliest upcoming one.

    Ties keep store order (sorted() is stable).
    """
    now = now or datetime.now(UTC)
    upcoming = sorted(
        (event for event in events if event.status is EventStatus.UPCOMING),
        key=lambda event: event.date_start,
    )
    future = [event for event in upcoming if event.date_start >= now]
    if future:
        return future[0]
    return upcoming[0] if upcoming else None


def effective_tickets_url(
    settings: GlobalSettings, events: Iterable[Event], now: datetime | None = None
) -> str:
    """Home page CTA: global override, else the closest upcoming event's link, else "".

    The global override always wins, the opposite of resolve_ticket_url.
    """
    override = settings.tickets_cta_url.strip()
    if override:
        return override
    closest = pick_closest_upcoming(events, now)
    return ((closest.ticket_url if closest else None) or "").strip()


def sort_events_for_ui(events: Sequence[Event]) -> list[Event]:
    """Upcoming soonest first, then past newest first, then cancelled newest first."""
    def key(event: Event) -> tuple[int, float]:
        timestamp = event.date_start.timestamp()
        if event.status is EventStatus.UPCOMING:
            return _STATUS_ORDER[event.status], timestamp
        return _STATUS_ORDER[event.status], -timestamp

    return sorted(events, key=key)


def group_events_by_status(events: Sequence[Event]) -> dict[EventStatus, list[Event]]:
    """Bucket events per status, each bucket ordered as in sort_events_for_ui."""
    groups: dict[EventStatus, list[Event]] = {status: [] for status in EventStatus}
    for event in sort_events_for_ui(events):
        groups[event.status].append(event)
    return groups
