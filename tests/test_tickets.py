"""Ticket link resolution and event ordering."""

from datetime import UTC, datetime

import pytest

from nomadisch.models import Event, EventStatus, GlobalSettings
from nomadisch.services.tickets import (
    effective_tickets_url,
    group_events_by_status,
    pick_closest_upcoming,
    resolve_ticket_url,
    sort_events_for_ui,
)

NOW = datetime(2030, 1, 1, tzinfo=UTC)


def event(record_id: str, status: EventStatus, when: datetime, ticket_url: str | None = None) -> Event:
    return Event(
        id=record_id,
        slug=record_id,
        title=record_id.upper(),
        status=status,
        date_start=when,
        ticket_url=ticket_url,
    )


@pytest.mark.parametrize(
    ("event_url", "fallback", "expected"),
    [
        ("https://a", "https://b", "https://a"),
        ("", "https://b", "https://b"),
        (None, "https://b", "https://b"),
        ("  https://a  ", None, "https://a"),
        ("mailto:x@example.com", "", ""),
        ("tickets.example.com", "http://b", "http://b"),
        (None, None, ""),
    ],
)
def test_resolve_ticket_url(event_url: str | None, fallback: str | None, expected: str) -> None:
    assert resolve_ticket_url(event_url, fallback) == expected


def test_closest_upcoming_prefers_next_future_event() -> None:
    events = [
        event("later", EventStatus.UPCOMING, datetime(2030, 6, 1, tzinfo=UTC)),
        event("stale", EventStatus.UPCOMING, datetime(2029, 12, 1, tzinfo=UTC)),
        event("next", EventStatus.UPCOMING, datetime(2030, 2, 1, tzinfo=UTC)),
        event("gone", EventStatus.PAST, datetime(2030, 1, 15, tzinfo=UTC)),
    ]

    assert pick_closest_upcoming(events, NOW).id == "next"


def test_closest_upcoming_falls_back_to_earliest_when_all_started() -> None:
    events = [
        event("b", EventStatus.UPCOMING, datetime(2029, 12, 20, tzinfo=UTC)),
        event("a", EventStatus.UPCOMING, datetime(2029, 12, 1, tzinfo=UTC)),
    ]

    assert pick_closest_upcoming(events, NOW).id == "a"


def test_closest_upcoming_none_without_upcoming() -> None:
    assert pick_closest_upcoming([event("p", EventStatus.PAST, NOW)], NOW) is None


def test_global_override_wins_over_event_link() -> None:
    settings = GlobalSettings(tickets_cta_url="https://global.example.com")
    events = [event("next", EventStatus.UPCOMING, datetime(2030, 2, 1, tzinfo=UTC), "https://own")]

    assert effective_tickets_url(settings, events, NOW) == "https://global.example.com"


def test_effective_url_uses_closest_upcoming_event() -> None:
    events = [
        event("far", EventStatus.UPCOMING, datetime(2030, 9, 1, tzinfo=UTC), "https://far"),
        event("near", EventStatus.UPCOMING, datetime(2030, 2, 1, tzinfo=UTC), "https://near"),
    ]

    assert effective_tickets_url(GlobalSettings(), events, NOW) == "https://near"


def test_effective_url_empty_without_any_link() -> None:
    events = [event("near", EventStatus.UPCOMING, datetime(2030, 2, 1, tzinfo=UTC))]

    assert effective_tickets_url(GlobalSettings(), events, NOW) == ""


def test_sort_and_group_for_ui() -> None:
    events = [
        event("p-old", EventStatus.PAST, datetime(2028, 1, 1, tzinfo=UTC)),
        event("u-late", EventStatus.UPCOMING, datetime(2030, 5, 1, tzinfo=UTC)),
        event("c", EventStatus.CANCELLED, datetime(2030, 3, 1, tzinfo=UTC)),
        event("p-new", EventStatus.PAST, datetime(2029, 1, 1, tzinfo=UTC)),
        event("u-soon", EventStatus.UPCOMING, datetime(2030, 2, 1, tzinfo=UTC)),
    ]

    assert [e.id for e in sort_events_for_ui(events)] == ["u-soon", "u-late", "p-new", "p-old", "c"]

    groups = group_events_by_status(events)
    assert [e.id for e in groups[EventStatus.UPCOMING]] == ["u-soon", "u-late"]
    assert [e.id for e in groups[EventStatus.PAST]] == ["p-new", "p-old"]
    assert [e.id for e in groups[EventStatus.CANCELLED]] == ["c"]


def test_group_always_has_every_status() -> None:
    assert group_events_by_status([]) == {status: [] for status in EventStatus}
