"""
Event entity as read back from the Airtable events table.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, computed_field, field_serializer
from pydantic.alias_generators import to_camel


class EventStatus(str, Enum):
    UPCOMING = "upcoming"
    PAST = "past"
    CANCELLED = "cancelled"


def format_timestamp(value: datetime) -> str:
    """ISO 8601 in UTC with millisecond precision, e.g. 2025-03-01T22:00:00.000Z."""
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Event(BaseModel):
    """
    A scheduled party/drop.

    Attributes:
        id: Airtable record id (opaque, immutable)
        slug: URL slug chosen by the operator; uniqueness is a convention only
        title: Display title
        status: upcoming, past or cancelled
        date_start: Start instant, timezone-aware UTC
        date_end: Optional end instant
        city, state, country: Location parts; country defaults to MX
        venue, address: Optional venue details
        ticket_url: The event's own ticket link
        instagram_post_url: Announcement post
        description: Free text
        cover_url: Derived from the coverURL attachment, never stored directly
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    slug: str
    title: str
    status: EventStatus
    date_start: datetime
    date_end: datetime | None = None
    city: str | None = None
    state: str | None = None
    country: str = "MX"
    venue: str | None = None
    address: str | None = None
    ticket_url: str | None = None
    instagram_post_url: str | None = None
    description: str | None = None
    cover_url: str | None = None

    @field_serializer("date_start", "date_end")
    def _serialize_timestamp(self, value: datetime | None) -> str | None:
        return format_timestamp(value) if value else None

    @computed_field
    @property
    def location_line(self) -> str:
        return ", ".join(part for part in (self.city, self.state, self.country) if part)

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, slug='{self.slug}', status={self.status.value})>"
