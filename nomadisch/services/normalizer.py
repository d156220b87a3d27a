"""Raw Airtable record -> Event.

``record_to_event`` is total: malformed records come back as ``None`` and are
dropped by the caller. It never raises for any input shape.
"""

import math
from collections.abc import Mapping
from datetime import UTC, date, datetime
from typing import Any

from nomadisch.models import Event, EventStatus

# Attachment field name in the Airtable schema. Case-sensitive.
COVER_FIELD = "coverURL"

DEFAULT_COUNTRY = "MX"


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an Airtable date/datetime value into an aware UTC datetime.

    Accepts ISO 8601 strings (naive and date-only values are UTC), datetime and
    date objects, and epoch milliseconds.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, int | float):
        try:
            if not math.isfinite(value):
                return None
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    # Offsets at the edges of the datetime range overflow on conversion
    try:
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed.astimezone(UTC)
    except (OverflowError, ValueError):
        return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _optional_text(value: Any) -> str | None:
    return _text(value) or None


def cover_url_from(fields: Mapping[str, Any]) -> str | None:
    """First attachment's large thumbnail, else its url, else None."""
    attachments = fields.get(COVER_FIELD)
    if not isinstance(attachments, list) or not attachments:
        return None
    first = attachments[0]
    if not isinstance(first, Mapping):
        return None

    thumbnails = first.get("thumbnails")
    large = thumbnails.get("large") if isinstance(thumbnails, Mapping) else None
    if isinstance(large, Mapping) and (url := _text(large.get("url"))):
        return url
    return _optional_text(first.get("url"))


def parse_status(value: Any) -> EventStatus:
    try:
        return EventStatus(_text(value).lower())
    except ValueError:
        return EventStatus.PAST


def record_to_event(record: Any) -> Event | None:
    """Normalize one ``{"id", "fields"}`` record, or return None if it is not a valid Event."""
    if not isinstance(record, Mapping):
        return None
    fields = record.get("fields")
    if not isinstance(fields, Mapping):
        fields = {}

    record_id = _text(record.get("id"))
    slug = _text(fields.get("slug"))
    title = _text(fields.get("title"))
    date_start = parse_timestamp(fields.get("dateStart"))

    if not record_id or not slug or not title or date_start is None:
        return None

    return Event(
        id=record_id,
        slug=slug,
        title=title,
        status=parse_status(fields.get("status")),
        date_start=date_start,
        date_end=parse_timestamp(fields.get("dateEnd")),
        city=_optional_text(fields.get("city")),
        state=_optional_text(fields.get("state")),
        country=_text(fields.get("country")) or DEFAULT_COUNTRY,
        venue=_optional_text(fields.get("venue")),
        address=_optional_text(fields.get("address")),
        ticket_url=_optional_text(fields.get("ticketUrl")),
        instagram_post_url=_optional_text(fields.get("instagramPostUrl")),
        description=_optional_text(fields.get("description")),
        cover_url=cover_url_from(fields),
    )
