"""Pure data shaping and outbound checks used by the repositories and routes."""

from .image_validator import validate_remote_image
from .normalizer import COVER_FIELD, parse_timestamp, record_to_event
from .tickets import (
    effective_tickets_url,
    group_events_by_status,
    pick_closest_upcoming,
    resolve_ticket_url,
    sort_events_for_ui,
)
from .uploads import upload_image

__all__ = [
    "COVER_FIELD",
    "effective_tickets_url",
    "group_events_by_status",
    "parse_timestamp",
    "pick_closest_upcoming",
    "record_to_event",
    "resolve_ticket_url",
    "sort_events_for_ui",
    "upload_image",
    "validate_remote_image",
]
