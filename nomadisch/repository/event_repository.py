"""Event repository backed by the Airtable events table."""

from typing import Any

import httpx
import structlog

from nomadisch.core.airtable import AirtableClient, Record
from nomadisch.core.exceptions import AttachmentNotPersistedError, InternalServerError
from nomadisch.models import CoverClear, CoverSet, Event, UpsertEventInput, format_timestamp
from nomadisch.services.image_validator import validate_remote_image
from nomadisch.services.normalizer import COVER_FIELD, DEFAULT_COUNTRY, record_to_event

logger = structlog.get_logger(__name__)

COVER_FILENAME = "cover.jpg"


def event_fields(data: UpsertEventInput) -> dict[str, Any]:
    """Map an upsert input onto Airtable field names.

    Empty optional values are omitted rather than written as "". The cover
    attachment key is present only for CoverClear ([]) and CoverSet (one item).
    """
    fields: dict[str, Any] = {
        "slug": data.slug.strip(),
        "title": data.title.strip(),
        "status": data.status.value,
        "dateStart": format_timestamp(data.date_start),
        "country": (data.country or "").strip() or DEFAULT_COUNTRY,
    }
    if data.date_end is not None:
        fields["dateEnd"] = format_timestamp(data.date_end)

    optional = {
        "city": data.city,
        "state": data.state,
        "venue": data.venue,
        "address": data.address,
        "ticketUrl": data.ticket_url,
        "instagramPostUrl": data.instagram_post_url,
        "description": data.description,
    }
    for name, value in optional.items():
        if value and value.strip():
            fields[name] = value.strip()

    match data.cover:
        case CoverSet(url=url):
            fields[COVER_FIELD] = [{"url": url, "filename": COVER_FILENAME}]
        case CoverClear():
            fields[COVER_FIELD] = []
        case _:
            pass

    return fields


class EventRepository:
    """Read, write and verify event records.

    Lookups by slug list the whole table and filter in memory (at most
    MAX_PAGES * PAGE_SIZE records); callers must not treat them as O(1).
    """

    def __init__(self, store: AirtableClient, client: httpx.AsyncClient, table: str) -> None:
        """Initialize EventRepository.

        Args:
            store: Airtable client for the configured base
            client: HTTP client used to probe cover image URLs
            table: Events table name
        """
        self.store = store
        self.client = client
        self.table = table

    async def list_events(self, cache_seconds: int = 60) -> list[Event]:
        """All valid events, newest dateStart first. Malformed records are dropped."""
        records = await self.store.list_records(
            self.table,
            sort=[("dateStart", "desc")],
            cache_seconds=cache_seconds,
        )
        events = [event for record in records if (event := record_to_event(record)) is not None]

        dropped = len(records) - len(events)
        if dropped:
            logger.info("events_dropped_invalid", dropped=dropped, total=len(records))
        return events

    async def get_event_by_slug(self, slug: str, cache_seconds: int = 60) -> Event | None:
        events = await self.list_events(cache_seconds=cache_seconds)
        return next((event for event in events if event.slug == slug), None)

    async def create_event(self, data: UpsertEventInput) -> Event:
        """Create a record; a CoverSet URL is probed first and verified after the write."""
        await self._precheck_cover(data)

        record = await self.store.create_record(self.table, event_fields(data))
        self._verify_attachment(data, record, "create")

        event = self._normalize(record, "create")
        logger.info("event_created", record_id=event.id, slug=event.slug)
        return event

    async def update_event_by_id(self, record_id: str, data: UpsertEventInput) -> Event:
        """Patch an existing record. No version check: last write wins at Airtable."""
        await self._precheck_cover(data)

        fields = event_fields(data)
        logger.info(
            "event_update_requested",
            record_id=record_id,
            cover=data.cover.kind,
            sends_cover_field=COVER_FIELD in fields,
        )

        record = await self.store.update_record(self.table, record_id, fields)
        self._verify_attachment(data, record, "update")

        event = self._normalize(record, "update")
        logger.info("event_updated", record_id=event.id, slug=event.slug)
        return event

    async def delete_event_by_id(self, record_id: str) -> str:
        """Delete a record and return its id."""
        record = await self.store.delete_record(self.table, record_id)
        deleted_id = str(record.get("id") or record_id)
        logger.info("event_deleted", record_id=deleted_id)
        return deleted_id

    async def _precheck_cover(self, data: UpsertEventInput) -> None:
        if isinstance(data.cover, CoverSet):
            await validate_remote_image(self.client, data.cover.url)

    @staticmethod
    def _verify_attachment(data: UpsertEventInput, record: Record, mode: str) -> None:
        # A 2xx does not mean Airtable managed to fetch the attachment
        if not isinstance(data.cover, CoverSet):
            return
        fields = record.get("fields")
        attachments = fields.get(COVER_FIELD) if isinstance(fields, dict) else None
        if not isinstance(attachments, list) or not attachments:
            logger.error("cover_not_persisted", mode=mode, record_id=record.get("id"))
            raise AttachmentNotPersistedError(mode, record.get("id"))

    @staticmethod
    def _normalize(record: Record, mode: str) -> Event:
        event = record_to_event(record)
        if event is None:
            raise InternalServerError(
                f"{mode.capitalize()}d event could not be normalized",
                detail={"record_id": record.get("id")},
            )
        return event
