"""Site settings repository backed by a single-row Airtable table."""

from collections.abc import Mapping
from typing import Any

import structlog

from nomadisch.core.airtable import AirtableClient, Record
from nomadisch.models import GlobalSettings, GlobalSettingsUpdate

logger = structlog.get_logger(__name__)

# model field -> Airtable column
SETTINGS_FIELDS = {
    "brand": "brand",
    "instagram_url": "instagramUrl",
    "tickets_cta_url": "ticketsCtaUrl",
    "tickets_cta_text": "ticketsCtaText",
    "events_cta_text": "eventsCtaText",
}


def record_to_settings(record: Record | None) -> GlobalSettings:
    """Stored values win; blanks fall back to the defaults field by field."""
    if not record:
        return GlobalSettings()
    fields = record.get("fields")
    if not isinstance(fields, Mapping):
        fields = {}

    values: dict[str, Any] = {}
    for name, column in SETTINGS_FIELDS.items():
        raw = fields.get(column)
        text = str(raw).strip() if raw is not None else ""
        if text:
            values[name] = text
    return GlobalSettings(id=record.get("id"), **values)


class SettingsRepository:
    """Reads and writes the GlobalSettings singleton (first row of the table)."""

    def __init__(self, store: AirtableClient, table: str) -> None:
        self.store = store
        self.table = table

    async def _first_record(self, cache_seconds: int) -> Record | None:
        records = await self.store.list_records(
            self.table, page_size=1, max_pages=1, max_records=1, cache_seconds=cache_seconds
        )
        return records[0] if records else None

    async def get_settings(self, cache_seconds: int = 60) -> GlobalSettings:
        return record_to_settings(await self._first_record(cache_seconds))

    async def update_settings(self, update: GlobalSettingsUpdate) -> GlobalSettings:
        """Write the provided fields. ``tickets_cta_url=""`` clears the CTA override."""
        fields = {
            SETTINGS_FIELDS[name]: value.strip()
            for name, value in update.model_dump(exclude_unset=True).items()
            if value is not None
        }

        existing = await self._first_record(cache_seconds=0)
        if existing and existing.get("id"):
            record = await self.store.update_record(self.table, existing["id"], fields)
        else:
            record = await self.store.create_record(self.table, fields)

        logger.info("settings_updated", record_id=record.get("id"), fields=sorted(fields))
        return record_to_settings(record)
