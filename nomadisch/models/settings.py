"""
Site-wide settings singleton (brand, Instagram link, tickets call-to-action).
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_BRAND = "Nomadisch Labs"
DEFAULT_INSTAGRAM_URL = "https://www.instagram.com/nomadischlabs/"
DEFAULT_TICKETS_CTA_TEXT = "TICKETS"
DEFAULT_EVENTS_CTA_TEXT = "VIEW ALL"


class GlobalSettings(BaseModel):
    """Read model. Every field has a default so an empty table still renders."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str | None = Field(default=None, description="Airtable record id, None when not stored yet")
    brand: str = DEFAULT_BRAND
    instagram_url: str = DEFAULT_INSTAGRAM_URL
    tickets_cta_url: str = ""
    tickets_cta_text: str = DEFAULT_TICKETS_CTA_TEXT
    events_cta_text: str = DEFAULT_EVENTS_CTA_TEXT


class GlobalSettingsUpdate(BaseModel):
    """Admin write shape. Omitted fields are left as stored; ``ticketsCtaUrl=""`` clears the override."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    brand: str | None = None
    instagram_url: str | None = None
    tickets_cta_url: str | None = None
    tickets_cta_text: str | None = None
    events_cta_text: str | None = None
