"""
Pydantic models for the Nomadisch events site.
"""

from .event import Event, EventStatus, format_timestamp
from .settings import GlobalSettings, GlobalSettingsUpdate
from .upsert import (
    CoverClear,
    CoverSet,
    CoverUnset,
    CoverUpdate,
    UpsertEventInput,
    cover_update_from,
)

__all__: list[str] = [
    "CoverClear",
    "CoverSet",
    "CoverUnset",
    "CoverUpdate",
    "Event",
    "EventStatus",
    "GlobalSettings",
    "GlobalSettingsUpdate",
    "UpsertEventInput",
    "cover_update_from",
    "format_timestamp",
]
