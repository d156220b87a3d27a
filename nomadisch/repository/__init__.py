"""Repository layer over the Airtable base.

Airtable is the system of record; nothing is persisted locally.
"""

from .event_repository import EventRepository, event_fields
from .settings_repository import SettingsRepository

__all__ = ["EventRepository", "SettingsRepository", "event_fields"]
