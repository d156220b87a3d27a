"""
Write-side shapes for creating and updating events.

The cover attachment has three distinct intents, modeled as a tagged union so
"leave it alone" and "clear it" can never be confused:

    CoverUnset()            -> coverURL key omitted from the write payload
    CoverClear()            -> coverURL written as []
    CoverSet(url="https://...") -> URL validated, then written as one attachment
"""

from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .event import EventStatus


class CoverUnset(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["unset"] = "unset"


class CoverClear(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["clear"] = "clear"


class CoverSet(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    kind: Literal["set"] = "set"
    url: str = Field(min_length=1)


CoverUpdate = Annotated[CoverUnset | CoverClear | CoverSet, Field(discriminator="kind")]


def cover_update_from(value: str | None, *, provided: bool) -> CoverUnset | CoverClear | CoverSet:
    """Map a raw form value onto the cover intent.

    ``provided`` says whether the key was present at all; a present but empty
    (or null) value means clear.
    """
    if not provided:
        return CoverUnset()
    url = (value or "").strip()
    return CoverSet(url=url) if url else CoverClear()


class UpsertEventInput(BaseModel):
    """Event fields submitted to the store for create/update.

    Naive timestamps (e.g. from a datetime-local input) are taken as UTC.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    slug: str = Field(min_length=1)
    title: str = Field(min_length=1)
    status: EventStatus
    date_start: datetime
    date_end: datetime | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    venue: str | None = None
    address: str | None = None
    ticket_url: str | None = None
    instagram_post_url: str | None = None
    description: str | None = None
    cover: CoverUpdate = Field(default_factory=CoverUnset)

    @field_validator("date_start", "date_end")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
