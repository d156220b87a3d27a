"""Password-gated admin actions: events CRUD, site settings, cover uploads.

Every route depends on ``require_admin`` (header ``X-Admin-Password``), which
fails before any repository or upstream call is made.
"""

from datetime import datetime

import httpx
import structlog
from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from nomadisch.core.dependencies import (
    get_cloudinary_settings,
    get_event_repository,
    get_http_client,
    get_settings_repository,
    require_admin,
)
from nomadisch.core.exceptions import BadRequestError
from nomadisch.main_config import CloudinaryConfig
from nomadisch.models import (
    Event,
    EventStatus,
    GlobalSettings,
    GlobalSettingsUpdate,
    UpsertEventInput,
    cover_update_from,
)
from nomadisch.repository import EventRepository, SettingsRepository
from nomadisch.services.uploads import upload_image

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)

logger = structlog.get_logger(__name__)


class AdminEventPayload(BaseModel):
    """Event form as submitted by the admin UI (camelCase JSON).

    ``coverUrl`` is tri-state: key absent leaves the attachment untouched,
    ``""`` (or null) clears it, a URL sets it.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

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
    cover_url: str | None = None

    @field_validator(
        "date_end", "city", "state", "country", "venue", "address",
        "ticket_url", "instagram_post_url", "description",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_upsert_input(self) -> UpsertEventInput:
        cover = cover_update_from(self.cover_url, provided="cover_url" in self.model_fields_set)
        return UpsertEventInput(**self.model_dump(exclude={"cover_url"}), cover=cover)


class DeletedEvent(BaseModel):
    id: str
    deleted: bool = True


class UploadedImage(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    secure_url: str


@router.get("/events", response_model=list[Event])
async def admin_list_events(repo: EventRepository = Depends(get_event_repository)) -> list[Event]:
    """All events, bypassing any cache window."""
    return await repo.list_events(cache_seconds=0)


@router.post("/events", response_model=Event, status_code=201)
async def admin_create_event(
    payload: AdminEventPayload, repo: EventRepository = Depends(get_event_repository)
) -> Event:
    data = payload.to_upsert_input()
    logger.info("admin_create_event", slug=data.slug, cover=data.cover.kind)
    return await repo.create_event(data)


@router.patch("/events/{record_id}", response_model=Event)
async def admin_update_event(
    record_id: str,
    payload: AdminEventPayload,
    repo: EventRepository = Depends(get_event_repository),
) -> Event:
    record_id = record_id.strip()
    if not record_id:
        raise BadRequestError(message="Missing record id")

    data = payload.to_upsert_input()
    logger.info("admin_update_event", record_id=record_id, cover=data.cover.kind)
    return await repo.update_event_by_id(record_id, data)


@router.delete("/events/{record_id}", response_model=DeletedEvent)
async def admin_delete_event(
    record_id: str, repo: EventRepository = Depends(get_event_repository)
) -> DeletedEvent:
    deleted_id = await repo.delete_event_by_id(record_id.strip())
    return DeletedEvent(id=deleted_id)


@router.get("/settings", response_model=GlobalSettings)
async def admin_get_settings(
    repo: SettingsRepository = Depends(get_settings_repository),
) -> GlobalSettings:
    return await repo.get_settings(cache_seconds=0)


@router.put("/settings", response_model=GlobalSettings)
async def admin_update_settings(
    update: GlobalSettingsUpdate,
    repo: SettingsRepository = Depends(get_settings_repository),
) -> GlobalSettings:
    return await repo.update_settings(update)


@router.post("/uploads", response_model=UploadedImage, status_code=201)
async def admin_upload_cover(
    file: UploadFile = File(...),
    client: httpx.AsyncClient = Depends(get_http_client),
    config: CloudinaryConfig = Depends(get_cloudinary_settings),
) -> UploadedImage:
    """Proxy an image to Cloudinary; use the returned secureUrl as an event's coverUrl."""
    if file.content_type and not file.content_type.startswith("image/"):
        raise BadRequestError(message="Only image uploads are accepted", detail={"content_type": file.content_type})

    content = await file.read()
    if not content:
        raise BadRequestError(message="Uploaded file is empty")

    secure_url = await upload_image(
        client, config, file.filename or "cover", content, file.content_type
    )
    return UploadedImage(secure_url=secure_url)
