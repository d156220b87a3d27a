"""Public page view models: home, events list, event detail, about.

Pages never fail because Airtable is down or unconfigured: they log the
error and return empty data with a ``notice`` for the front end to show.
"""

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from nomadisch.core.dependencies import get_event_repository, get_settings_repository, get_site_settings
from nomadisch.core.exceptions import AppError, NotFoundError
from nomadisch.main_config import SiteConfig
from nomadisch.models import Event, EventStatus, GlobalSettings
from nomadisch.repository import EventRepository, SettingsRepository
from nomadisch.services.tickets import (
    effective_tickets_url,
    group_events_by_status,
    pick_closest_upcoming,
    resolve_ticket_url,
)

router = APIRouter(
    prefix="/api/pages",
    tags=["pages"],
)

logger = structlog.get_logger(__name__)

EVENTS_UNAVAILABLE = "Events are temporarily unavailable."
INSTAGRAM_CTA_LABEL = "FOLLOW / DM (IG)"


class PageModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CallToAction(PageModel):
    href: str
    label: str


class HomePage(PageModel):
    settings: GlobalSettings
    tickets_cta: CallToAction
    next_event: Event | None = None
    events: list[Event]
    notice: str | None = None


class EventsPage(PageModel):
    settings: GlobalSettings
    upcoming: list[Event]
    past: list[Event]
    cancelled: list[Event]
    notice: str | None = None


class EventDetailPage(PageModel):
    settings: GlobalSettings
    event: Event | None
    ticket_url: str = ""
    notice: str | None = None


class AboutPage(PageModel):
    settings: GlobalSettings


async def load_settings(repo: SettingsRepository, cache_seconds: int) -> GlobalSettings:
    try:
        return await repo.get_settings(cache_seconds=cache_seconds)
    except AppError as exc:
        logger.warning("settings_unavailable", error=exc.error_code, message=exc.message)
        return GlobalSettings()


async def load_events(repo: EventRepository, cache_seconds: int) -> tuple[list[Event], str | None]:
    try:
        return await repo.list_events(cache_seconds=cache_seconds), None
    except AppError as exc:
        logger.warning("events_unavailable", error=exc.error_code, message=exc.message)
        return [], EVENTS_UNAVAILABLE


def set_cache_headers(response: Response, cache_seconds: int, notice: str | None = None) -> None:
    if notice or cache_seconds <= 0:
        response.headers["Cache-Control"] = "no-store"
    else:
        response.headers["Cache-Control"] = f"public, max-age={cache_seconds}"


@router.get("/home", response_model=HomePage)
async def home_page(
    response: Response,
    events_repo: EventRepository = Depends(get_event_repository),
    settings_repo: SettingsRepository = Depends(get_settings_repository),
    site: SiteConfig = Depends(get_site_settings),
) -> HomePage:
    """Hero CTA, next event and the full list, newest first."""
    settings = await load_settings(settings_repo, site.cache_seconds)
    events, notice = await load_events(events_repo, site.cache_seconds)
    events = sorted(events, key=lambda event: event.date_start, reverse=True)

    now = datetime.now(UTC)
    tickets_url = effective_tickets_url(settings, events, now)
    cta = CallToAction(
        href=tickets_url or settings.instagram_url,
        label=settings.tickets_cta_text if tickets_url else INSTAGRAM_CTA_LABEL,
    )

    set_cache_headers(response, site.cache_seconds, notice)
    return HomePage(
        settings=settings,
        tickets_cta=cta,
        next_event=pick_closest_upcoming(events, now),
        events=events,
        notice=notice,
    )


@router.get("/events", response_model=EventsPage)
async def events_page(
    response: Response,
    events_repo: EventRepository = Depends(get_event_repository),
    settings_repo: SettingsRepository = Depends(get_settings_repository),
    site: SiteConfig = Depends(get_site_settings),
) -> EventsPage:
    settings = await load_settings(settings_repo, site.cache_seconds)
    events, notice = await load_events(events_repo, site.cache_seconds)
    groups = group_events_by_status(events)

    set_cache_headers(response, site.cache_seconds, notice)
    return EventsPage(
        settings=settings,
        upcoming=groups[EventStatus.UPCOMING],
        past=groups[EventStatus.PAST],
        cancelled=groups[EventStatus.CANCELLED],
        notice=notice,
    )


@router.get("/events/{slug}", response_model=EventDetailPage)
async def event_detail_page(
    slug: str,
    response: Response,
    events_repo: EventRepository = Depends(get_event_repository),
    settings_repo: SettingsRepository = Depends(get_settings_repository),
    site: SiteConfig = Depends(get_site_settings),
) -> EventDetailPage:
    """One event by slug. 404 only when the store answered and the slug is absent."""
    settings = await load_settings(settings_repo, site.cache_seconds)
    try:
        event = await events_repo.get_event_by_slug(slug, cache_seconds=site.cache_seconds)
    except AppError as exc:
        logger.warning("event_unavailable", slug=slug, error=exc.error_code)
        set_cache_headers(response, site.cache_seconds, EVENTS_UNAVAILABLE)
        return EventDetailPage(settings=settings, event=None, notice=EVENTS_UNAVAILABLE)

    if event is None:
        raise NotFoundError(message="Event not found", detail={"slug": slug})

    set_cache_headers(response, site.cache_seconds)
    return EventDetailPage(
        settings=settings,
        event=event,
        ticket_url=resolve_ticket_url(event.ticket_url, settings.tickets_cta_url),
    )


@router.get("/about", response_model=AboutPage)
async def about_page(
    response: Response,
    settings_repo: SettingsRepository = Depends(get_settings_repository),
    site: SiteConfig = Depends(get_site_settings),
) -> AboutPage:
    settings = await load_settings(settings_repo, site.cache_seconds)
    set_cache_headers(response, site.cache_seconds)
    return AboutPage(settings=settings)
