"""HTTP surface: public pages, the admin gate and admin actions."""

import json

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from factories import ADMIN_PASSWORD, Recorder, make_record, past_gdl, upcoming_cdmx
from nomadisch.core.dependencies import (
    get_admin_settings,
    get_airtable_settings,
    get_cloudinary_settings,
    get_http_client,
    get_site_settings,
)
from nomadisch.core.exceptions import register_exception_handlers
from nomadisch.main_config import AdminConfig, AirtableConfig, CloudinaryConfig, SiteConfig
from nomadisch.routes import admin, health, pages

AUTH = {"X-Admin-Password": ADMIN_PASSWORD}
SECURE_URL = "https://res.cloudinary.com/nomadisch/image/upload/v1/nomadisch/events/abc.jpg"


def airtable_ok(records: list[dict], settings: list[dict] | None = None):
    def respond(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/Globals"):
            return httpx.Response(200, json={"records": settings or []})
        if request.method in ("POST", "PATCH"):
            record_id = request.url.path.rsplit("/", 1)[-1] if request.method == "PATCH" else "recNEW"
            return httpx.Response(200, json=make_record(record_id, **json.loads(request.content)["fields"]))
        return httpx.Response(200, json={"records": records})

    return respond


def airtable_down(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503, text="Service Unavailable")


def build_app(
    recorder: Recorder,
    airtable_config: AirtableConfig,
    admin_config: AdminConfig,
    cloudinary_config: CloudinaryConfig,
) -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    for module in (health, pages, admin):
        app.include_router(module.router)

    async def http_client() -> httpx.AsyncClient:
        return recorder.client()

    app.dependency_overrides[get_http_client] = http_client
    app.dependency_overrides[get_airtable_settings] = lambda: airtable_config
    app.dependency_overrides[get_admin_settings] = lambda: admin_config
    app.dependency_overrides[get_cloudinary_settings] = lambda: cloudinary_config
    app.dependency_overrides[get_site_settings] = lambda: SiteConfig(cache_seconds=60)
    return app


@pytest.fixture
def make_client(airtable_config, admin_config, cloudinary_config):
    def factory(respond) -> tuple[TestClient, Recorder]:
        recorder = Recorder(respond)
        app = build_app(recorder, airtable_config, admin_config, cloudinary_config)
        return TestClient(app), recorder

    return factory


# =============================================================================
# Health
# =============================================================================


def test_health_does_not_touch_airtable(make_client) -> None:
    client, recorder = make_client(airtable_down)

    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
    assert recorder.requests == []


# =============================================================================
# Admin gate
# =============================================================================


@pytest.mark.parametrize("headers", [{}, {"X-Admin-Password": "nope"}, {"X-Admin-Password": ""}])
def test_admin_rejects_bad_password_before_any_call(make_client, headers: dict) -> None:
    client, recorder = make_client(airtable_ok([upcoming_cdmx()]))

    response = client.get("/api/admin/events", headers=headers)

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid admin password"
    assert recorder.requests == []


def test_admin_without_server_password_is_misconfigured(airtable_config, cloudinary_config) -> None:
    recorder = Recorder(airtable_ok([]))
    app = build_app(recorder, airtable_config, AdminConfig(password=None), cloudinary_config)

    response = TestClient(app).get("/api/admin/events", headers=AUTH)

    assert response.status_code == 500
    assert response.json()["message"] == "Missing ADMIN_PASSWORD"
    assert recorder.requests == []


def test_admin_upload_is_gated(make_client) -> None:
    client, recorder = make_client(airtable_down)

    response = client.post("/api/admin/uploads", files={"file": ("a.jpg", b"\xff\xd8", "image/jpeg")})

    assert response.status_code == 401
    assert recorder.requests == []


# =============================================================================
# Admin actions
# =============================================================================


def test_admin_lists_events_uncached(make_client) -> None:
    client, recorder = make_client(airtable_ok([upcoming_cdmx(), past_gdl()]))

    response = client.get("/api/admin/events", headers=AUTH)

    assert response.status_code == 200
    events = response.json()
    assert [event["slug"] for event in events] == ["cdmx-warehouse", "gdl-rooftop"]
    assert events[0]["dateStart"] == "2030-03-01T22:00:00.000Z"
    assert events[0]["coverUrl"] == "https://v5.airtableusercontent.com/large.jpg"
    assert events[0]["locationLine"] == "Ciudad de México, CDMX, MX"
    assert events[1]["locationLine"] == "Guadalajara, MX"
    assert recorder.requests[0].headers["Cache-Control"] == "no-cache"


def test_admin_create_event(make_client) -> None:
    client, recorder = make_client(airtable_ok([]))
    payload = {
        "slug": " tulum-jungle ",
        "title": "Jungle",
        "status": "upcoming",
        "dateStart": "2030-07-04T23:00",
        "city": "Tulum",
        "venue": "",
    }

    response = client.post("/api/admin/events", json=payload, headers=AUTH)

    assert response.status_code == 201
    assert response.json()["id"] == "recNEW"
    sent = json.loads(recorder.requests[0].content)
    assert sent["typecast"] is True
    assert sent["fields"]["slug"] == "tulum-jungle"
    assert sent["fields"]["dateStart"] == "2030-07-04T23:00:00.000Z"
    assert "venue" not in sent["fields"]
    assert "coverURL" not in sent["fields"]


@pytest.mark.parametrize(("cover", "expected"), [("", []), (None, [])])
def test_admin_update_clears_cover(make_client, cover, expected) -> None:
    client, recorder = make_client(airtable_ok([]))
    payload = {"slug": "cdmx", "title": "CDMX", "status": "past", "dateStart": "2024-01-01T00:00:00Z", "coverUrl": cover}

    response = client.patch("/api/admin/events/recA", json=payload, headers=AUTH)

    assert response.status_code == 200
    assert [r.method for r in recorder.requests] == ["PATCH"]
    assert json.loads(recorder.requests[0].content)["fields"]["coverURL"] == expected


def test_admin_update_with_unreachable_cover_blocks_write(make_client) -> None:
    def respond(request: httpx.Request) -> httpx.Response:
        if request.url.host == "cdn.example.com":
            return httpx.Response(404)
        return airtable_ok([])(request)

    client, recorder = make_client(respond)
    payload = {
        "slug": "cdmx",
        "title": "CDMX",
        "status": "upcoming",
        "dateStart": "2030-01-01T00:00:00Z",
        "coverUrl": "https://cdn.example.com/missing.jpg",
    }

    response = client.patch("/api/admin/events/recA", json=payload, headers=AUTH)

    assert response.status_code == 422
    assert response.json()["error_code"] == "UnreachableError"
    assert all(r.method != "PATCH" for r in recorder.requests)


def test_admin_create_rejects_invalid_payload(make_client) -> None:
    client, recorder = make_client(airtable_ok([]))

    response = client.post("/api/admin/events", json={"slug": "x", "status": "upcoming"}, headers=AUTH)

    assert response.status_code == 422
    assert response.json()["error_code"] == "ValidationError"
    assert recorder.requests == []


def test_admin_delete_event(make_client) -> None:
    client, recorder = make_client(lambda request: httpx.Response(200, json={"id": "recA", "deleted": True}))

    response = client.delete("/api/admin/events/recA", headers=AUTH)

    assert response.status_code == 200
    assert response.json() == {"id": "recA", "deleted": True}
    assert recorder.requests[0].method == "DELETE"


def test_admin_store_failure_is_bad_gateway(make_client) -> None:
    client, _ = make_client(airtable_down)

    response = client.get("/api/admin/events", headers=AUTH)

    assert response.status_code == 502
    assert response.json()["error_code"] == "StoreRequestError"


def test_admin_update_settings(make_client) -> None:
    client, recorder = make_client(airtable_ok([], settings=[make_record("recG", brand="NMDSCH")]))

    response = client.put("/api/admin/settings", json={"ticketsCtaUrl": "https://tickets.example.com"}, headers=AUTH)

    assert response.status_code == 200
    assert response.json()["ticketsCtaUrl"] == "https://tickets.example.com"
    assert recorder.requests[-1].method == "PATCH"


def test_admin_upload_proxies_to_cloudinary(make_client) -> None:
    def respond(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"secure_url": SECURE_URL})

    client, recorder = make_client(respond)

    response = client.post(
        "/api/admin/uploads", files={"file": ("flyer.jpg", b"\xff\xd8\xff", "image/jpeg")}, headers=AUTH
    )

    assert response.status_code == 201
    assert response.json() == {"secureUrl": SECURE_URL}
    assert recorder.requests[0].url.host == "api.cloudinary.com"


def test_admin_upload_rejects_non_image(make_client) -> None:
    client, recorder = make_client(airtable_down)

    response = client.post("/api/admin/uploads", files={"file": ("notes.txt", b"hi", "text/plain")}, headers=AUTH)

    assert response.status_code == 400
    assert recorder.requests == []


# =============================================================================
# Public pages
# =============================================================================


def test_home_page(make_client) -> None:
    client, _ = make_client(airtable_ok([past_gdl(), upcoming_cdmx()]))

    response = client.get("/api/pages/home")

    assert response.status_code == 200
    assert response.headers["Cache-Control"] == "public, max-age=60"
    data = response.json()
    assert data["ticketsCta"] == {"href": "https://tickets.example.com/cdmx", "label": "TICKETS"}
    assert data["nextEvent"]["slug"] == "cdmx-warehouse"
    assert [event["slug"] for event in data["events"]] == ["cdmx-warehouse", "gdl-rooftop"]
    assert "notice" not in data or data["notice"] is None


def test_home_page_survives_store_outage(make_client) -> None:
    client, _ = make_client(airtable_down)

    response = client.get("/api/pages/home")

    assert response.status_code == 200
    assert response.headers["Cache-Control"] == "no-store"
    data = response.json()
    assert data["events"] == []
    assert data["notice"] == "Events are temporarily unavailable."
    assert data["settings"]["brand"] == "Nomadisch Labs"
    assert data["ticketsCta"] == {
        "href": "https://www.instagram.com/nomadischlabs/",
        "label": "FOLLOW / DM (IG)",
    }


def test_home_page_without_credentials_falls_back(admin_config, cloudinary_config) -> None:
    recorder = Recorder(airtable_down)
    app = build_app(recorder, AirtableConfig(token=None, base_id=None), admin_config, cloudinary_config)

    response = TestClient(app).get("/api/pages/home")

    assert response.status_code == 200
    assert response.json()["notice"] == "Events are temporarily unavailable."
    assert recorder.requests == []


def test_events_page_groups_by_status(make_client) -> None:
    client, _ = make_client(airtable_ok([upcoming_cdmx(), past_gdl(), past_gdl("recD", slug="qro", status="cancelled")]))

    data = client.get("/api/pages/events").json()

    assert [e["slug"] for e in data["upcoming"]] == ["cdmx-warehouse"]
    assert [e["slug"] for e in data["past"]] == ["gdl-rooftop"]
    assert [e["slug"] for e in data["cancelled"]] == ["qro"]


def test_event_detail_resolves_ticket_link(make_client) -> None:
    settings = [make_record("recG", ticketsCtaUrl="https://global.example.com")]
    client, _ = make_client(airtable_ok([upcoming_cdmx(), past_gdl()], settings))

    own = client.get("/api/pages/events/cdmx-warehouse").json()
    fallback = client.get("/api/pages/events/gdl-rooftop").json()

    assert own["ticketUrl"] == "https://tickets.example.com/cdmx"
    assert fallback["ticketUrl"] == "https://global.example.com"


def test_event_detail_unknown_slug_is_404(make_client) -> None:
    client, _ = make_client(airtable_ok([upcoming_cdmx()]))

    response = client.get("/api/pages/events/nope")

    assert response.status_code == 404
    assert response.json()["detail"] == {"slug": "nope"}


def test_event_detail_store_outage_is_not_404(make_client) -> None:
    client, _ = make_client(airtable_down)

    response = client.get("/api/pages/events/cdmx-warehouse")

    assert response.status_code == 200
    assert response.json()["event"] is None
    assert response.json()["notice"] == "Events are temporarily unavailable."


def test_about_page(make_client) -> None:
    client, _ = make_client(airtable_ok([], settings=[make_record("recG", brand="NMDSCH")]))

    response = client.get("/api/pages/about")

    assert response.status_code == 200
    assert response.json()["settings"]["brand"] == "NMDSCH"
