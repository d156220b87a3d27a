"""Application wiring: route discovery and the assembled app."""

from pathlib import Path

import pytest
from fastapi import APIRouter
from fastapi.testclient import TestClient

from nomadisch.core.route_discovery import RouterDiscoveryError, discover_routers

ROUTES_DIR = Path(__file__).parent.parent / "nomadisch" / "routes"


def test_discovers_every_route_module() -> None:
    routers = discover_routers(ROUTES_DIR)

    prefixes = sorted(router.prefix for router, _ in routers)
    assert prefixes == ["/api", "/api/admin", "/api/pages"]
    # Each module sets its own prefix and tags
    assert all(kwargs == {} for _, kwargs in routers)


def test_router_without_prefix_gets_default(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    package = tmp_path / "sitepkg" / "routes"
    package.mkdir(parents=True)
    (package / "status.py").write_text("from fastapi import APIRouter\nrouter = APIRouter()\n")
    (package / "_private.py").write_text("raise RuntimeError('never imported')\n")
    monkeypatch.syspath_prepend(str(tmp_path))

    routers = discover_routers(package)

    assert len(routers) == 1
    router, kwargs = routers[0]
    assert isinstance(router, APIRouter)
    assert kwargs == {"prefix": "/api/status", "tags": ["status"]}


def test_module_without_router_fails_fast(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    package = tmp_path / "brokenpkg" / "routes"
    package.mkdir(parents=True)
    (package / "orphan.py").write_text("handlers = []\n")
    monkeypatch.syspath_prepend(str(tmp_path))

    with pytest.raises(RouterDiscoveryError, match="must export 'router'"):
        discover_routers(package)


def test_assembled_app_serves_health_and_mounts_routes() -> None:
    from nomadisch.main import app

    client = TestClient(app)
    response = client.get("/api/health", headers={"X-Request-ID": "abc123"})

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
    assert response.headers["X-Request-ID"] == "abc123"

    paths = {route.path for route in app.routes}
    assert {"/api/pages/home", "/api/pages/events/{slug}", "/api/admin/events", "/api/admin/uploads"} <= paths
