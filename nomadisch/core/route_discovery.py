"""FastAPI route auto-discovery.

Conventions:
- Put route modules under `nomadisch/routes/`.
- Each module exports a `router: APIRouter` with its own `prefix` and `tags`.
- Files starting with `_` are ignored.
- A router without a prefix is mounted at `/api/<file stem>`.
"""

import importlib
from pathlib import Path
from typing import Any

import structlog
from fastapi import APIRouter, FastAPI

logger = structlog.get_logger(__name__)


class RouterDiscoveryError(Exception):
    """Raised when router discovery fails."""


def _iter_route_files(routes_dir: Path) -> list[Path]:
    return sorted(
        (
            py_file
            for py_file in routes_dir.rglob("*.py")
            if py_file.is_file() and not py_file.name.startswith("_")
        ),
        key=lambda path: path.as_posix(),
    )


def _module_path(routes_dir: Path, py_file: Path) -> str:
    """`nomadisch/routes/admin.py` -> `nomadisch.routes.admin`."""
    rel_module = ".".join(py_file.relative_to(routes_dir).with_suffix("").parts)
    return f"{routes_dir.parent.name}.{routes_dir.name}.{rel_module}"


def discover_routers(routes_dir: Path) -> list[tuple[APIRouter, dict[str, Any]]]:
    """Import every route module and return `(router, include_kwargs)` pairs."""
    routers: list[tuple[APIRouter, dict[str, Any]]] = []

    for py_file in _iter_route_files(routes_dir):
        module_path = _module_path(routes_dir, py_file)

        try:
            module = importlib.import_module(module_path)
        except Exception as e:
            msg = (
                f"Failed to import route module '{module_path}'.\n"
                f"  File: {py_file}\n"
                f"  Hint: Ensure the package is importable and dependencies are installed"
            )
            raise RouterDiscoveryError(msg) from e

        router = getattr(module, "router", None)
        if not isinstance(router, APIRouter):
            msg = (
                f"Router file '{py_file.name}' must export 'router' as an APIRouter.\n"
                f"  File: {py_file}\n"
                f"  Module: {module_path}\n"
                f"  Type: {type(router).__name__}"
            )
            raise RouterDiscoveryError(msg)

        # Passing prefix/tags for a router that already defines them applies them twice
        include_kwargs: dict[str, Any] = {}
        if not router.prefix:
            include_kwargs["prefix"] = f"/api/{py_file.relative_to(routes_dir).with_suffix('').as_posix()}"
        if not router.tags:
            include_kwargs["tags"] = [py_file.stem]

        routers.append((router, include_kwargs))

    return routers


def register_routers(app: FastAPI, routes_dir: Path | None = None) -> None:
    """Discover and register routers with a FastAPI app.

    Fails fast on startup if a route module can't be imported or doesn't export a
    valid `router`.
    """
    if routes_dir is None:
        routes_dir = Path(__file__).parent.parent / "routes"

    if not routes_dir.exists():
        msg = f"Routes directory not found: {routes_dir}"
        raise FileNotFoundError(msg)

    routers = discover_routers(routes_dir)
    if not routers:
        logger.warning("no_routers_discovered", routes_dir=str(routes_dir))
        return

    for router, config in routers:
        app.include_router(router, **config)
        logger.info(
            "router_registered",
            prefix=config.get("prefix") or router.prefix,
            tags=config.get("tags") or list(router.tags or []),
        )
