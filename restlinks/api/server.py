"""FastAPI application factory for a restlinks registry.

Usage:
    from restlinks import Registry, create_app

    registry = Registry()
    registry.register(Book, read=get_book, list=list_books)
    app = create_app(registry)

Then serve it with uvicorn:
    uvicorn mymodule:app --host 0.0.0.0 --port 8080

Routes:
- GET /        discovery document {"links": {"<name> index": ..., "root": ..., "self": ...}}
- GET /health  liveness probe
- /<name>, /<name>/{id} for every registered resource (see ``dispatcher``)

Building the app freezes the registry: resources are fixed for the lifetime
of the process and handlers read it without synchronisation.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.routing import APIRoute

from restlinks.api.dispatcher import ResourceHandlers
from restlinks.config import Settings, settings as default_settings
from restlinks.errors import ResourceError
from restlinks.links import LinkManager
from restlinks.registry import Registry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error rendering: the single place where errors become responses
# ---------------------------------------------------------------------------


async def resource_error_handler(request: Request, exc: ResourceError) -> PlainTextResponse:
    """Render a ``ResourceError`` as a plain-text line with its status code."""
    if exc.status_code >= 500:
        logger.warning(
            "%s %s failed (%s): %s", request.method, request.url.path, exc.kind.value, exc
        )
    else:
        logger.info("%s %s rejected (%d): %s", request.method, request.url.path, exc.status_code, exc)
    return PlainTextResponse(f"{exc}\n", status_code=exc.status_code)


# ---------------------------------------------------------------------------
# Router / app construction
# ---------------------------------------------------------------------------


def build_router(registry: Registry, scheme: str = "http") -> APIRouter:
    """Return an APIRouter serving the root document and every resource."""
    router = APIRouter()

    @router.get("/", name="root", tags=["root"])
    async def root(request: Request) -> JSONResponse:
        """Discovery document linking to every resource index."""
        host = request.headers.get("host") or request.url.netloc
        return JSONResponse({"links": LinkManager(registry, host, scheme).root_links()})

    for resource in registry:
        ResourceHandlers(registry, resource, scheme).add_routes(router)
    return router


def custom_generate_unique_id(route: APIRoute) -> str:
    """Generate deterministic, SDK-friendly operation IDs for REST routes."""
    if route.tags:
        return f"{route.tags[0]}-{route.name}"
    return route.name


def create_app(registry: Registry, settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI app for ``registry`` and freeze the registry."""
    settings = settings or default_settings
    registry.freeze()

    app = FastAPI(
        title=settings.title,
        generate_unique_id_function=custom_generate_unique_id,
    )
    app.add_exception_handler(ResourceError, resource_error_handler)

    @app.get("/health", tags=["health"])
    async def health() -> JSONResponse:
        """Simple health check endpoint for load balancers and readiness probes."""
        return JSONResponse({"status": "ok", "resources": len(registry)})

    # Mounted AFTER /health so a resource named "health" cannot shadow it.
    app.include_router(build_router(registry, settings.url_scheme))

    logger.info("restlinks app ready with %d resource(s)", len(registry))
    return app
