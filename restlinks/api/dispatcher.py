"""Per-resource HTTP handlers.

``ResourceHandlers`` binds one ``ResourceDescriptor`` to the five REST
operations and adds them to a FastAPI ``APIRouter``:

    GET    /<name>        list    200 JSON array
    POST   /<name>        create  201 JSON object
    GET    /<name>/{id}   read    200 JSON object
    PUT    /<name>/{id}   update  200 JSON object
    DELETE /<name>/{id}   delete  200 empty body

Handlers hold no per-request state; each request builds its own
``LinkManager`` from the Host header.  Every failure is raised as a
``ResourceError`` and rendered by the exception handler installed in
``restlinks.api.server``.  Exceptions escaping an accessor are wrapped here so
that the status they carry (``ApiError``, ``HTTPException`` or any exception
with an integer ``status_code``) reaches the client unchanged.

Sync accessors run in Starlette's threadpool so a slow store never blocks the
event loop; ``async def`` accessors are awaited directly.  No lock is held
around read-then-update: atomic updates are the accessors' business.
"""

from __future__ import annotations

import inspect
import json
import logging
import re
from typing import Any, Callable

from fastapi import APIRouter, Request, Response
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException

from restlinks.errors import (
    AccessorError,
    InvalidBodyError,
    InvalidIdError,
    NotAllowedError,
    ResourceError,
)
from restlinks.links import LinkManager
from restlinks.payload import marshal_many, marshal_one
from restlinks.registry import Registry
from restlinks.resource import ResourceDescriptor

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"

# ASCII digits with an optional sign; no whitespace or underscores
_ID_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_id(raw: str) -> int:
    """Parse a path id as a base-10 integer or raise ``InvalidIdError``."""
    if not _ID_PATTERN.fullmatch(raw):
        raise InvalidIdError(f"Invalid id {raw!r}: expected an integer.")
    return int(raw, 10)


async def call_accessor(
    resource: ResourceDescriptor, operation: str, fn: Callable, *args: Any
) -> Any:
    """Invoke an accessor and normalise whatever it raises."""
    try:
        if inspect.iscoroutinefunction(fn):
            return await fn(*args)
        result = await run_in_threadpool(fn, *args)
        if inspect.isawaitable(result):
            result = await result
        return result
    except ResourceError:
        raise
    except HTTPException as exc:
        raise AccessorError(str(exc.detail), exc.status_code) from exc
    except Exception as exc:
        status = getattr(exc, "status_code", None)
        if not isinstance(status, int):
            logger.exception("%s accessor for %s failed", operation, resource.name)
            status = None
        raise AccessorError(str(exc) or type(exc).__name__, status) from exc


class ResourceHandlers:
    """The five REST handlers of one resource."""

    def __init__(
        self, registry: Registry, resource: ResourceDescriptor, scheme: str = "http"
    ) -> None:
        self.registry = registry
        self.resource = resource
        self.scheme = scheme

    def link_manager(self, request: Request) -> LinkManager:
        host = request.headers.get("host") or request.url.netloc
        return LinkManager(self.registry, host, self.scheme)

    def _json(self, body: bytes, status_code: int = 200) -> Response:
        return Response(content=body, status_code=status_code, media_type=JSON_MEDIA_TYPE)

    # -- handlers -------------------------------------------------------------

    async def list_records(self, request: Request) -> Response:
        if self.resource.list is None:
            raise NotAllowedError(f"Listing {self.resource.name} is not allowed.")
        lister = self.resource.list
        if inspect.iscoroutinefunction(lister):
            records = list(await call_accessor(self.resource, "list", lister))
        else:
            records = await call_accessor(self.resource, "list", lambda: list(lister()))
        logger.debug("Listing %d %s records", len(records), self.resource.name)
        return self._json(marshal_many(self.link_manager(request), self.resource, records))

    async def create_record(self, request: Request) -> Response:
        if self.resource.create is None:
            raise NotAllowedError(f"Creation of {self.resource.name} is not allowed.")
        record = await call_accessor(self.resource, "create", self.resource.create)
        return self._json(marshal_one(self.link_manager(request), self.resource, record), 201)

    async def read_record(self, request: Request, id: str) -> Response:  # noqa: A002
        if self.resource.read is None:
            raise NotAllowedError(f"Reading {self.resource.name} is not allowed.")
        record_id = parse_id(id)
        record = await call_accessor(self.resource, "read", self.resource.read, record_id)
        return self._json(marshal_one(self.link_manager(request), self.resource, record))

    async def update_record(self, request: Request, id: str) -> Response:  # noqa: A002
        if self.resource.update is None:
            raise NotAllowedError(f"Updates of {self.resource.name} are not allowed.")
        if self.resource.read is None:
            raise NotAllowedError(f"Reading {self.resource.name} is not allowed.")
        record_id = parse_id(id)
        fields = await self._read_fields(request)

        record = await call_accessor(self.resource, "read", self.resource.read, record_id)
        # Validates every key and value before the first write
        record = self.resource.adapter.apply_update(record, fields)
        await call_accessor(self.resource, "update", self.resource.update, record)

        logger.debug("Updated %s %d fields=%s", self.resource.name, record_id, sorted(fields))
        return self._json(marshal_one(self.link_manager(request), self.resource, record))

    async def delete_record(self, request: Request, id: str) -> Response:  # noqa: A002
        if self.resource.delete is None:
            raise NotAllowedError(f"Deletion of {self.resource.name} is not allowed.")
        record_id = parse_id(id)
        await call_accessor(self.resource, "delete", self.resource.delete, record_id)
        return Response(status_code=200)

    async def _read_fields(self, request: Request) -> dict[str, Any]:
        raw = await request.body()
        try:
            fields = json.loads(raw)
        except ValueError as exc:
            raise InvalidBodyError(f"Could not decode {self.resource.name} update: {exc}") from exc
        if not isinstance(fields, dict):
            raise InvalidBodyError(
                f"Update of {self.resource.name} must be a JSON object of field names to values."
            )
        return fields

    # -- routing --------------------------------------------------------------

    def add_routes(self, router: APIRouter) -> None:
        """Add the five operations under ``/<name>`` to ``router``."""
        index = LinkManager.index_url(self.resource)
        name = self.resource.name
        tags = [name]
        router.add_api_route(
            index, self.list_records, methods=["GET"], name=f"list_{name}", tags=tags
        )
        router.add_api_route(
            index,
            self.create_record,
            methods=["POST"],
            name=f"create_{name}",
            tags=tags,
            status_code=201,
        )
        router.add_api_route(
            index + "/{id}", self.read_record, methods=["GET"], name=f"read_{name}", tags=tags
        )
        router.add_api_route(
            index + "/{id}", self.update_record, methods=["PUT"], name=f"update_{name}", tags=tags
        )
        router.add_api_route(
            index + "/{id}", self.delete_record, methods=["DELETE"], name=f"delete_{name}", tags=tags
        )
