"""
FastAPI routes for the collection resources.

Every descriptor gets one path serving GET/POST/PUT/DELETE through a shared
handler that dispatches on the method. Any other method is rejected during
routing (see `core.errors.http_error_handler`), before a connection is taken
from the pool.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable

import asyncpg
from fastapi import APIRouter, Depends, Request, Response
from starlette.requests import ClientDisconnect

from core import db
from core.errors import TransportError

from . import service
from .descriptors import RESOURCES, ResourceDescriptor

COLLECTION_METHODS = ["GET", "POST", "PUT", "DELETE"]

JSON_MEDIA_TYPE = "application/json"

Handler = Callable[..., Awaitable[Response]]

# Flows that take the request body.
BODY_FLOWS = {
    "POST": service.create_records,
    "PUT": service.update_records,
    "DELETE": service.delete_records,
}


async def _read_body(request: Request) -> bytes:
    try:
        return await request.body()
    except ClientDisconnect as exc:
        raise TransportError("Client disconnected before the body was read.") from exc


def collection_handler(descriptor: ResourceDescriptor) -> Handler:
    async def handle(
        request: Request,
        conn: asyncpg.Connection = Depends(db.get_connection),
    ) -> Response:
        if request.method == "GET":
            raw_ids = request.query_params.getlist(descriptor.key)
            content = await service.list_records(conn, descriptor, raw_ids)
        else:
            flow = BODY_FLOWS[request.method]
            content = await flow(conn, descriptor, await _read_body(request))
        return Response(content=content, media_type=JSON_MEDIA_TYPE)

    handle.__name__ = f"{descriptor.name}_collection"
    return handle


def build_router(resources: Iterable[ResourceDescriptor] = RESOURCES) -> APIRouter:
    router = APIRouter()
    for descriptor in resources:
        router.add_api_route(
            f"/{descriptor.name}",
            collection_handler(descriptor),
            methods=COLLECTION_METHODS,
            name=f"{descriptor.name}_collection",
            response_class=Response,
        )
    return router


router = build_router()
