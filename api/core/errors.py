"""
Error taxonomy for resource requests.

Services raise these; `resource_error_handler` is the only place that turns
one into an HTTP response, so every failed request gets exactly one reply.
"""

from __future__ import annotations

import logging

from fastapi import Request, Response
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ResourceError(RuntimeError):
    status_code = 500


# Unreadable body, malformed JSON, wrong JSON types.
class TransportError(ResourceError):
    status_code = 400


class BatchValidationError(ResourceError):
    status_code = 422

    def __init__(self, message: str, *, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index


class DataAccessError(ResourceError):
    def __init__(self, message: str, *, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index


class SerializationError(ResourceError):
    pass


class QueryConfigurationError(RuntimeError):
    """
    A query template or resource definition the engine cannot work with.

    This is a programming error, never a client error.
    """


async def resource_error_handler(request: Request, exc: ResourceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "resource_request_failed method=%s path=%s status=%s error=%s",
            request.method,
            request.url.path,
            exc.status_code,
            exc,
            exc_info=exc.__cause__,
        )
    else:
        logger.warning(
            "resource_request_rejected method=%s path=%s status=%s error=%s",
            request.method,
            request.url.path,
            exc.status_code,
            exc,
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """
    Routing errors. A method a resource does not serve gets a bare 405;
    everything else keeps FastAPI's default reply.
    """
    if exc.status_code == 405:
        logger.info("method_not_allowed method=%s path=%s", request.method, request.url.path)
        return Response(status_code=405, headers=exc.headers)
    return await http_exception_handler(request, exc)
