"""aiohttp middlewares: access logging, CORS and the last-resort error handler."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from aiohttp import web

from catalogbench._internal.logging import get_logger

if TYPE_CHECKING:
    from aiohttp.typedefs import Handler

logger = get_logger("service.http")

GENERIC_ERROR_BODY = {"error": "Something went wrong!"}

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,HEAD,PUT,PATCH,POST,DELETE",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
}


@web.middleware
async def access_log_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Log method, path, status and latency of every request."""
    start = time.monotonic()
    status = 500
    try:
        response = await handler(request)
        status = response.status
        return response
    except web.HTTPException as exc:
        status = exc.status
        raise
    finally:
        latency_ms = (time.monotonic() - start) * 1000
        logger.info(
            "%s %s %d %.1fms",
            request.method,
            request.path,
            status,
            latency_ms,
            extra={
                "method": request.method,
                "path": request.path,
                "status": status,
                "latency_ms": round(latency_ms, 1),
            },
        )


@web.middleware
async def cors_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Allow cross-origin calls from any origin and answer preflights."""
    if request.method == "OPTIONS":
        return web.Response(status=204, headers=_CORS_HEADERS)
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        exc.headers["Access-Control-Allow-Origin"] = "*"
        raise
    response.headers["Access-Control-Allow-Origin"] = "*"
    return response


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Turn any uncaught exception into a generic 500 JSON response.

    aiohttp's own HTTP exceptions (unknown route, wrong method) pass
    through unchanged.
    """
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return web.json_response(GENERIC_ERROR_BODY, status=500)
