"""Cross-origin request handling.

Preflight (OPTIONS) requests are answered uniformly. Every other request is
checked against the configured origin allow-list; requests without an
`Origin` header (same-origin, curl, server-to-server) are always allowed.
"""

from __future__ import annotations

import logging
from typing import Iterable

from fastapi import FastAPI, Request
from fastapi.responses import Response

from utils.errors import DisallowedOrigin, error_response

LOGGER = logging.getLogger(__name__)

ALLOWED_METHODS = "GET, POST, PUT, DELETE, PATCH"
ALLOWED_HEADERS = "Content-Type, Authorization, Accept, Origin, X-Requested-With"
PREFLIGHT_MAX_AGE = "86400"


def preflight_response() -> Response:
    return Response(
        status_code=200,
        headers={
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": ALLOWED_METHODS,
            "Access-Control-Allow-Headers": ALLOWED_HEADERS,
            "Access-Control-Max-Age": PREFLIGHT_MAX_AGE,
        },
    )


def install_cors(app: FastAPI, allowed_origins: Iterable[str]) -> None:
    """Register the CORS middleware on `app`."""
    allowed = frozenset(allowed_origins)

    @app.middleware("http")
    async def cors_middleware(request: Request, call_next):
        if request.method == "OPTIONS":
            LOGGER.debug("Answering preflight request for %s", request.url.path)
            return preflight_response()

        origin = request.headers.get("origin")
        if origin and origin not in allowed:
            LOGGER.warning("Rejected request from disallowed origin: %s", origin)
            return error_response(DisallowedOrigin("Origin not allowed", error=f"Origin {origin} is not allowed"))

        response = await call_next(request)
        if origin:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Vary"] = "Origin"
        return response
