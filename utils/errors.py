"""Application error taxonomy and the FastAPI handlers that render it.

Every error carries an HTTP status code and a human readable message. Some
errors attach extra diagnostic fields which are merged into the JSON body.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

LOGGER = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code = 500

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra: Dict[str, Any] = extra

    def to_payload(self) -> Dict[str, Any]:
        return {"message": self.message, **self.extra}


class ValidationError(AppError):
    """A required field or upload is missing or invalid."""

    status_code = 400


class NotFoundError(AppError):
    """No record or upstream document matches the identifier."""

    status_code = 404


class StoreError(AppError):
    """A database operation failed or the database link is down."""

    status_code = 500


class AssetStoreError(AppError):
    """The image store could not complete an upload or delete."""

    status_code = 500


class DisallowedOrigin(AppError):
    """The request's Origin header is not on the CORS allow-list."""

    status_code = 403


class UpstreamError(AppError):
    """The WordPress REST API call failed or returned an error status.

    Args:
        message: Summary shown to the client.
        status: Upstream HTTP status, if a response was received.
        status_text: Upstream reason phrase, if a response was received.
        body: Decoded upstream response body (JSON or text), if any.
        request_url: The upstream URL that was requested.
        base_url: The configured WordPress base URL.
        cause: Short description of the underlying failure.
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        status_text: Optional[str] = None,
        body: Any = None,
        request_url: Optional[str] = None,
        base_url: Optional[str] = None,
        cause: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.status_text = status_text
        self.body = body
        self.request_url = request_url
        self.base_url = base_url
        self.cause = cause or message

    def to_payload(self) -> Dict[str, Any]:
        details = None
        if self.status is not None:
            details = {
                "status": self.status,
                "statusText": self.status_text,
                "data": self.body,
            }
        return {
            "message": self.message,
            "error": self.cause,
            "wpUrl": self.base_url,
            "requestUrl": self.request_url,
            "details": details,
        }


def error_response(exc: AppError) -> JSONResponse:
    """Render an AppError as a JSON response."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def _handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        LOGGER.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc)


def register_error_handlers(app: FastAPI) -> None:
    """Attach the AppError handler to `app`."""
    app.add_exception_handler(AppError, _handle_app_error)
