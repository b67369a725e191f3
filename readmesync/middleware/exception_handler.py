"""Global exception handlers for the FastAPI application.

Every failure becomes a definite status code with a JSON body holding
only the reason phrase and the request ID.  Messages and stack traces
go to the server log, never to the caller.
"""

import logging
import uuid
from http import HTTPStatus

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from readmesync.errors import SyncError, format_error_response

logger = logging.getLogger(__name__)


def _get_request_id(request: Request) -> str:
    """Extract the request ID injected by :class:`RequestIDMiddleware`.

    Falls back to a fresh UUID-4 when the middleware has not run (e.g. a
    bare ``FastAPI()`` app in unit tests).
    """
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


def _reason(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def _error_response(request: Request, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=format_error_response(
            error=_reason(status_code),
            request_id=_get_request_id(request),
        ),
    )


# ------------------------------------------------------------------
# Individual exception handlers
# ------------------------------------------------------------------

async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for any unhandled exception — returns 500."""
    logger.error(
        "Unhandled exception on %s %s [request_id=%s]",
        request.method,
        request.url.path,
        _get_request_id(request),
        exc_info=exc,
    )
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle framework ``HTTPException`` (404, 405, ...) — keeps the status."""
    logger.warning(
        "HTTP %s on %s %s [request_id=%s]: %s",
        exc.status_code,
        request.method,
        request.url.path,
        _get_request_id(request),
        exc.detail,
    )
    response = _error_response(request, exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Request validation errors are client errors — 400."""
    logger.warning(
        "Validation error on %s %s [request_id=%s]: %s",
        request.method,
        request.url.path,
        _get_request_id(request),
        exc.errors(),
    )
    return _error_response(request, status.HTTP_400_BAD_REQUEST)


async def sync_error_handler(request: Request, exc: SyncError) -> JSONResponse:
    """Handle domain :class:`SyncError` subclasses — maps to HTTP status."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "%s on %s %s [request_id=%s]: %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        _get_request_id(request),
        exc,
    )
    return _error_response(request, exc.status_code)


# ------------------------------------------------------------------
# Registration helper
# ------------------------------------------------------------------

def setup_exception_handlers(app: FastAPI) -> None:
    """Register all global exception handlers on *app*."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SyncError, sync_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)  # type: ignore[arg-type]
