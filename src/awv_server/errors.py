"""Exception handlers: translate SDK errors into HTTP responses.

The visit engine signals every failure with ``ValueError`` (or ``KeyError``
for an unknown template) and a descriptive message.  The status code is
picked from the message, and clients only ever see a generic detail; the
full message, which names users and visits, goes to the server log.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

# (message fragment, status, client detail); checked in order.
_VALUE_ERROR_RULES: tuple[tuple[str, int, str], ...] = (
    ("already exists", 409, "Resource already exists"),
    ("not found", 404, "Resource not found"),
    ("invalid status", 400, "Invalid visit status"),
    ("unknown question", 400, "Unknown question id"),
    ("cannot", 400, "Operation not allowed for this visit"),
)
_FALLBACK = (400, "Invalid request")


def classify_value_error(exc: ValueError) -> tuple[int, str]:
    """Return ``(status_code, client_detail)`` for an SDK ``ValueError``."""
    message = str(exc).lower()
    for fragment, status, detail in _VALUE_ERROR_RULES:
        if fragment in message:
            return status, detail
    return _FALLBACK


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    status, detail = classify_value_error(exc)
    logger.warning("%s %s -> %d: %s", request.method, request.url.path, status, exc)
    return JSONResponse(status_code=status, content={"detail": detail})


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    logger.warning("%s %s -> 404: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=404, content={"detail": "Resource not found"})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def install_error_handlers(app: FastAPI) -> None:
    """Register the handlers above on ``app``."""
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(KeyError, key_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
