"""
Error handler middleware for centralized exception handling.

Turns application errors into JSON responses with a stable status code per
error kind. Anything unexpected is logged and answered with a 500.
"""
import logging
from typing import Callable

from aiohttp import web

from core.exceptions import (
    AlreadyRedeemedError,
    DuplicateKeyError,
    LedgerError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Checked in order, first match wins
STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (DuplicateKeyError, 409),
    (AlreadyRedeemedError, 409),
    (StorageUnavailableError, 503),
)


def status_for(error: LedgerError) -> int:
    """HTTP status for an application error."""
    for error_class, status in STATUS_BY_ERROR:
        if isinstance(error, error_class):
            return status
    return 500


def error_response(error: LedgerError) -> web.Response:
    body = {"error": error.message, "kind": error.kind}
    if isinstance(error, (ValidationError, DuplicateKeyError)):
        body["field"] = error.field
    return web.json_response(body, status=status_for(error))


@web.middleware
async def error_middleware(request: web.Request, handler: Callable):
    """Catch and convert all exceptions raised by API handlers."""
    try:
        return await handler(request)
    except web.HTTPException:
        # Routing errors (404/405) and explicit HTTP responses
        raise
    except LedgerError as e:
        status = status_for(e)
        log = logger.error if status >= 500 else logger.warning
        log(
            f"{request.method} {request.path} failed: {e.message}",
            extra={"method": request.method, "path": request.path, "status": status}
        )
        return error_response(e)
    except Exception as e:
        logger.error(
            f"Unhandled error on {request.method} {request.path}: {e}",
            exc_info=True,
            extra={"method": request.method, "path": request.path, "status": 500}
        )
        return web.json_response(
            {"error": "Internal server error", "kind": "internal_error"},
            status=500,
        )
