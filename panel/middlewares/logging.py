"""
Logging middleware for request/response tracking.

Logs all API requests with timing information.
"""
import logging
import time
from typing import Callable

from aiohttp import web

logger = logging.getLogger(__name__)


@web.middleware
async def logging_middleware(request: web.Request, handler: Callable):
    """Log method, path, response status and execution time."""
    start_time = time.monotonic()
    try:
        response = await handler(request)
    except web.HTTPException as e:
        duration = time.monotonic() - start_time
        logger.info(
            f"{request.method} {request.path} -> {e.status} in {duration:.3f}s",
            extra={"method": request.method, "path": request.path, "status": e.status, "duration": duration}
        )
        raise
    except Exception as e:
        duration = time.monotonic() - start_time
        logger.error(
            f"{request.method} {request.path} failed after {duration:.3f}s: {e}",
            extra={"method": request.method, "path": request.path, "duration": duration}
        )
        raise
    
    duration = time.monotonic() - start_time
    logger.info(
        f"{request.method} {request.path} -> {response.status} in {duration:.3f}s",
        extra={
            "method": request.method,
            "path": request.path,
            "status": response.status,
            "duration": duration,
        }
    )
    return response
