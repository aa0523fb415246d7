from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import time
from typing import Callable
import logging

logger = logging.getLogger(__name__)

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that logs every request with its status and duration.

    Health checks are logged at debug level so liveness polling does not flood the log.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        message = f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f} ms)"
        if "/health" in request.url.path:
            logger.debug(message)
        else:
            logger.info(message)

        response.headers["X-Process-Time"] = f"{duration_ms:.1f}"
        return response

def add_middleware(app: FastAPI) -> None:
    """Add all middleware to the FastAPI application."""
    app.add_middleware(RequestLoggingMiddleware)
