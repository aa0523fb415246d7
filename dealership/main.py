import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from dealership.api.api import api_router
from dealership.api.pipeline import error_response
from dealership.core.config import Settings, get_settings
from dealership.core.middleware import add_middleware
from dealership.db.session import Database
from dealership.services.audit import AuditRecorder
from dealership.services.notifications import Notifier

logger = logging.getLogger(__name__)


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Invalid JSON in request body"
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"Invalid value for {location}: {first.get('msg', 'invalid')}"


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    notifier: Optional[Notifier] = None,
    audit: Optional[AuditRecorder] = None,
) -> FastAPI:
    """
    Build the application and wire its collaborators.

    Args:
        settings: Configuration, defaults to the environment-loaded settings
        database: Database handle; when omitted one is created from settings
            at startup and disposed at shutdown
        notifier: Email/SMS notifier
        audit: Audit recorder, defaults to one writing through ``database``

    Returns:
        FastAPI: The configured application
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.database is None
        if owned:
            app.state.database = Database.from_settings(settings)
        if app.state.audit is None:
            app.state.audit = AuditRecorder(app.state.database.session_factory)
        logger.info(f"Starting {settings.PROJECT_NAME}")
        try:
            yield
        finally:
            if owned:
                app.state.database.dispose()
            logger.info(f"Stopped {settings.PROJECT_NAME}")

    # Create FastAPI app
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Dealership management API: inventory, leads, sales, service and parts",
        version="0.1.0",
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        lifespan=lifespan,
    )

    app.state.database = database
    app.state.notifier = notifier or Notifier()
    app.state.audit = audit or (AuditRecorder(database.session_factory) if database is not None else None)

    # Set CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS] or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    add_middleware(app)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(status.HTTP_400_BAD_REQUEST, _describe_validation_error(exc))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    # Include API router
    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/")
    async def root():
        """Root endpoint with basic service information."""
        return {
            "message": f"Welcome to {settings.PROJECT_NAME}",
            "version": "0.1.0",
            "docs_url": "/docs",
        }

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("dealership.main:app", host="0.0.0.0", port=8000, reload=True)
