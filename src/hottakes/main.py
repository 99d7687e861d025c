# src/hottakes/main.py
"""Main entry point for the Hot Takes application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from hottakes.api.v1 import feed_router, posts_router, profile_router, votes_router
from hottakes.core.errors import (
    AuthenticationError,
    AuthorizationError,
    DataServiceError,
    ThrottledError,
    ValidationError,
)
from hottakes.core.settings import Settings
from hottakes.core.settings import settings as default_settings
from hottakes.db.data_service import SqlDataService
from hottakes.db.session import create_tables
from hottakes.services.container import Services, build_services

logger = logging.getLogger(__name__)


def _error(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail})


def register_exception_handlers(app: FastAPI) -> None:
    """Translate domain errors into HTTP responses."""

    @app.exception_handler(ValidationError)
    async def handle_validation(_: Request, exc: ValidationError) -> JSONResponse:
        return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc))

    @app.exception_handler(AuthenticationError)
    async def handle_authentication(_: Request, exc: AuthenticationError) -> JSONResponse:
        return _error(status.HTTP_401_UNAUTHORIZED, str(exc))

    @app.exception_handler(AuthorizationError)
    async def handle_authorization(_: Request, exc: AuthorizationError) -> JSONResponse:
        return _error(status.HTTP_403_FORBIDDEN, str(exc))

    @app.exception_handler(ThrottledError)
    async def handle_throttled(_: Request, exc: ThrottledError) -> JSONResponse:
        return _error(status.HTTP_429_TOO_MANY_REQUESTS, str(exc))

    @app.exception_handler(DataServiceError)
    async def handle_data_service(request: Request, exc: DataServiceError) -> JSONResponse:
        if exc.is_not_found:
            return _error(status.HTTP_404_NOT_FOUND, "Not found")
        logger.error("Data service failure on %s %s: %r", request.method, request.url.path, exc)
        return _error(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "Something went wrong, please try again",
        )


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    """Build the FastAPI application around a service container."""
    settings = settings or default_settings
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    services = services or build_services(settings)

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Short opinion posts with likes, dislikes and a news-filled feed",
        version=settings.app_version,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.include_router(feed_router, prefix="/api/v1")
    app.include_router(posts_router, prefix="/api/v1")
    app.include_router(votes_router, prefix="/api/v1")
    app.include_router(profile_router, prefix="/api/v1")
    register_exception_handlers(app)

    # Uploaded profile pictures are served from the local blob store.
    app.mount(
        settings.media_url_prefix,
        StaticFiles(directory=settings.media_root, check_dir=False),
        name="media",
    )

    @app.on_event("startup")
    async def on_startup() -> None:
        if settings.auto_create_tables and isinstance(services.data, SqlDataService):
            await create_tables(services.data.engine)
        logger.info("%s %s started", settings.app_name, settings.app_version)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await services.close()

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint to verify the service is running."""
        return {"status": "ok"}

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint with basic information about the API."""
        return {
            "name": f"{settings.app_name} API",
            "version": settings.app_version,
            "docs": "/docs",
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("hottakes.main:app", host="0.0.0.0", port=8000, reload=default_settings.debug)
