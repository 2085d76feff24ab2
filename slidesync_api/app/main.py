"""
Main entrypoint for the SlideSync API.

This module assembles the FastAPI application, sets up logging,
includes versioned routers and mounts the media directory.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``.  Importing the app here
makes it easy to run with uvicorn or another ASGI server, e.g.::

    uvicorn slidesync_api.app.main:app --reload

The application title and version are provided via ``Settings`` from
``core.config``.
"""

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import init_db
from .core.logging_config import setup_logging
from .services.storage_service import media_root


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    This function performs one‑time setup tasks such as configuring
    logging, including versioned API routers and mounting ``/media``.
    It returns a fully configured FastAPI instance ready to be served.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Initialise logging before anything else so that imports below can
    # safely log messages.
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    # Mount versioned routes under /api/v1.
    app.include_router(v1_router, prefix="/api/v1")

    # Uploaded images, audio and exported videos.  The directory is
    # resolved now, so settings must be final before create_app runs.
    media_dir = media_root()
    media_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/media", StaticFiles(directory=str(media_dir)), name="media")

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok", "version": settings.api_version}

    # Register startup event to initialise the database and apply migrations.
    @app.on_event("startup")
    async def startup_event() -> None:
        # This creates the database file if it does not exist and
        # ensures all tables are up to date.
        init_db()

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
