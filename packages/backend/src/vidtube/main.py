"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (tables, engine disposal).
Middleware, CORS, error handlers, routers and the media mount are all
registered here.
"""

from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from vidtube import __version__
from vidtube.api import api_router
from vidtube.config import settings
from vidtube.db.engine import engine, init_db
from vidtube.errors import register_error_handlers
from vidtube.middleware.request_id import RequestIdMiddleware
from vidtube.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs
    at shutdown.
    """
    logger.info(
        "vidtube.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    Path(settings.temp_dir).mkdir(parents=True, exist_ok=True)
    if settings.serve_media:
        Path(settings.media_root).mkdir(parents=True, exist_ok=True)
    if settings.create_tables_on_startup:
        await init_db()
        logger.info("vidtube.tables_ready")

    yield

    logger.info("vidtube.shutdown")
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="VidTube",
        description="Video sharing platform backend — videos, channels, comments, playlists",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → Security → RequestId → handler
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    register_error_handlers(app)
    app.include_router(api_router)

    if settings.serve_media:
        # LocalMediaHost writes under media_root and hands out URLs below media_base_url
        app.mount(
            settings.media_base_url,
            StaticFiles(directory=settings.media_root, check_dir=False),
            name="media",
        )

    return app


# Default app instance (used by uvicorn: vidtube.main:app)
app = create_app()
