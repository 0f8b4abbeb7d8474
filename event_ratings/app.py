"""
FastAPI application entry point for the ratings backend.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from event_ratings.config import Settings, get_settings
from event_ratings.dependencies import init_backends, shutdown_backends
from event_ratings.errors import register_exception_handlers
from event_ratings.routes import router
from event_ratings.spa import register_spa_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_backends(app.state.settings)
    yield
    shutdown_backends()
    logger.info("Backends shut down")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    if not settings:
        settings = get_settings()
    app = FastAPI(title="Event Ratings Backend", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(router, prefix=settings.api_prefix)
    # Registered last so API routes always match first.
    register_spa_routes(app, settings.static_dir, settings.api_prefix)
    return app


app = create_app()
