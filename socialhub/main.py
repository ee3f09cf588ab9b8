"""SocialHub Realtime API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map SocialHubError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and ConnectionRegistry created on startup, torn down on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Registry lives on app.state: handlers get it injected, nothing imports it
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from socialhub.api.error_handlers import register_error_handlers
from socialhub.infrastructure import database
from socialhub.infrastructure.connection_registry import ConnectionRegistry
from socialhub.infrastructure.observability import setup_logging
from socialhub.config import get_settings
from socialhub.api.routes import health, messages, notifications, realtime, social

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    app.state.connection_registry = ConnectionRegistry()
    logger.info("SocialHub realtime API started")
    yield
    logger.info("SocialHub realtime API shutting down")
    await app.state.connection_registry.close_all()
    if database.db_manager:
        await database.db_manager.dispose()


app = FastAPI(
    title="SocialHub Realtime API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(messages.router)
app.include_router(notifications.router)
app.include_router(social.router)
app.include_router(realtime.router)

register_error_handlers(app)
