"""
FastAPI application factory.

``create_app()`` assembles the application with logging, CORS, the admin
key middleware, error handlers, routers, and the health endpoint. The
module-level ``app`` instance allows ``uvicorn src.api.app:app --reload``.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.middleware.admin_auth import AdminKeyMiddleware
from src.api.middleware.error_handler import register_error_handlers
from src.api.routes import auth, corpus, export, recordings, reviews, sentences, stats, users
from src.core.config import get_settings
from src.core.models import HealthResponse
from src.services.storage.database import close_db, init_db

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create tables on startup and dispose the DB engine on shutdown."""
    await init_db()
    logger.info("Database ready")
    yield
    await close_db()


def create_app() -> FastAPI:
    """Build and return a fully configured FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="VoiceCollect",
        description="Voice data collection for the Dholuo Common Voice corpus: "
        "record, review and export spoken sentences.",
        version="0.1.0",
        lifespan=lifespan,
    )

    # -- CORS --
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -- Admin API key --
    app.add_middleware(AdminKeyMiddleware)

    # -- Error handlers --
    register_error_handlers(app)

    # -- Health check (root-level, not under /api/v1) --
    @app.get("/health", response_model=HealthResponse, tags=["system"])
    async def health() -> HealthResponse:
        return HealthResponse(timestamp=datetime.now(UTC))

    # -- REST routes --
    for module in (auth, users, recordings, reviews, sentences, stats, export, corpus):
        app.include_router(module.router, prefix="/api/v1")

    return app


app = create_app()
