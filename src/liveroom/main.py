# File: src/liveroom/main.py
"""FastAPI application factory."""

import os
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from liveroom.core.logging import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)

DEV_SESSION_SECRET = "dev-secret-key-change-in-production"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for startup and shutdown events."""
    start_time = datetime.now()
    logger.info("app.startup", message="LiveRoom starting up", timestamp=start_time.isoformat())

    from liveroom.api.health import set_app_start_time

    set_app_start_time(start_time)

    yield

    from liveroom.core.db import engine

    await engine.dispose()
    logger.info("app.shutdown", message="LiveRoom shutting down gracefully")


def _setup_middleware(app: FastAPI, environment: str, session_secret_key: str) -> None:
    """Configure middleware; last added runs first."""
    from liveroom.middleware.logging import RequestIDMiddleware
    from liveroom.middleware.sentry import SentryContextMiddleware

    app.add_middleware(SentryContextMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret_key,
        max_age=14 * 24 * 60 * 60,
        https_only=environment == "production",
        same_site="lax",
    )
    app.add_middleware(RequestIDMiddleware)


def _register_routers(app: FastAPI) -> None:
    """Register all API routers."""
    from liveroom.api.auth import router as auth_router
    from liveroom.api.health import router as health_router
    from liveroom.api.live_session import router as live_session_router

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(live_session_router)


def create_app() -> FastAPI:
    """Application factory for LiveRoom."""
    from liveroom.core.exception_handlers import register_exception_handlers
    from liveroom.core.sentry import init_sentry

    init_sentry()

    app = FastAPI(
        title="LiveRoom API",
        description="Tutor/learner live session room access and lifecycle",
        version="0.1.0",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    environment = os.getenv("ENVIRONMENT", "development")
    session_secret_key = os.getenv("SESSION_SECRET_KEY", "")
    if not session_secret_key:
        if environment == "production":
            raise RuntimeError("SESSION_SECRET_KEY must be set in production")
        session_secret_key = DEV_SESSION_SECRET

    _setup_middleware(app, environment, session_secret_key)
    _register_routers(app)

    logger.info("app.configured", message="FastAPI application created successfully")

    return app


def run() -> None:
    """Development server entrypoint."""
    uvicorn.run(
        "liveroom.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
