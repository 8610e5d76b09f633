"""
ALU Astronomy Club API - Main Application Entry Point

This module initializes and configures the FastAPI application including:
- Database and object store connections
- Submission rate limiter and its pruning job
- CORS, security header and body size middleware
- API routing and global error handlers
- Health check endpoints
"""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from astro_api.api import api_router
from astro_api.core.config import Settings, settings
from astro_api.core.database import close_db, init_db
from astro_api.core.middleware import register_middleware
from astro_api.core.rate_limit import SlidingWindowRateLimiter
from astro_api.core.scheduler import create_scheduler, register_rate_limit_pruning, stop_scheduler
from astro_api.core.schemas import HealthResponse
from astro_api.core.storage import init_object_store
from astro_api.error_handlers import register_error_handlers

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def build_lifespan(config: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.

        Creates the per-process components at startup and tears them down
        at shutdown:
        - Rate limiter (plus its pruning job)
        - Object store
        - Database connection
        """
        configure_logging(config.log_level)
        print(f"Starting ALU Astronomy API in {config.python_env} mode...")

        app.state.rate_limiter = SlidingWindowRateLimiter(
            limit=config.apply_rate_limit,
            window_seconds=config.apply_rate_window_seconds,
        )

        # Initialize Object Store
        app.state.object_store = None
        try:
            app.state.object_store = await init_object_store(config)
            print("[OK] Object store connected")
        except Exception as e:
            print(f"[FAIL] Object store connection failed: {e}")
            if config.is_production:
                raise

        # Initialize Database
        try:
            await init_db()
            print("[OK] Database connected")
        except Exception as e:
            print(f"[FAIL] Database connection failed: {e}")
            if config.is_production:
                raise

        # Initialize Background Job Scheduler
        scheduler = create_scheduler()
        try:
            register_rate_limit_pruning(scheduler, app.state.rate_limiter)
            scheduler.start()
            app.state.scheduler = scheduler
            print("[OK] Background scheduler started")
        except Exception as e:
            print(f"[FAIL] Background scheduler failed to start: {e}")
            if config.is_production:
                raise

        yield  # Application runs here

        print("Shutting down ALU Astronomy API...")

        await stop_scheduler(getattr(app.state, "scheduler", None))
        print("[OK] Background scheduler stopped")

        await app.state.rate_limiter.reset()
        await close_db()
        print("[OK] Cleanup complete")

    return lifespan


def create_app(config: Settings = settings) -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(
        title="ALU Astronomy Club API",
        description="Membership applications and club listings",
        version="0.1.0",
        docs_url="/docs" if config.is_development else None,
        redoc_url="/redoc" if config.is_development else None,
        lifespan=build_lifespan(config),
    )
    app.state.settings = config

    app.include_router(api_router, prefix="/api")

    register_error_handlers(app)
    register_middleware(app, config)

    # CORS configuration (added last so it wraps everything else)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", tags=["Root"])
    async def root() -> dict[str, str]:
        """Root endpoint - API welcome message."""
        return {
            "message": "Welcome to the ALU Astronomy Club API",
            "status": "running",
            "environment": config.python_env,
        }

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint for container orchestration."""
        return HealthResponse(status="ok", timestamp=datetime.now(UTC))

    return app


app = create_app()
