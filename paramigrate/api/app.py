"""FastAPI application factory for paramigrate.

Creates and configures the FastAPI app with CORS and the migration
routes registered.
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..core.config import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, scanner=None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings instance (default: loaded from config)
        scanner: ProjectScanner shared by every request's engine
            (default: FileSystemScanner)

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    if scanner is None:
        from ..core.scanner import FileSystemScanner
        scanner = FileSystemScanner(settings.target)

    app = FastAPI(
        title="paramigrate API",
        description="Atomic wallet-provider migration to the Para SDK",
        version=__version__,
    )

    origins = os.getenv("PARAMIGRATE_CORS_ORIGINS", "http://localhost:3000,http://localhost:5173")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Store shared dependencies on app state
    app.state.settings = settings
    app.state.scanner = scanner

    from .routes.migration import router as migration_router

    app.include_router(migration_router, prefix="/api")

    @app.get("/api/health")
    async def health_check():
        return {"status": "ok", "service": "paramigrate", "version": __version__}

    logger.info("FastAPI app created with all routes registered")
    return app
