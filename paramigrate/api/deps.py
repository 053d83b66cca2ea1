"""FastAPI dependencies for paramigrate.

Shared objects live on ``app.state``; engines are built per request so
no migration state crosses requests.
"""

import logging

from fastapi import Request

from ..core.migration import AtomicValidator, MigrationEngine

logger = logging.getLogger(__name__)


async def get_settings(request: Request):
    """Get Settings from app state."""
    return request.app.state.settings


async def get_scanner(request: Request):
    """Get the shared ProjectScanner from app state."""
    return request.app.state.scanner


async def get_migration_engine(request: Request) -> MigrationEngine:
    """Build a fresh MigrationEngine for this request."""
    return MigrationEngine(
        scanner=request.app.state.scanner,
        settings=request.app.state.settings,
    )


async def get_validator(request: Request) -> AtomicValidator:
    return AtomicValidator(request.app.state.settings.target)
