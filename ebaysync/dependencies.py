"""
FastAPI dependency injection.
Simple setup - database and sync orchestrator.
"""

import logging
from typing import Optional

from .config import settings
from .db import SQLiteDatabase
from .errors import ConfigurationError
from .sync import SyncOrchestrator, load_sync_steps

logger = logging.getLogger(__name__)


# Global instances (initialized on startup)
_db: Optional[SQLiteDatabase] = None
_orchestrator: Optional[SyncOrchestrator] = None


async def init_dependencies():
    """Initialize global dependencies. Called on app startup."""
    global _db, _orchestrator

    _db = SQLiteDatabase(settings.database_path)
    await _db.initialize()
    await _db.seed_default_mappings()

    try:
        _orchestrator = SyncOrchestrator(load_sync_steps(settings.sync_steps_module), _db)
    except ConfigurationError as e:
        logger.warning(f"Sync disabled: {e}")
        _orchestrator = None


async def close_dependencies():
    """Close global dependencies. Called on app shutdown."""
    global _db, _orchestrator
    if _db:
        await _db.close()
    _db = None
    _orchestrator = None


def get_db() -> SQLiteDatabase:
    """Get the database instance."""
    if _db is None:
        raise RuntimeError("Database not initialized")
    return _db


def get_orchestrator() -> SyncOrchestrator:
    """
    Get the sync orchestrator.

    Raises:
        ConfigurationError: If no sync steps module is configured
    """
    if _orchestrator is None:
        raise ConfigurationError("Sync is not configured (set SYNC_STEPS_MODULE)")
    return _orchestrator
