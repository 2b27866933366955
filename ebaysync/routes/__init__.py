"""
Routes package.
"""

from .mappings import router as mappings_router
from .overrides import router as overrides_router
from .listing import router as listing_router
from .pipeline import router as pipeline_router
from .sync import router as sync_router

__all__ = [
    "mappings_router",
    "overrides_router",
    "listing_router",
    "pipeline_router",
    "sync_router",
]
