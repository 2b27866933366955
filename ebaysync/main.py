"""
Shopify to eBay Sync - Main Application
"""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import settings
from .dependencies import init_dependencies, close_dependencies, get_orchestrator
from .errors import (
    ConfigurationError, NotConnectedError, NotFoundError, PersistenceError, UpstreamError
)
from .routes import (
    mappings_router, overrides_router, listing_router, pipeline_router, sync_router
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logger.info("Starting Shopify to eBay Sync...")
    await init_dependencies()

    try:
        orchestrator = get_orchestrator()
    except ConfigurationError:
        orchestrator = None

    watch_task = None
    if orchestrator is not None and settings.sync_interval_minutes > 0:
        watch_task = asyncio.create_task(orchestrator.watch(settings.sync_interval_minutes))

    logger.info("Application ready")
    yield
    logger.info("Shutting down...")

    if watch_task is not None:
        watch_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watch_task
    if orchestrator is not None:
        await orchestrator.stop()

    await close_dependencies()


# Create app
app = FastAPI(
    title="Shopify to eBay Sync",
    description="Keep eBay listings in step with a Shopify catalog",
    version="0.1.0",
    lifespan=lifespan
)

# Include routers
app.include_router(mappings_router)
app.include_router(overrides_router)
app.include_router(listing_router)
app.include_router(pipeline_router)
app.include_router(sync_router)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"error": str(exc)})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(NotConnectedError)
async def not_connected_handler(request: Request, exc: NotConnectedError):
    return JSONResponse(status_code=409, content={"error": str(exc)})


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    return JSONResponse(status_code=502, content={"error": str(exc)})


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error(f"Persistence error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Database error", "detail": str(exc)})


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "ebaysync.main:app",
        host=settings.host,
        port=settings.port,
        reload=True
    )
