"""
Sync trigger API routes.
"""

from dataclasses import asdict
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..dependencies import get_orchestrator
from ..errors import NotConnectedError
from ..sync import SyncOptions

router = APIRouter(prefix="/api/sync")


class SyncResponse(BaseModel):
    message: str
    dry_run: bool
    success: bool


@router.post("/trigger", response_model=SyncResponse)
async def trigger_sync(dry_run: bool = False, since: Optional[datetime] = None):
    """Start a full sync in the background."""
    orchestrator = get_orchestrator()

    if orchestrator.is_running:
        raise HTTPException(status_code=409, detail="Sync already in progress")

    tokens = await orchestrator.get_tokens()
    if not tokens.source:
        raise NotConnectedError("Shopify")
    if not tokens.target:
        raise NotConnectedError("eBay")

    if orchestrator.start(SyncOptions(since=since, dry_run=dry_run)) is None:
        raise HTTPException(status_code=409, detail="Sync already in progress")

    return SyncResponse(message="Sync triggered", dry_run=dry_run, success=True)


@router.get("/status")
async def get_sync_status():
    """Whether a run is in progress, and how the last one went."""
    orchestrator = get_orchestrator()
    report = orchestrator.last_report

    last_run = None
    if report is not None:
        last_run = asdict(report)
        last_run["success"] = report.success
        last_run["failed_steps"] = report.failed_steps
        last_run["totals"] = asdict(report.totals)

    return {"running": orchestrator.is_running, "last_run": last_run}
