"""
Sync orchestration across orders, prices, inventory and fulfillments.
"""

from .orchestrator import (
    SyncOrchestrator,
    SyncOptions,
    SyncStep,
    SyncStepResult,
    StepReport,
    SyncRunReport,
    PlatformTokens,
    TokenProvider,
    build_sync_steps,
    run_full_sync,
)
from .steps import load_sync_steps, STEP_FUNCTION_NAMES

__all__ = [
    "SyncOrchestrator",
    "SyncOptions",
    "SyncStep",
    "SyncStepResult",
    "StepReport",
    "SyncRunReport",
    "PlatformTokens",
    "TokenProvider",
    "build_sync_steps",
    "run_full_sync",
    "load_sync_steps",
    "STEP_FUNCTION_NAMES",
]
