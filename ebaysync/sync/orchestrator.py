"""
Full sync orchestrator.

Runs the four sync steps (orders, prices, inventory, fulfillments) strictly
in that order. A failing step is reported and the next step still runs.
"""

import asyncio
import logging
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Protocol, Sequence, Set

from ..errors import NotConnectedError

logger = logging.getLogger(__name__)


SOURCE_PLATFORM = "shopify"
TARGET_PLATFORM = "ebay"


class TokenProvider(Protocol):
    async def get_valid_token(self, platform: str) -> Optional[str]: ...


@dataclass
class SyncOptions:
    """Options passed through to every sync step."""
    since: Optional[datetime] = None
    dry_run: bool = False


@dataclass
class SyncStepResult:
    """Counts returned by one sync step."""
    updated_or_imported: int = 0
    skipped: int = 0
    failed: int = 0

    @classmethod
    def coerce(cls, value: Any) -> "SyncStepResult":
        """Accept a SyncStepResult or a dict with snake_case or camelCase keys."""
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls(
                updated_or_imported=int(value.get("updated_or_imported", value.get("updatedOrImported", 0))),
                skipped=int(value.get("skipped", 0)),
                failed=int(value.get("failed", 0)),
            )
        raise TypeError(f"Unexpected sync step result: {value!r}")


StepFunction = Callable[[str, str, SyncOptions], Awaitable[Any]]


@dataclass(frozen=True)
class SyncStep:
    """One sync facet: name, display label and the platform function."""
    name: str
    label: str
    func: StepFunction


@dataclass
class PlatformTokens:
    target: Optional[str]  # eBay
    source: Optional[str]  # Shopify


@dataclass
class StepReport:
    """Outcome of one step within a run."""
    name: str
    label: str
    result: Optional[SyncStepResult] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    def summary(self) -> str:
        if self.result is None:
            return f"{self.label}: error - {self.error}"
        return (
            f"{self.label}: {self.result.updated_or_imported} updated/imported, "
            f"{self.result.skipped} skipped, {self.result.failed} failed"
        )


@dataclass
class SyncRunReport:
    """Outcome of one full run."""
    dry_run: bool
    since: Optional[datetime]
    started_at: datetime
    finished_at: Optional[datetime] = None
    steps: List[StepReport] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(step.success for step in self.steps)

    @property
    def failed_steps(self) -> List[str]:
        return [step.name for step in self.steps if not step.success]

    @property
    def totals(self) -> SyncStepResult:
        """Counts summed over the steps that completed."""
        totals = SyncStepResult()
        for step in self.steps:
            if step.result is None:
                continue
            totals.updated_or_imported += step.result.updated_or_imported
            totals.skipped += step.result.skipped
            totals.failed += step.result.failed
        return totals


def build_sync_steps(
    order_sync: StepFunction,
    price_sync: StepFunction,
    inventory_sync: StepFunction,
    fulfillment_sync: StepFunction,
) -> List[SyncStep]:
    """Assemble the four steps in their fixed execution order."""
    return [
        SyncStep("orders", "Orders", order_sync),
        SyncStep("prices", "Prices", price_sync),
        SyncStep("inventory", "Inventory", inventory_sync),
        SyncStep("fulfillments", "Fulfillments", fulfillment_sync),
    ]


async def run_full_sync(
    tokens: PlatformTokens,
    steps: Sequence[SyncStep],
    options: Optional[SyncOptions] = None
) -> SyncRunReport:
    """
    Run every step once, in order.

    Args:
        tokens: eBay (target) and Shopify (source) access tokens
        steps: Steps from build_sync_steps
        options: since / dry_run, passed to every step

    Returns:
        SyncRunReport with one StepReport per step

    Raises:
        NotConnectedError: If either token is missing; no step is run
    """
    options = options or SyncOptions()

    if not tokens.source:
        raise NotConnectedError("Shopify")
    if not tokens.target:
        raise NotConnectedError("eBay")

    report = SyncRunReport(
        dry_run=options.dry_run,
        since=options.since,
        started_at=datetime.now(timezone.utc)
    )

    logger.info("=== Full Sync ===" + (" (dry run)" if options.dry_run else ""))
    if options.since:
        logger.info(f"Incremental sync - changes since {options.since.isoformat()}")

    total = len(steps)
    for index, step in enumerate(steps, start=1):
        logger.info(f"Step {index}/{total}: {step.label}...")
        step_report = StepReport(name=step.name, label=step.label)

        try:
            raw = await step.func(tokens.target, tokens.source, options)
            step_report.result = SyncStepResult.coerce(raw)
            logger.info(step_report.summary())
        except Exception as e:
            step_report.error = str(e) or type(e).__name__
            logger.error(f"{step.label} sync error: {step_report.error}")
            logger.debug(traceback.format_exc())

        report.steps.append(step_report)

    report.finished_at = datetime.now(timezone.utc)
    logger.info("Sync complete.")
    return report


class SyncOrchestrator:
    """
    Sequencer over the sync steps with a single-flight guard.

    A run requested while another is in progress is skipped rather than
    started alongside it. This covers manual triggers as well as watch mode
    ticks that arrive before the previous run has finished.
    """

    def __init__(self, steps: Sequence[SyncStep], token_provider: TokenProvider):
        self.steps = list(steps)
        self.token_provider = token_provider
        self.last_report: Optional[SyncRunReport] = None
        self._lock = asyncio.Lock()
        self._pending: Optional[asyncio.Task] = None
        self._background: Set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self._pending is not None or self._lock.locked()

    async def get_tokens(self) -> PlatformTokens:
        return PlatformTokens(
            target=await self.token_provider.get_valid_token(TARGET_PLATFORM),
            source=await self.token_provider.get_valid_token(SOURCE_PLATFORM),
        )

    async def run_once(self, options: Optional[SyncOptions] = None) -> Optional[SyncRunReport]:
        """
        Run a full sync unless one is already in progress.

        Returns:
            The run report, or None if skipped

        Raises:
            NotConnectedError: If a platform token is missing
        """
        if self.is_running:
            logger.warning("Sync already in progress, skipping this run")
            return None

        async with self._lock:
            return await self._run_locked(options)

    async def _run_locked(self, options: Optional[SyncOptions]) -> SyncRunReport:
        tokens = await self.get_tokens()
        report = await run_full_sync(tokens, self.steps, options)
        self.last_report = report
        return report

    async def run_safely(self, options: Optional[SyncOptions] = None) -> Optional[SyncRunReport]:
        """Like run_once, but errors are logged instead of raised."""
        try:
            return await self.run_once(options)
        except Exception as e:
            logger.error(f"Sync run failed: {e}")
            logger.debug(traceback.format_exc())
            return None

    def start(self, options: Optional[SyncOptions] = None) -> Optional[asyncio.Task]:
        """
        Schedule a run in the background.

        The guard is claimed before this returns, so a second call made
        before the task gets to run sees is_running and is refused.

        Returns:
            The background task, or None if a run is already in progress
        """
        if self.is_running:
            return None

        task = asyncio.create_task(self._run_reserved(options))
        self._pending = task
        self._background.add(task)
        task.add_done_callback(self._release)
        return task

    async def _run_reserved(self, options: Optional[SyncOptions]) -> Optional[SyncRunReport]:
        try:
            async with self._lock:
                self._pending = None
                return await self._run_locked(options)
        except Exception as e:
            logger.error(f"Sync run failed: {e}")
            logger.debug(traceback.format_exc())
            return None

    def _release(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if self._pending is task:
            self._pending = None

    async def stop(self) -> None:
        """Cancel background runs and wait for them to finish."""
        tasks = list(self._background)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def watch(
        self,
        interval_minutes: float,
        options: Optional[SyncOptions] = None,
        max_ticks: Optional[int] = None
    ) -> None:
        """
        Run a full sync, then repeat it every interval_minutes.

        Runs until cancelled (or until max_ticks repeats have fired). Each
        tick goes through the single-flight guard, so a run still in
        progress causes the tick to be skipped. Errors in a run are logged
        and do not stop the loop.
        """
        if interval_minutes <= 0:
            raise ValueError("interval_minutes must be positive")

        interval = interval_minutes * 60
        loop = asyncio.get_running_loop()
        in_flight: Set[asyncio.Task] = set()

        await self.run_safely(options)
        logger.info(f"Watching: next sync in {interval_minutes:g} minutes")

        next_at = loop.time() + interval
        ticks = 0

        try:
            while max_ticks is None or ticks < max_ticks:
                await asyncio.sleep(max(0.0, next_at - loop.time()))
                next_at += interval
                ticks += 1

                task = asyncio.create_task(self.run_safely(options))
                in_flight.add(task)
                task.add_done_callback(in_flight.discard)
        except asyncio.CancelledError:
            pending = list(in_flight)
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            raise

        if in_flight:
            await asyncio.gather(*in_flight, return_exceptions=True)
