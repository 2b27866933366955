#!/usr/bin/env python3
"""
Run a full Shopify <-> eBay sync from the command line.

One-shot (e.g. from cron):
    python scripts/run_sync.py --since 2024-06-01 --dry-run

Watch mode (runs until killed):
    python scripts/run_sync.py --watch --interval 5
"""

import argparse
import asyncio
import logging
import sys
import os
from datetime import datetime

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ebaysync.config import settings
from ebaysync.db import SQLiteDatabase
from ebaysync.errors import ConfigurationError, NotConnectedError
from ebaysync.sync import SyncOptions, SyncOrchestrator, load_sync_steps

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run full sync: orders, prices, inventory, fulfillments"
    )
    parser.add_argument("--since", type=datetime.fromisoformat,
                        help="Only sync orders/changes after this date (ISO format)")
    parser.add_argument("--dry-run", action="store_true",
                        help="Preview changes without applying")
    parser.add_argument("--watch", action="store_true",
                        help="Repeat the sync every --interval minutes until stopped")
    parser.add_argument("--interval", type=float, default=settings.sync_interval_minutes,
                        help="Watch mode interval in minutes")
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        steps = load_sync_steps(settings.sync_steps_module)
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    db = SQLiteDatabase(settings.database_path)
    await db.initialize()

    try:
        orchestrator = SyncOrchestrator(steps, db)
        options = SyncOptions(since=args.since, dry_run=args.dry_run)

        if args.watch:
            if args.interval <= 0:
                logger.error("--interval must be positive in watch mode")
                return 1
            await orchestrator.watch(args.interval, options)
            return 0

        try:
            report = await orchestrator.run_once(options)
        except NotConnectedError as e:
            logger.error(f"{e}. Store a token first: python scripts/set_token.py {e.platform.lower()} <token>")
            return 1

        if report is None:
            return 1

        totals = report.totals
        logger.info(
            f"Totals: {totals.updated_or_imported} updated/imported, "
            f"{totals.skipped} skipped, {totals.failed} failed"
        )
        if not report.success:
            logger.error(f"Failed steps: {', '.join(report.failed_steps)}")
            return 1
        return 0

    finally:
        await db.close()


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Stopped")
