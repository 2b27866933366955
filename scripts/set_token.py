#!/usr/bin/env python3
"""
Store a platform access token for the sync to use.

Usage:
    python scripts/set_token.py shopify shpat_xxx
    python scripts/set_token.py ebay v^1.1#i^1#...
"""

import argparse
import asyncio
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ebaysync.config import settings
from ebaysync.db import SQLiteDatabase
from ebaysync.sync.orchestrator import SOURCE_PLATFORM, TARGET_PLATFORM


async def main():
    parser = argparse.ArgumentParser(description="Store a platform access token")
    parser.add_argument("platform", choices=[SOURCE_PLATFORM, TARGET_PLATFORM])
    parser.add_argument("token")
    args = parser.parse_args()

    db = SQLiteDatabase(settings.database_path)
    await db.initialize()
    try:
        await db.save_token(args.platform, args.token.strip())
        print(f"Saved {args.platform} token")
    finally:
        await db.close()


if __name__ == "__main__":
    asyncio.run(main())
