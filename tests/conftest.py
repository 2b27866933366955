"""
Shared fixtures.
"""

import pytest
import pytest_asyncio

from ebaysync.db import SQLiteDatabase
from ebaysync.pipeline import tracker


@pytest_asyncio.fixture
async def db(tmp_path):
    """A fresh SQLite database per test."""
    database = SQLiteDatabase(str(tmp_path / "test.db"))
    await database.initialize()
    yield database
    await database.close()


@pytest.fixture(autouse=True)
def clear_pipeline_jobs():
    """The global job tracker is process-wide; start every test empty."""
    tracker.clear()
    yield
    tracker.clear()
