"""
Attribute mapping API routes.
"""

from typing import Any, Dict, List

from fastapi import APIRouter

from ..db import (
    AttributeMapping, BulkUpdateResult, ImportResult, MappingBulkUpdate,
    MappingCategory, MappingUpdate
)
from ..dependencies import get_db

router = APIRouter(prefix="/api/mappings")


@router.get("", response_model=Dict[str, List[AttributeMapping]])
async def list_mappings():
    """All mappings grouped by category."""
    db = get_db()
    return await db.get_all_mappings()


@router.get("/export", response_model=List[AttributeMapping])
async def export_mappings():
    """All mappings as a flat list, for backup or transfer."""
    db = get_db()
    return await db.export_mappings()


@router.post("/import", response_model=ImportResult)
async def import_mappings(mappings: List[Dict[str, Any]]):
    """Import mappings; invalid rows are reported, not fatal."""
    db = get_db()
    return await db.import_mappings(mappings)


@router.put("", response_model=BulkUpdateResult)
async def update_mappings_bulk(updates: List[MappingBulkUpdate]):
    db = get_db()
    return await db.update_mappings_bulk(updates)


@router.get("/{category}", response_model=List[AttributeMapping])
async def list_category_mappings(category: MappingCategory):
    db = get_db()
    return await db.get_mappings_by_category(category.value)


@router.put("/{category}/{field_name}", response_model=AttributeMapping)
async def update_mapping(category: MappingCategory, field_name: str, update: MappingUpdate):
    """Update one mapping. Only the fields sent are changed."""
    db = get_db()
    return await db.update_mapping(category.value, field_name, update)
