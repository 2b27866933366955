"""
Per-product override API routes (edit_in_grid values).
"""

from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from ..db import BulkOverrideResult, MappingCategory, OverrideInput, normalize_product_id
from ..dependencies import get_db
from ..errors import NotFoundError

router = APIRouter(prefix="/api/product-overrides")


class OverrideValue(BaseModel):
    value: Optional[str] = None


@router.get("/{product_id}")
async def get_overrides(product_id: str):
    db = get_db()
    overrides = await db.get_product_overrides(product_id)
    return {"product_id": normalize_product_id(product_id), "overrides": overrides}


@router.put("/{product_id}", response_model=BulkOverrideResult)
async def save_overrides(product_id: str, overrides: List[OverrideInput]):
    """Save several overrides for one product."""
    db = get_db()
    return await db.save_product_overrides_bulk(product_id, overrides)


@router.put("/{product_id}/{category}/{field_name}")
async def save_override(product_id: str, category: MappingCategory, field_name: str, body: OverrideValue):
    db = get_db()
    await db.save_product_override(product_id, category.value, field_name, body.value)
    return {"ok": True}


@router.delete("/{product_id}/{category}/{field_name}")
async def delete_override(product_id: str, category: MappingCategory, field_name: str):
    db = get_db()
    deleted = await db.delete_product_override(product_id, category.value, field_name)
    if not deleted:
        raise NotFoundError(f"Override not found: {category.value}.{field_name} for product {product_id}")
    return {"ok": True}
