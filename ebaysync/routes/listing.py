"""
Listing field preview routes.
Show what the mapping engine would send to eBay for a product.
"""

from typing import Any, Dict

from fastapi import APIRouter

from ..config import settings
from ..db import normalize_product_id
from ..dependencies import get_db
from ..errors import NotConnectedError
from ..mapping import build_listing_fields
from ..shopify import ShopifyClient

router = APIRouter(prefix="/api/listing-preview")


@router.post("")
async def preview_record(product: Dict[str, Any]):
    """Resolve listing fields for a product record supplied in the body."""
    db = get_db()
    return {"fields": await build_listing_fields(db, product)}


@router.get("/{product_id}")
async def preview_product(product_id: str):
    """Fetch a product from Shopify and resolve its listing fields."""
    db = get_db()

    token = await db.get_valid_token("shopify")
    if not token:
        raise NotConnectedError("Shopify")

    async with ShopifyClient(settings.shopify_domain, token) as client:
        product = await client.get_product(product_id)

    return {
        "product_id": normalize_product_id(product_id),
        "fields": await build_listing_fields(db, product),
    }
