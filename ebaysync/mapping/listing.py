"""
Helper functions for eBay listing creation.

Each helper resolves one eBay field from the configured mapping and falls
back to a documented default. For edit_in_grid rules the product's manual
override is used. None of these raise.
"""

import logging
import math
from typing import Any, Dict, Mapping, Optional, Protocol, Union

from ..db.models import MappingType, normalize_product_id
from .resolver import MappingStore, OverrideStore, get_mapping, resolve_mapping

logger = logging.getLogger(__name__)


# eBay condition IDs by condition name (lowercase)
EBAY_CONDITION_CODES: Dict[str, str] = {
    "new": "1000",
    "like new": "1500",  # New other
    "used": "3000",
    "good": "3000",
    "for parts": "7000",  # For parts or not working
}
DEFAULT_CONDITION_CODE = "3000"  # Used

DEFAULT_TITLE = "Untitled Product"
DEFAULT_DESCRIPTION = "No description available"
DEFAULT_HANDLING_TIME = 1  # business days


class ListingStore(MappingStore, OverrideStore, Protocol):
    """Store providing both mappings and per-product overrides."""
    pass


async def _get_override_value(
    store: OverrideStore,
    product: Mapping[str, Any],
    category: str,
    field_name: str
) -> Optional[str]:
    product_id = product.get("id") if isinstance(product, Mapping) else None
    if product_id is None:
        return None

    try:
        override = await store.get_product_override(
            normalize_product_id(product_id), category, field_name
        )
    except Exception as e:
        logger.warning(f"Override lookup failed for {category}.{field_name} on product {product_id}: {e}")
        return None

    if override is None or not override.value:
        return None
    return override.value


async def resolve_field(
    store: ListingStore,
    product: Mapping[str, Any],
    category: str,
    field_name: str
) -> Optional[Any]:
    """Resolve one field, consulting overrides for edit_in_grid rules."""
    mapping = await get_mapping(store, category, field_name)

    if mapping is not None and mapping.mapping_type == MappingType.EDIT_IN_GRID:
        return await _get_override_value(store, product, category, field_name)

    return resolve_mapping(mapping, product)


async def get_ebay_condition(store: ListingStore, product: Mapping[str, Any]) -> str:
    """Get the eBay condition ID for a product."""
    value = await resolve_field(store, product, "listing", "condition")
    if value:
        return EBAY_CONDITION_CODES.get(str(value).strip().lower(), DEFAULT_CONDITION_CODE)
    return DEFAULT_CONDITION_CODE


async def get_ebay_upc(store: ListingStore, product: Mapping[str, Any]) -> Optional[str]:
    """Get the UPC/EAN for a product. No fallback."""
    value = await resolve_field(store, product, "listing", "upc")
    return str(value) if value is not None else None


async def get_ebay_title(store: ListingStore, product: Mapping[str, Any]) -> str:
    value = await resolve_field(store, product, "listing", "title")
    return str(value or product.get("title") or DEFAULT_TITLE)


async def get_ebay_description(store: ListingStore, product: Mapping[str, Any]) -> str:
    value = await resolve_field(store, product, "listing", "description")
    return str(
        value
        or product.get("body_html")
        or product.get("title")
        or DEFAULT_DESCRIPTION
    )


def _parse_number(value: Any) -> Optional[Union[int, float]]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


async def get_ebay_handling_time(store: ListingStore, product: Mapping[str, Any]) -> Union[int, float]:
    """Get handling time in business days, defaulting to 1."""
    value = await resolve_field(store, product, "shipping", "handling_time")
    number = _parse_number(value)
    return number if number is not None else DEFAULT_HANDLING_TIME


async def build_listing_fields(store: ListingStore, product: Mapping[str, Any]) -> Dict[str, Any]:
    """Resolve every listing field the eBay listing builder needs."""
    return {
        "condition_id": await get_ebay_condition(store, product),
        "upc": await get_ebay_upc(store, product),
        "title": await get_ebay_title(store, product),
        "description": await get_ebay_description(store, product),
        "handling_time": await get_ebay_handling_time(store, product),
    }
