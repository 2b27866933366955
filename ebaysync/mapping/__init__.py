"""
Attribute mapping engine.
"""

from .paths import read_path
from .resolver import resolve_mapping, get_mapping, MappingStore, OverrideStore
from .listing import (
    get_ebay_condition,
    get_ebay_upc,
    get_ebay_title,
    get_ebay_description,
    get_ebay_handling_time,
    build_listing_fields,
    resolve_field,
    EBAY_CONDITION_CODES,
    DEFAULT_CONDITION_CODE,
)

__all__ = [
    "read_path",
    "resolve_mapping",
    "get_mapping",
    "MappingStore",
    "OverrideStore",
    "get_ebay_condition",
    "get_ebay_upc",
    "get_ebay_title",
    "get_ebay_description",
    "get_ebay_handling_time",
    "build_listing_fields",
    "resolve_field",
    "EBAY_CONDITION_CODES",
    "DEFAULT_CONDITION_CODE",
]
