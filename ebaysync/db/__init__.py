"""
Database package - SQLite only.
"""

from .models import (
    AttributeMapping, AttributeMappingCreate, MappingUpdate, MappingBulkUpdate,
    MappingCategory, MappingType, ProductMappingOverride, OverrideInput,
    BulkUpdateResult, ImportResult, BulkOverrideResult, CATEGORIES,
    normalize_product_id
)
from .sqlite import SQLiteDatabase

__all__ = [
    "SQLiteDatabase",
    "AttributeMapping",
    "AttributeMappingCreate",
    "MappingUpdate",
    "MappingBulkUpdate",
    "MappingCategory",
    "MappingType",
    "ProductMappingOverride",
    "OverrideInput",
    "BulkUpdateResult",
    "ImportResult",
    "BulkOverrideResult",
    "CATEGORIES",
    "normalize_product_id",
]
