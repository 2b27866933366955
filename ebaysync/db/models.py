"""
Pydantic models for database entities.
Mapping rules, per-product overrides and platform tokens.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class MappingCategory(str, Enum):
    """Section of the eBay listing a rule belongs to."""
    SALES = "sales"
    LISTING = "listing"
    PAYMENT = "payment"
    SHIPPING = "shipping"


class MappingType(str, Enum):
    """How a rule derives its value."""
    CONSTANT = "constant"
    SHOPIFY_FIELD = "shopify_field"
    FORMULA = "formula"
    EDIT_IN_GRID = "edit_in_grid"


CATEGORIES = [c.value for c in MappingCategory]


def utcnow() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


class AttributeMapping(BaseModel):
    """
    A stored mapping rule.

    category and mapping_type are kept as plain strings so that rows written
    by older versions still load; the resolver treats unknown types as
    edit_in_grid.
    """
    id: Optional[int] = None
    category: str
    field_name: str
    mapping_type: str
    source_value: Optional[str] = None
    target_value: Optional[str] = None
    variation_mapping: Optional[str] = None
    is_enabled: bool = True
    display_order: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class AttributeMappingCreate(BaseModel):
    """Input for creating or importing a mapping rule."""
    category: MappingCategory
    field_name: str = Field(min_length=1)
    mapping_type: MappingType
    source_value: Optional[str] = None
    target_value: Optional[str] = None
    variation_mapping: Optional[str] = None
    is_enabled: bool = True
    display_order: int = 0


class MappingUpdate(BaseModel):
    """
    Partial update for a mapping rule.

    Only fields explicitly set are applied, so an explicit None clears a
    value while an omitted field is left untouched.
    """
    mapping_type: Optional[MappingType] = None
    source_value: Optional[str] = None
    target_value: Optional[str] = None
    variation_mapping: Optional[str] = None
    is_enabled: Optional[bool] = None


class MappingBulkUpdate(MappingUpdate):
    """One row of a bulk update request."""
    category: str
    field_name: str


class BulkUpdateResult(BaseModel):
    updated: int = 0
    failed: int = 0
    errors: List[str] = Field(default_factory=list)


class ImportResult(BaseModel):
    imported: int = 0
    updated: int = 0
    errors: List[str] = Field(default_factory=list)


class ProductMappingOverride(BaseModel):
    """Manual per-product value for an edit_in_grid rule."""
    id: Optional[int] = None
    shopify_product_id: str
    category: str
    field_name: str
    value: Optional[str] = None
    updated_at: datetime = Field(default_factory=utcnow)


class OverrideInput(BaseModel):
    """Input for saving one override."""
    category: MappingCategory
    field_name: str = Field(min_length=1)
    value: Optional[str] = None


class BulkOverrideResult(BaseModel):
    saved: int = 0
    errors: List[str] = Field(default_factory=list)


def normalize_product_id(product_id) -> str:
    """
    Normalize a Shopify product id to its numeric string form.

    Accepts ints, numeric strings and GraphQL GIDs
    ("gid://shopify/Product/123" -> "123").
    """
    value = str(product_id).strip()
    if value.startswith("gid://"):
        value = value.rsplit("/", 1)[-1]
    return value
