"""
Mapping resolution: turns a rule plus a Shopify record into a value.
"""

import logging
from typing import Any, List, Optional, Protocol

from ..db.models import AttributeMapping, MappingType, ProductMappingOverride
from .paths import read_path

logger = logging.getLogger(__name__)


class MappingStore(Protocol):
    """What the resolver needs from mapping persistence."""

    async def get_mapping(self, category: str, field_name: str) -> Optional[AttributeMapping]: ...


class OverrideStore(Protocol):
    """What the listing helpers need from override persistence."""

    async def get_product_overrides(self, product_id: str) -> List[ProductMappingOverride]: ...

    async def get_product_override(
        self, product_id: str, category: str, field_name: str
    ) -> Optional[ProductMappingOverride]: ...


def resolve_mapping(mapping: Optional[AttributeMapping], source_record: Any) -> Optional[Any]:
    """
    Resolve a mapping rule against a Shopify product record.

    - constant: the rule's target_value
    - shopify_field: the value at source_value (see read_path)
    - formula: source_value, unevaluated
    - edit_in_grid or unknown: None; the caller consults overrides or defaults

    Never raises.
    """
    if mapping is None:
        return None

    mapping_type = getattr(mapping, "mapping_type", None)

    if mapping_type == MappingType.CONSTANT:
        return mapping.target_value

    if mapping_type == MappingType.SHOPIFY_FIELD:
        if not mapping.source_value:
            return None
        return read_path(source_record, mapping.source_value)

    if mapping_type == MappingType.FORMULA:
        # Formula templates are passed through as-is; there is no evaluator.
        return mapping.source_value

    return None


async def get_mapping(store: MappingStore, category: str, field_name: str) -> Optional[AttributeMapping]:
    """
    Get the enabled mapping for a category and field.

    Lookup failures are logged and treated as "no mapping".
    """
    try:
        return await store.get_mapping(category, field_name)
    except Exception as e:
        logger.warning(f"Mapping lookup failed for {category}.{field_name}: {e}")
        return None
