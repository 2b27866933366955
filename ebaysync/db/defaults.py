"""
Default mapping rules seeded into an empty database.
"""

from typing import List

from .models import AttributeMappingCreate, MappingCategory, MappingType


def _rule(category, field_name, mapping_type, order, source=None, target=None):
    return AttributeMappingCreate(
        category=category,
        field_name=field_name,
        mapping_type=mapping_type,
        source_value=source,
        target_value=target,
        display_order=order,
    )


DEFAULT_MAPPINGS: List[AttributeMappingCreate] = [
    # Sales
    _rule(MappingCategory.SALES, "sku", MappingType.SHOPIFY_FIELD, 1, source="variants[0].sku"),
    _rule(MappingCategory.SALES, "price", MappingType.SHOPIFY_FIELD, 2, source="variants[0].price"),
    _rule(MappingCategory.SALES, "quantity", MappingType.SHOPIFY_FIELD, 3,
          source="variants[0].inventory_quantity"),
    _rule(MappingCategory.SALES, "best_offer", MappingType.CONSTANT, 4, target="false"),

    # Listing
    _rule(MappingCategory.LISTING, "title", MappingType.SHOPIFY_FIELD, 1, source="title"),
    _rule(MappingCategory.LISTING, "description", MappingType.SHOPIFY_FIELD, 2, source="body_html"),
    _rule(MappingCategory.LISTING, "condition", MappingType.EDIT_IN_GRID, 3),
    _rule(MappingCategory.LISTING, "upc", MappingType.SHOPIFY_FIELD, 4, source="variants[0].barcode"),
    _rule(MappingCategory.LISTING, "brand", MappingType.SHOPIFY_FIELD, 5, source="vendor"),
    _rule(MappingCategory.LISTING, "mpn", MappingType.EDIT_IN_GRID, 6),

    # Payment
    _rule(MappingCategory.PAYMENT, "payment_policy", MappingType.CONSTANT, 1, target="Default Payment"),
    _rule(MappingCategory.PAYMENT, "immediate_payment", MappingType.CONSTANT, 2, target="true"),

    # Shipping
    _rule(MappingCategory.SHIPPING, "handling_time", MappingType.CONSTANT, 1, target="1"),
    _rule(MappingCategory.SHIPPING, "shipping_policy", MappingType.CONSTANT, 2, target="Default Shipping"),
    _rule(MappingCategory.SHIPPING, "return_policy", MappingType.CONSTANT, 3, target="30 Day Returns"),
]
