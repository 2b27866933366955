"""
Tests for eBay listing field helpers.
"""

import pytest

from ebaysync.db import AttributeMapping, ProductMappingOverride
from ebaysync.mapping import (
    build_listing_fields,
    get_ebay_condition,
    get_ebay_description,
    get_ebay_handling_time,
    get_ebay_title,
    get_ebay_upc,
)


class FakeStore:
    """In-memory mapping and override store."""

    def __init__(self, mappings=None, overrides=None, fail=False):
        self.mappings = {(m.category, m.field_name): m for m in (mappings or [])}
        self.overrides = overrides or {}
        self.fail = fail

    async def get_mapping(self, category, field_name):
        if self.fail:
            raise RuntimeError("database is locked")
        mapping = self.mappings.get((category, field_name))
        return mapping if mapping and mapping.is_enabled else None

    async def get_product_override(self, product_id, category, field_name):
        value = self.overrides.get((product_id, category, field_name))
        if value is None:
            return None
        return ProductMappingOverride(
            shopify_product_id=product_id, category=category, field_name=field_name, value=value
        )

    async def get_product_overrides(self, product_id):
        return []


def rule(category, field_name, mapping_type, source_value=None, target_value=None, is_enabled=True):
    return AttributeMapping(
        category=category,
        field_name=field_name,
        mapping_type=mapping_type,
        source_value=source_value,
        target_value=target_value,
        is_enabled=is_enabled,
    )


PRODUCT = {
    "id": 8123,
    "title": "Canon 5D",
    "body_html": "<p>Full frame body</p>",
    "vendor": "Canon",
    "variants": [{"barcode": "013803064490", "sku": "C5D-1"}],
}


class TestGetEbayCondition:
    """Tests for get_ebay_condition."""

    @pytest.mark.asyncio
    async def test_like_new_maps_to_1500(self):
        store = FakeStore([rule("listing", "condition", "constant", target_value="Like New")])
        assert await get_ebay_condition(store, PRODUCT) == "1500"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value,code", [
        ("new", "1000"),
        ("NEW", "1000"),
        ("used", "3000"),
        ("Good", "3000"),
        ("For Parts", "7000"),
        ("Mint", "3000"),
    ])
    async def test_condition_table(self, value, code):
        store = FakeStore([rule("listing", "condition", "constant", target_value=value)])
        assert await get_ebay_condition(store, PRODUCT) == code

    @pytest.mark.asyncio
    async def test_no_mapping_defaults_to_used(self):
        assert await get_ebay_condition(FakeStore(), PRODUCT) == "3000"

    @pytest.mark.asyncio
    async def test_disabled_mapping_is_ignored(self):
        store = FakeStore([rule("listing", "condition", "constant", target_value="New", is_enabled=False)])
        assert await get_ebay_condition(store, PRODUCT) == "3000"

    @pytest.mark.asyncio
    async def test_edit_in_grid_uses_override(self):
        store = FakeStore(
            [rule("listing", "condition", "edit_in_grid")],
            overrides={("8123", "listing", "condition"): "New"},
        )
        assert await get_ebay_condition(store, PRODUCT) == "1000"

    @pytest.mark.asyncio
    async def test_edit_in_grid_override_with_gid_product_id(self):
        store = FakeStore(
            [rule("listing", "condition", "edit_in_grid")],
            overrides={("8123", "listing", "condition"): "For parts"},
        )
        product = dict(PRODUCT, id="gid://shopify/Product/8123")
        assert await get_ebay_condition(store, product) == "7000"

    @pytest.mark.asyncio
    async def test_edit_in_grid_without_override_defaults(self):
        store = FakeStore([rule("listing", "condition", "edit_in_grid")])
        assert await get_ebay_condition(store, PRODUCT) == "3000"

    @pytest.mark.asyncio
    async def test_store_failure_degrades_to_default(self):
        assert await get_ebay_condition(FakeStore(fail=True), PRODUCT) == "3000"


class TestGetEbayUPC:

    @pytest.mark.asyncio
    async def test_reads_first_variant_barcode(self):
        store = FakeStore([rule("listing", "upc", "shopify_field", source_value="variants[0].barcode")])
        assert await get_ebay_upc(store, PRODUCT) == "013803064490"

    @pytest.mark.asyncio
    async def test_no_fallback(self):
        assert await get_ebay_upc(FakeStore(), PRODUCT) is None

    @pytest.mark.asyncio
    async def test_no_variants(self):
        store = FakeStore([rule("listing", "upc", "shopify_field", source_value="variants[0].barcode")])
        assert await get_ebay_upc(store, dict(PRODUCT, variants=[])) is None


class TestGetEbayTitle:

    @pytest.mark.asyncio
    async def test_no_mapping_uses_product_title(self):
        assert await get_ebay_title(FakeStore(), {"title": "Canon 5D"}) == "Canon 5D"

    @pytest.mark.asyncio
    async def test_constant_mapping_wins(self):
        store = FakeStore([rule("listing", "title", "constant", target_value="Camera Body")])
        assert await get_ebay_title(store, PRODUCT) == "Camera Body"

    @pytest.mark.asyncio
    async def test_untitled_fallback(self):
        assert await get_ebay_title(FakeStore(), {}) == "Untitled Product"


class TestGetEbayDescription:

    @pytest.mark.asyncio
    async def test_falls_back_to_body_html(self):
        assert await get_ebay_description(FakeStore(), PRODUCT) == "<p>Full frame body</p>"

    @pytest.mark.asyncio
    async def test_falls_back_to_title(self):
        assert await get_ebay_description(FakeStore(), {"title": "Canon 5D", "body_html": ""}) == "Canon 5D"

    @pytest.mark.asyncio
    async def test_final_fallback(self):
        assert await get_ebay_description(FakeStore(), {}) == "No description available"

    @pytest.mark.asyncio
    async def test_formula_template_passed_through(self):
        store = FakeStore([rule("listing", "description", "formula", source_value="{{title}} by {{vendor}}")])
        assert await get_ebay_description(store, PRODUCT) == "{{title}} by {{vendor}}"


class TestGetEbayHandlingTime:

    @pytest.mark.asyncio
    async def test_numeric_constant(self):
        store = FakeStore([rule("shipping", "handling_time", "constant", target_value="3")])
        assert await get_ebay_handling_time(store, PRODUCT) == 3

    @pytest.mark.asyncio
    async def test_fractional_value(self):
        store = FakeStore([rule("shipping", "handling_time", "constant", target_value="1.5")])
        assert await get_ebay_handling_time(store, PRODUCT) == 1.5

    @pytest.mark.asyncio
    async def test_non_numeric_defaults_to_one(self):
        store = FakeStore([rule("shipping", "handling_time", "constant", target_value="two days")])
        assert await get_ebay_handling_time(store, PRODUCT) == 1

    @pytest.mark.asyncio
    async def test_nan_defaults_to_one(self):
        store = FakeStore([rule("shipping", "handling_time", "constant", target_value="nan")])
        assert await get_ebay_handling_time(store, PRODUCT) == 1

    @pytest.mark.asyncio
    async def test_no_mapping_defaults_to_one(self):
        assert await get_ebay_handling_time(FakeStore(), PRODUCT) == 1


class TestBuildListingFields:

    @pytest.mark.asyncio
    async def test_all_fields(self):
        store = FakeStore([
            rule("listing", "condition", "constant", target_value="used"),
            rule("listing", "upc", "shopify_field", source_value="variants[0].barcode"),
            rule("listing", "title", "shopify_field", source_value="title"),
            rule("shipping", "handling_time", "constant", target_value="2"),
        ])

        fields = await build_listing_fields(store, PRODUCT)

        assert fields == {
            "condition_id": "3000",
            "upc": "013803064490",
            "title": "Canon 5D",
            "description": "<p>Full frame body</p>",
            "handling_time": 2,
        }
