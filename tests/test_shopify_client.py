"""
Tests for the Shopify REST client.
"""

import httpx
import pytest

from ebaysync.errors import NotFoundError
from ebaysync.shopify import ShopifyAuthError, ShopifyClient


def make_client(handler):
    return ShopifyClient("https://mystore.myshopify.com/", "shpat_test", transport=httpx.MockTransport(handler))


class TestShopifyClient:

    def test_domain_is_cleaned(self):
        client = ShopifyClient("https://mystore.myshopify.com/", "shpat_test")
        assert client.base_url == "https://mystore.myshopify.com/admin/api/2024-01"

    @pytest.mark.asyncio
    async def test_get_product_sends_token(self):
        def handler(request):
            assert request.headers["X-Shopify-Access-Token"] == "shpat_test"
            assert request.url.path == "/admin/api/2024-01/products/42.json"
            return httpx.Response(200, json={"product": {"id": 42, "title": "Nikon F3"}})

        async with make_client(handler) as client:
            product = await client.get_product("gid://shopify/Product/42")

        assert product["title"] == "Nikon F3"

    @pytest.mark.asyncio
    async def test_missing_product(self):
        async with make_client(lambda request: httpx.Response(404)) as client:
            with pytest.raises(NotFoundError):
                await client.get_product("42")

    @pytest.mark.asyncio
    async def test_auth_failure_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(401)

        async with make_client(handler) as client:
            with pytest.raises(ShopifyAuthError):
                await client.get_product("42")

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_rate_limit_retried(self):
        responses = [
            httpx.Response(429, headers={"Retry-After": "0.01"}),
            httpx.Response(200, json={"product": {"id": 42}}),
        ]

        async with make_client(lambda request: responses.pop(0)) as client:
            product = await client.get_product("42")

        assert product == {"id": 42}
