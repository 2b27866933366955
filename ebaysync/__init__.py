"""
Shopify to eBay sync service.
"""
