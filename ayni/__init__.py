"""Studio AYNI storefront API (products, orders, users)."""

__version__ = "2.1.0"
