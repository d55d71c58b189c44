"""
shopcart - client-side shopping cart with stock validation

This package contains:
- cart: cart models, persistence and the stock-validated operations
- api: HTTP client for stock and product lookups
- db: key-value storage backends (local file, Upstash Redis)
- notifications: user-facing error sinks
- i18n: message catalogs

Note: Imports are lazy so that importing shopcart.logging or
shopcart.config does not pull in the HTTP and Redis clients.
"""

__version__ = "1.0.0"

__all__ = [
    "CartOperations",
    "CartResult",
    "build_cart_operations",
    "open_cart",
    "Settings",
    "load_settings",
]


def __getattr__(name):
    """Lazy attribute access."""
    if name in ("CartOperations", "CartResult", "build_cart_operations", "open_cart"):
        from shopcart.cart import service
        return getattr(service, name)
    if name in ("Settings", "load_settings"):
        from shopcart import config
        return getattr(config, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
