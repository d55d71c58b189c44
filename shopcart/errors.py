"""
Cart Errors

Centralized error kinds, user-facing message keys and exception types.
"""

from enum import Enum


# Message keys resolved through shopcart.i18n (see locales/*.json)
MSG_ADD_FAILED = "cart.add_failed"
MSG_REMOVE_FAILED = "cart.remove_failed"
MSG_UPDATE_OUT_OF_STOCK = "cart.update_out_of_stock"
MSG_UPDATE_FAILED = "cart.update_failed"
MSG_SAVE_FAILED = "cart.save_failed"


class CartErrorKind(str, Enum):
    """Why a cart operation was aborted."""
    STOCK_FETCH_FAILED = "stock_fetch_failed"
    CATALOG_FETCH_FAILED = "catalog_fetch_failed"
    INSUFFICIENT_STOCK = "insufficient_stock"
    ITEM_NOT_FOUND = "item_not_found"
    # Reported only; the mutation stays committed in memory
    PERSISTENCE_FAILED = "persistence_failed"


class ShopCartError(Exception):
    """Base class for shopcart errors."""


class SourceUnavailableError(ShopCartError):
    """A remote stock/product lookup failed (transport, status or payload)."""

    def __init__(self, resource: str, product_id: int, reason: str = ""):
        self.resource = resource
        self.product_id = product_id
        self.reason = reason
        message = f"{resource} lookup failed for product {product_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class StockFetchError(SourceUnavailableError):
    def __init__(self, product_id: int, reason: str = ""):
        super().__init__("stock", product_id, reason)


class CatalogFetchError(SourceUnavailableError):
    def __init__(self, product_id: int, reason: str = ""):
        super().__init__("product", product_id, reason)


class CartStorageError(ShopCartError):
    """Reading or writing the persisted cart failed."""


__all__ = [
    "MSG_ADD_FAILED",
    "MSG_REMOVE_FAILED",
    "MSG_UPDATE_OUT_OF_STOCK",
    "MSG_UPDATE_FAILED",
    "MSG_SAVE_FAILED",
    "CartErrorKind",
    "ShopCartError",
    "SourceUnavailableError",
    "StockFetchError",
    "CatalogFetchError",
    "CartStorageError",
]
