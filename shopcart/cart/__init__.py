"""Cart package: models, persistence, and operations."""
from .models import LineItem, Cart
from .storage import PersistedCartStore
from .service import CartOperations, CartResult, build_cart_operations, open_cart

__all__ = [
    "LineItem",
    "Cart",
    "PersistedCartStore",
    "CartOperations",
    "CartResult",
    "build_cart_operations",
    "open_cart",
]
