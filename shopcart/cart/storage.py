"""Persisted cart: load/save the whole cart under one namespaced key."""
import json
from typing import Optional

from shopcart.db import KeyValueStore
from shopcart.errors import CartStorageError
from shopcart.logging import get_logger

from .models import Cart

logger = get_logger(__name__)

_UNSET = object()


class PersistedCartStore:
    """
    Serializes the cart as a JSON array under a single key.

    observe() implements write-on-change: the first cart it sees is only
    remembered, later carts are written when the reference differs.
    """

    def __init__(self, backend: KeyValueStore, key: str):
        self.backend = backend
        self.key = key
        self._last_observed: object = _UNSET

    def load(self) -> Cart:
        """Stored cart, or an empty cart if nothing (or nothing usable) is stored."""
        try:
            raw: Optional[str] = self.backend.get(self.key)
        except Exception as e:
            # Any backend failure (file, Redis transport) means starting empty
            logger.warning(f"Cart storage unreadable, starting empty: {e}")
            return Cart()

        if not raw:
            return Cart()

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise TypeError(f"expected a list, got {type(data).__name__}")
            return Cart.from_list(data)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            # Corrupted data - keep it until the next successful save overwrites it
            logger.warning(f"Corrupted cart data under {self.key}: {e}")
            return Cart()

    def save(self, cart: Cart) -> None:
        """Write the full cart, replacing any previous value."""
        serialized = json.dumps(cart.to_list(), ensure_ascii=False)
        try:
            self.backend.set(self.key, serialized)
        except CartStorageError:
            raise
        except Exception as e:
            raise CartStorageError(f"Failed to save cart under {self.key}: {e}") from e
        logger.debug(f"Cart saved under {self.key} ({len(cart)} items)")

    def observe(self, cart: Cart) -> bool:
        """
        Record the latest cart and persist it if it changed.

        Returns True when a write happened. The reference is recorded before
        writing, so a failed write is not retried for the same cart.
        """
        previous = self._last_observed
        self._last_observed = cart
        if previous is _UNSET or previous is cart:
            return False
        self.save(cart)
        return True
