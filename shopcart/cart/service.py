"""Cart operations: stock-validated mutations with persistence and notifications."""
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Callable, List, Optional

from shopcart.api import ProductCatalogSource, ShopApiClient, StockSource
from shopcart.config import Settings, load_settings
from shopcart.db import KeyValueStore, StorageKeys, create_key_value_store
from shopcart.errors import (
    MSG_ADD_FAILED,
    MSG_REMOVE_FAILED,
    MSG_SAVE_FAILED,
    MSG_UPDATE_FAILED,
    MSG_UPDATE_OUT_OF_STOCK,
    CartErrorKind,
    CartStorageError,
)
from shopcart.logging import get_logger
from shopcart.models import ProductAmountUpdate
from shopcart.notifications import LoggingNotificationSink, NotificationSink, Notifier

from .models import ID_FIELD, Cart, LineItem
from .storage import PersistedCartStore

logger = get_logger(__name__)

CartListener = Callable[[Cart], None]


@dataclass(frozen=True)
class CartResult:
    """Outcome of a cart operation. The cart is the one current after the call."""
    cart: Cart
    error: Optional[CartErrorKind] = None
    changed: bool = False
    # Set when the new cart was committed in memory but could not be saved
    warning: Optional[CartErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CartOperations:
    """
    Owns the current cart and applies add/remove/update to it.

    Failures never raise: they are reported to the notifier and returned as
    CartResult.error, leaving the current cart untouched. Calls are expected
    to be serialized by the host; overlapping calls are last-write-wins.
    """

    def __init__(
        self,
        store: PersistedCartStore,
        stock_source: StockSource,
        catalog_source: ProductCatalogSource,
        notifier: Notifier,
    ):
        self._store = store
        self._stock = stock_source
        self._catalog = catalog_source
        self._notifier = notifier
        self._listeners: List[CartListener] = []
        self._cart = store.load()
        # First observation: remember the loaded cart without rewriting it
        store.observe(self._cart)
        logger.info(f"Cart loaded with {len(self._cart)} items")

    @property
    def cart(self) -> Cart:
        """Current cart snapshot."""
        return self._cart

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Call listener with every committed cart. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ==================== INTERNAL HELPERS ====================

    def _commit(self, cart: Cart) -> CartResult:
        self._cart = cart
        warning = None
        try:
            self._store.observe(cart)
        except CartStorageError as e:
            logger.error(f"Failed to persist cart: {e}")
            self._notifier.error(MSG_SAVE_FAILED)
            warning = CartErrorKind.PERSISTENCE_FAILED

        for listener in list(self._listeners):
            try:
                listener(cart)
            except Exception:
                logger.error("Cart listener failed", exc_info=True)

        return CartResult(cart=cart, changed=True, warning=warning)

    def _fail(self, kind: CartErrorKind, message_key: str, product_id: int) -> CartResult:
        logger.info(f"Cart operation aborted for product {product_id}: {kind.value}")
        self._notifier.error(message_key)
        return CartResult(cart=self._cart, error=kind)

    async def _fetch_stock(self, product_id: int) -> Optional[int]:
        """Fresh stock amount, or None if the source failed."""
        try:
            return int(await self._stock.get_stock(product_id))
        except Exception as e:
            logger.warning(f"Stock unavailable for product {product_id}: {e}")
            return None

    # ==================== OPERATIONS ====================

    async def add_product(self, product_id: int) -> CartResult:
        """Add one unit of a product, appending a new line if it is not in the cart."""
        snapshot = self._cart
        existing = snapshot.find(product_id)

        stock = await self._fetch_stock(product_id)
        if stock is None:
            return self._fail(CartErrorKind.STOCK_FETCH_FAILED, MSG_ADD_FAILED, product_id)

        desired = (existing.quantity if existing else 0) + 1
        if desired > stock:
            return self._fail(CartErrorKind.INSUFFICIENT_STOCK, MSG_ADD_FAILED, product_id)

        if existing is not None:
            return self._commit(snapshot.replace(existing.with_quantity(desired)))

        try:
            product = await self._catalog.get_product(product_id)
            item = LineItem.from_product({**product, ID_FIELD: product_id})
        except Exception as e:
            logger.warning(f"Product unavailable for product {product_id}: {e}")
            return self._fail(CartErrorKind.CATALOG_FETCH_FAILED, MSG_ADD_FAILED, product_id)

        return self._commit(snapshot.append(item))

    def remove_product(self, product_id: int) -> CartResult:
        """Remove a product line entirely. No network access."""
        snapshot = self._cart
        if snapshot.find(product_id) is None:
            return self._fail(CartErrorKind.ITEM_NOT_FOUND, MSG_REMOVE_FAILED, product_id)
        return self._commit(snapshot.remove(product_id))

    async def update_product_amount(self, product_id: int, amount: int) -> CartResult:
        """
        Set the quantity of a product already in the cart.

        Non-positive and non-integer amounts are ignored silently; removal
        goes through remove_product().
        """
        if isinstance(amount, bool) or not isinstance(amount, int):
            logger.warning(f"Ignoring non-integer amount for product {product_id}: {amount!r}")
            return CartResult(cart=self._cart)

        if amount <= 0:
            return CartResult(cart=self._cart)

        snapshot = self._cart

        stock = await self._fetch_stock(product_id)
        if stock is None:
            return self._fail(CartErrorKind.STOCK_FETCH_FAILED, MSG_UPDATE_FAILED, product_id)

        if amount > stock:
            return self._fail(CartErrorKind.INSUFFICIENT_STOCK, MSG_UPDATE_OUT_OF_STOCK, product_id)

        existing = snapshot.find(product_id)
        if existing is None:
            return self._fail(CartErrorKind.ITEM_NOT_FOUND, MSG_UPDATE_FAILED, product_id)

        return self._commit(snapshot.replace(existing.with_quantity(amount)))

    async def update_product_amount_from(self, request: ProductAmountUpdate) -> CartResult:
        """update_product_amount() for a {productId, amount} request."""
        return await self.update_product_amount(request.product_id, request.amount)

    def clear_cart(self) -> CartResult:
        """Empty the cart (persisted as an empty list)."""
        return self._commit(Cart())


def build_cart_operations(
    settings: Settings,
    api_client: ShopApiClient,
    sink: Optional[NotificationSink] = None,
    backend: Optional[KeyValueStore] = None,
) -> CartOperations:
    """Wire a CartOperations instance from settings and collaborators."""
    if backend is None:
        backend = create_key_value_store(settings)
    store = PersistedCartStore(backend, StorageKeys.cart_key(settings.storage_key))
    notifier = Notifier(sink or LoggingNotificationSink(), language=settings.language)
    return CartOperations(
        store=store,
        stock_source=api_client,
        catalog_source=api_client,
        notifier=notifier,
    )


@asynccontextmanager
async def open_cart(
    settings: Optional[Settings] = None,
    sink: Optional[NotificationSink] = None,
) -> AsyncIterator[CartOperations]:
    """
    Open a cart session for the lifetime of the block.

    async with open_cart() as cart_ops:
        await cart_ops.add_product(1)
    """
    settings = settings or load_settings()
    async with ShopApiClient.from_settings(settings) as client:
        yield build_cart_operations(settings, client, sink=sink)
