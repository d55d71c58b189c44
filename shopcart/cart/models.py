"""Cart models: immutable line items and carts."""
import copy
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Iterator, List, Mapping, Optional, Tuple


# Field names at rest ({ "id": ..., ...productFields, "amount": ... })
ID_FIELD = "id"
AMOUNT_FIELD = "amount"


def _freeze(attributes: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(
        {k: copy.deepcopy(v) for k, v in attributes.items() if k not in (ID_FIELD, AMOUNT_FIELD)}
    )


@dataclass(frozen=True)
class LineItem:
    """A product reference plus a quantity."""
    product_id: int
    quantity: int
    # Compared but not hashed: items hash by product id and quantity
    attributes: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        if isinstance(self.product_id, bool) or not isinstance(self.product_id, int):
            raise ValueError("product_id must be an integer")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValueError("quantity must be an integer")
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")
        # Own a read-only copy so no caller can edit a committed item
        object.__setattr__(self, "attributes", _freeze(self.attributes))

    def with_quantity(self, quantity: int) -> "LineItem":
        """Copy of this item with a new quantity."""
        return replace(self, quantity=quantity)

    @classmethod
    def from_product(cls, product: Mapping[str, Any], quantity: int = 1) -> "LineItem":
        """Build an item from a catalog record (which carries "id")."""
        return cls(product_id=product[ID_FIELD], quantity=quantity, attributes=product)

    def to_dict(self) -> dict:
        """Serialize as { id, ...productFields, amount }."""
        return {ID_FIELD: self.product_id, **self.attributes, AMOUNT_FIELD: self.quantity}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LineItem":
        """Create from a persisted record."""
        return cls(
            product_id=data[ID_FIELD],
            quantity=data[AMOUNT_FIELD],
            attributes=data,
        )


@dataclass(frozen=True)
class Cart:
    """
    Ordered collection of line items, unique by product id.

    Every mutation helper returns a new Cart; the receiver is never changed.
    """
    items: Tuple[LineItem, ...] = ()

    def __post_init__(self):
        items = tuple(self.items)
        ids = [item.product_id for item in items]
        if len(ids) != len(set(ids)):
            raise ValueError("duplicate product_id in cart")
        object.__setattr__(self, "items", items)

    def __iter__(self) -> Iterator[LineItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def product_ids(self) -> List[int]:
        return [item.product_id for item in self.items]

    @property
    def total_items(self) -> int:
        """Total number of units in the cart."""
        return sum(item.quantity for item in self.items)

    def index_of(self, product_id: int) -> int:
        """Position of the item for product_id, or -1."""
        for index, item in enumerate(self.items):
            if item.product_id == product_id:
                return index
        return -1

    def find(self, product_id: int) -> Optional[LineItem]:
        index = self.index_of(product_id)
        return self.items[index] if index >= 0 else None

    def append(self, item: LineItem) -> "Cart":
        return Cart(self.items + (item,))

    def replace(self, item: LineItem) -> "Cart":
        """Swap in item at the position of the item with the same product id."""
        index = self.index_of(item.product_id)
        if index < 0:
            raise KeyError(item.product_id)
        return Cart(self.items[:index] + (item,) + self.items[index + 1:])

    def remove(self, product_id: int) -> "Cart":
        index = self.index_of(product_id)
        if index < 0:
            raise KeyError(product_id)
        return Cart(self.items[:index] + self.items[index + 1:])

    def to_list(self) -> List[dict]:
        """Convert to the JSON-compatible list stored at rest."""
        return [item.to_dict() for item in self.items]

    @classmethod
    def from_list(cls, data: List[Mapping[str, Any]]) -> "Cart":
        """Create from the stored list."""
        return cls(tuple(LineItem.from_dict(record) for record in data))
