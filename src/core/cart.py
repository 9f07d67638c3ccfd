from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from core.inbox import NotificationInbox
from db.models import CartLineItem, Product, ProductId
from db.storage import CART_KEY, LocalStorage
from utils.errors import CapacityError, ValidationError
from utils.logger import get_logger

_logger = get_logger(__name__)


def _normalize(items: List[CartLineItem]) -> List[CartLineItem]:
    """
    Bring stored line items back within 1 <= quantity <= stock: duplicates are
    merged into the first occurrence (latest stock snapshot wins), sold-out
    items are dropped and quantities are clamped.
    """
    merged: Dict[ProductId, CartLineItem] = {}
    for item in items:
        first = merged.get(item.product_id)
        if first is not None:
            item = replace(item, quantity=first.quantity + item.quantity)
        merged[item.product_id] = item

    result = []
    for item in merged.values():
        if item.stock < 1:
            continue
        qty = min(max(item.quantity, 1), item.stock)
        result.append(item if qty == item.quantity else replace(item, quantity=qty))
    return result


@dataclass(frozen=True)
class CartChange:
    """
    Outcome of a cart mutation.
    `message` confirms what happened, `warning` is set when the requested
    quantity had to be clamped.
    """

    item: Optional[CartLineItem]
    message: str
    warning: Optional[str] = None


class CartEngine:
    """
    Ordered line items, unique by product id, with 1 <= quantity <= stock.

    The whole collection is written to local storage after every mutation and
    read back by load(). When an inbox is given, add/update/remove also leave
    a notification there.
    """

    def __init__(self, storage: LocalStorage, inbox: Optional[NotificationInbox] = None):
        self._storage = storage
        self._inbox = inbox
        self._items: List[CartLineItem] = []
        # names of products that have been in the cart, for removal messages
        self._known_names: Dict[ProductId, str] = {}

    async def load(self) -> None:
        raw = await self._storage.read_json(CART_KEY, [])
        try:
            stored = [CartLineItem.from_dict(d) for d in raw]
        except (TypeError, KeyError, ValueError, AttributeError):
            _logger.warning("Stored cart is malformed, starting with an empty cart.")
            stored = []

        items = _normalize(stored)
        self._items = items
        if items != stored:
            _logger.warning("Stored cart broke the quantity bounds and was repaired.")
            await self._save()
        self._known_names.update({i.product_id: i.name for i in stored})
        _logger.debug(f"Cart loaded with {len(items)} line item(s).")

    async def _save(self) -> None:
        await self._storage.write_json(CART_KEY, [i.to_dict() for i in self._items])

    async def _notify(self, message: str) -> None:
        if self._inbox is not None:
            await self._inbox.add(message)

    def _index(self, product_id: ProductId) -> Optional[int]:
        for i, item in enumerate(self._items):
            if item.product_id == product_id:
                return i
        return None

    # ---------------------------
    # Reads
    # ---------------------------

    @property
    def items(self) -> List[CartLineItem]:
        return list(self._items)

    def get(self, product_id: ProductId) -> Optional[CartLineItem]:
        idx = self._index(product_id)
        return self._items[idx] if idx is not None else None

    def is_empty(self) -> bool:
        return not self._items

    def total(self) -> float:
        return sum(item.price * item.quantity for item in self._items)

    def item_count(self) -> int:
        return sum(item.quantity for item in self._items)

    # ---------------------------
    # Mutations
    # ---------------------------

    async def add_to_cart(self, product: Product, quantity: int = 1) -> CartChange:
        """
        Add `quantity` of `product`, merging with an existing line item.
        Raises CapacityError, leaving the cart untouched, if the resulting
        quantity would exceed the product's stock.
        """
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1.")

        idx = self._index(product.id)
        current = self._items[idx].quantity if idx is not None else 0
        new_qty = current + quantity
        if new_qty > product.stock:
            raise CapacityError(product.name, product.stock)

        if idx is not None:
            item = replace(self._items[idx], quantity=new_qty, stock=product.stock)
            self._items[idx] = item
            message = f"Updated quantity of {product.name} in cart!"
        else:
            item = CartLineItem.from_product(product, quantity)
            self._items.append(item)
            message = f"{product.name} added to cart!"
        self._known_names[product.id] = product.name

        await self._save()
        await self._notify(message)
        return CartChange(item, message)

    async def update_quantity(
        self, product_id: ProductId, new_quantity: int
    ) -> Optional[CartChange]:
        """
        Set the quantity of an existing line item, clamped to [1, stock].
        A sold-out line item is removed instead, since no quantity fits.
        Returns None, changing nothing, when the product isn't in the cart.
        """
        idx = self._index(product_id)
        if idx is None:
            return None
        item = self._items[idx]

        if item.stock < 1:
            # nothing left to clamp to
            self._items.pop(idx)
            message = f"{item.name} is out of stock and was removed from cart."
            await self._save()
            await self._notify(message)
            return CartChange(None, message, warning=message)

        warning = None
        qty = new_quantity
        if qty > item.stock:
            qty = item.stock
            warning = f'Only {item.stock} of "{item.name}" are in stock.'
        elif qty < 1:
            qty = 1
            warning = "Quantity cannot be less than 1."

        item = replace(item, quantity=qty)
        self._items[idx] = item
        message = f"Updated quantity of {item.name} to {qty}."

        await self._save()
        await self._notify(message)
        return CartChange(item, message, warning)

    async def remove_from_cart(self, product_id: ProductId) -> CartChange:
        idx = self._index(product_id)
        removed = self._items.pop(idx) if idx is not None else None
        name = removed.name if removed else self._known_names.get(product_id)
        message = f"{name} removed from cart." if name else "Item removed from cart."

        if removed is not None:
            await self._save()
        await self._notify(message)
        return CartChange(removed, message)

    async def clear(self) -> None:
        self._items = []
        await self._save()
