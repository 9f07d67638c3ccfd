from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from core.cart import CartEngine
from core.inbox import NotificationInbox
from db.models import ORDER_STATUS_PROCESSING, Order, OrderItem
from db.remote import ProductStore
from utils.errors import EmptyCartError, NotAuthenticatedError, TransportError
from utils.ids import unique_millis
from utils.logger import get_logger
from utils.pure import format_display_date, format_money

_logger = get_logger(__name__)


class OrderLedger:
    """
    Checkout and order history on top of the remote orders collection.
    Orders are only ever appended; the ledger never edits or deletes one.
    """

    def __init__(self, store: ProductStore, inbox: NotificationInbox):
        self._store = store
        self._inbox = inbox

    async def checkout(
        self,
        cart: CartEngine,
        identity: Optional[str],
        when: Optional[datetime] = None,
    ) -> Order:
        """
        Turn the cart into an order for `identity`.

        The cart is cleared only once the store has accepted the order. If the
        submission fails the cart is left as it was, a failure notification is
        added and the TransportError propagates so the user can try again.
        """
        if cart.is_empty():
            raise EmptyCartError()
        if not identity:
            raise NotAuthenticatedError("Please log in to place an order.")

        when = when or datetime.now()
        items = tuple(OrderItem.from_line_item(i) for i in cart.items)
        order = Order(
            id=f"ORD{unique_millis()}",
            user_id=identity,
            date=format_display_date(when),
            total=sum(i.price * i.quantity for i in items),
            status=ORDER_STATUS_PROCESSING,
            items=items,
        )

        try:
            created = await self._store.create_order(order)
        except TransportError:
            _logger.error(f"Order {order.id} for {identity} was not accepted.")
            await self._inbox.add(
                f"Checkout failed, your order of {order.item_summary} was not placed. "
                "Your cart has been kept, please try again."
            )
            raise

        await cart.clear()
        _logger.info(f"Order {created.id} placed by {identity}, total {created.total}")
        await self._inbox.add(
            f"Your order #{created.id} for items: {created.item_summary} "
            f"has been placed successfully. Total: {format_money(created.total)}."
        )
        return created

    async def orders_for(self, identity: Optional[str]) -> List[Order]:
        """All orders placed by `identity`, in the order the store returns them."""
        if not identity:
            raise NotAuthenticatedError("Please log in to view your orders.")
        orders = await self._store.list_orders()
        return [o for o in orders if o.user_id == identity]
