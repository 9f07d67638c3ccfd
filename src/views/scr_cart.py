from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, HorizontalGroup, VerticalScroll
from textual.events import ScreenResume
from textual.validation import Number
from textual.widgets import Button, Input, Label, Rule

from db.models import CartLineItem
from utils.messages import CartChangedMessage
from utils.pure import format_money
from views.base_screen import BaseScreen
from views.modal_checkout import CheckoutModal
from views.modal_dialog import DialogModal
from views.modal_login import LoginModal


class CartItemWidget(HorizontalGroup):
    """One line item: name, unit price, editable quantity, subtotal, remove."""

    def __init__(self, item: CartLineItem):
        super().__init__()
        self.item = item

    def compose(self):
        with Container(id="div-cart-item-group"):
            with Container(id="div-item"):
                yield Label(self.item.name, id="label-item-name", markup=False)
                yield Label(format_money(self.item.price), id="label-item-price")
                yield Label(
                    f"Subtotal: {format_money(self.item.subtotal)}",
                    id="label-item-subtotal",
                )
            with Container(id="div-actions"):
                yield Input(
                    value=str(self.item.quantity),
                    type="integer",
                    id="input-item-qty",
                    validators=[Number(minimum=1, maximum=max(self.item.stock, 1))],
                )
                yield Button("Remove", id="btn-item-remove", variant="error")

    @on(Input.Submitted, "#input-item-qty")
    async def handle_qty_submit(self, event: Input.Submitted) -> None:
        try:
            requested = int(event.value)
        except ValueError:
            event.input.value = str(self.item.quantity)
            self.notify("Please enter a whole number.", severity="error")
            return

        change = await self.app.state.cart.update_quantity(self.item.product_id, requested)
        if change is None:
            return
        if change.warning:
            self.notify(change.warning, severity="warning")
        else:
            self.notify(change.message)
        self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-item-remove")
    @work()
    async def handle_remove_item(self):
        remove_confirmed = await self.app.push_screen_wait(
            DialogModal(
                f"Do you really want to remove {self.item.name} from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        )

        if remove_confirmed:
            change = await self.app.state.cart.remove_from_cart(self.item.product_id)
            self.notify(change.message, severity="information")
            self.post_message(CartChangedMessage())


class CartScreen(BaseScreen):
    """
    cart line items, totals, and the way into checkout
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield VerticalScroll(id="vertscroll-content")
        yield Label("Your cart is empty.", id="label-cart-total")
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-buttons"):
            yield Button("Clear Cart", id="btn-clear-cart")
            yield Button("Checkout", id="btn-checkout", variant="primary")

    def on_mount(self):
        self.handle_cart_change()

    @on(CartChangedMessage)
    @on(ScreenResume)
    @work(exclusive=True)  # must exclusive, else might race cond and gen duplicate
    async def handle_cart_change(self):
        cart = self.app.state.cart
        cart_items = cart.items

        content = self.query_one("#vertscroll-content")
        content_items = [c.item for c in content.children]
        if content_items != cart_items:
            await content.remove_children()
            await content.mount_all([CartItemWidget(item) for item in cart_items])

        content.set_class(not cart_items, "no-items")
        label_total = self.query_one("#label-cart-total", Label)
        if cart_items:
            label_total.update(
                f"Total ({cart.item_count()} items): {format_money(cart.total())}"
            )
        else:
            label_total.update("Your cart is empty.")

        self.query_one("#btn-checkout").disabled = not cart_items
        self.query_one("#btn-clear-cart").disabled = not cart_items

    @on(Button.Pressed, "#btn-clear-cart")
    @work(exclusive=True, group="cart-actions")
    async def handle_clear_cart(self) -> None:
        if self.app.state.cart.is_empty():
            self.notify("Cart is empty.", severity="warning")
            return

        remove_confirmed = await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove all items from cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="error",
            )
        )
        if remove_confirmed:
            await self.app.state.cart.clear()
            self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-checkout")
    @work(exclusive=True, group="cart-actions")
    async def handle_checkout(self) -> None:
        """
        Open up checkout screen, asking the user to log in first if needed
        """
        state = self.app.state
        if state.cart.is_empty():
            self.notify(
                "Your cart is empty. Add items before checking out!",
                severity="warning",
            )
            return

        if not state.identity:
            self.notify("Please log in to checkout.", severity="warning")
            if not await self.app.push_screen_wait(LoginModal()):
                return

        if await self.app.push_screen_wait(CheckoutModal()):
            self.post_message(CartChangedMessage())
