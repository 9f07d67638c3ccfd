from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, MarkdownViewer

from utils.errors import ShopError, TransportError
from utils.pure import format_money, generate_markdown_table
from views.modal_dialog import DialogModal


class CheckoutModal(ModalScreen[bool]):
    """
    A modal screen for check out, showing every line item and the order total.
    Returns True once the order has been placed, False otherwise.
    """

    def compose(self) -> ComposeResult:
        with Vertical(id="div-checkout"):
            yield MarkdownViewer("", show_table_of_contents=False)
            with Horizontal(id="div-checkout-btns"):
                yield Button("Go Back", id="btn-quit")
                yield Button("Place Order", id="btn-submit", variant="primary")

    async def on_mount(self):
        cart = self.app.state.cart
        headers = ["Product Name", "Unit Price", "Quantity", "Total Price"]
        rows = [
            [
                item.name,
                format_money(item.price),
                item.quantity,
                format_money(item.subtotal),
            ]
            for item in cart.items
        ]
        aligns = ["l", "r", "c", "r"]
        header_md = "### Order Summary\n\n"
        md = generate_markdown_table(headers, rows, aligns)
        md += f"\n\n**Total:** {format_money(cart.total())}"
        md += f"\n\nOrdering as **{self.app.state.identity}**"
        await self.query_one(MarkdownViewer).document.update(header_md + md)
        self.query_one("#btn-submit").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self):
        if not await self.app.push_screen_wait(
            DialogModal(
                "Place order? This cannot be undone.",
                primary_text="Yes",
                secondary_text="No",
                tone="positive",
            )
        ):
            return

        btn_submit = self.query_one("#btn-submit", Button)
        btn_submit.disabled = True
        try:
            order = await self.app.state.ledger.checkout(
                self.app.state.cart, self.app.state.identity
            )
        except TransportError:
            # cart is kept, the user may retry from here
            self.notify(
                "Checkout failed. Please try again later.",
                severity="error",
            )
            btn_submit.disabled = False
            return
        except ShopError as e:
            self.notify(e.message, severity="error")
            self.dismiss(False)
            return

        self.notify(f"Order placed. Your order number is {order.id}.")
        self.dismiss(True)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)
