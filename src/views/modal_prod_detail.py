from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label, MarkdownViewer

from db.models import Product, ProductId
from utils.errors import NotFoundError, ShopError
from utils.pure import format_money, format_rating, generate_markdown_table
from views.modal_review import ReviewModal


class ProdDetailModal(ModalScreen[bool]):
    """
    prod detail, reviews, plus adding to cart
    Will return true if cart changed, false if not
    """

    order_qty = reactive(1, init=False)

    def __init__(self, pid: ProductId) -> None:
        super().__init__()

        self._pid = pid
        self._prod: Product = None
        self._cart_changed = False

    def compose(self) -> ComposeResult:
        with Horizontal(id="hort-prod-detail"):
            yield MarkdownViewer("", show_table_of_contents=False)
            with Vertical(id="div-prod-actions"):
                yield Label("Quantity")
                with Horizontal():
                    yield Button("-", id="btn-sub-qty")
                    yield Input(value="1", id="input-order-qty", type="integer")
                    yield Button("+", id="btn-add-qty")
                yield Button("Add to Cart", id="btn-addcart", variant="primary")
                yield Button("Write a Review", id="btn-review")
                yield Button("Go Back", id="btn-quit")

    def on_mount(self):
        self.load_product()

    @work(exclusive=True, group="product")
    async def load_product(self) -> None:
        try:
            self._prod = await self.app.state.store.get_product(self._pid)
        except NotFoundError:
            self.notify("Product not found.", severity="error")
            self.dismiss(self._cart_changed)
            return
        except ShopError as e:
            self.notify(e.message, severity="error")
            self.dismiss(self._cart_changed)
            return

        await self._render_product()

        stock_cnt = self._prod.stock
        order_btn = self.query_one("#btn-addcart", Button)
        if stock_cnt < 1:
            order_btn.label = "Out of Stock"
            order_btn.disabled = True
            order_btn.variant = "warning"
            self.query_one("#input-order-qty").disabled = True
        else:
            order_btn.label = "Add to Cart"
            order_btn.disabled = False
            order_btn.variant = "primary"
            self.query_one("#input-order-qty").disabled = False

        self.query_one("#input-order-qty").validators = [
            Number(minimum=1, maximum=max(stock_cnt, 1))
        ]
        self.order_qty = 1
        self._refresh_qty_buttons()
        self.query_one("#input-order-qty").focus()

    async def _render_product(self) -> None:
        p = self._prod
        header_md = f"## {p.name}\n\n"
        if p.description:
            header_md += f"{p.description}\n\n"

        stock_str = f"{p.stock} in stock" if p.in_stock else "Out of Stock"
        table_rows = [
            ["Price", format_money(p.price)],
            ["Category", p.category],
            ["Availability", stock_str],
            ["Rating", f"{format_rating(p.average_rating)} ({len(p.reviews)} reviews)"],
        ]
        in_cart = self.app.state.cart.get(p.id)
        if in_cart is not None:
            table_rows.append(["In Your Cart", in_cart.quantity])
        md = header_md + generate_markdown_table(
            ["Attribute", "Value"], table_rows, ["l", "l"]
        )

        md += "\n\n### Customer Reviews\n\n"
        if not p.reviews:
            md += "No reviews yet. Be the first to review this product!"
        else:
            md += generate_markdown_table(
                ["User", "Rating", "Date", "Comment"],
                [[r.user_id, "★" * r.rating, r.date, r.comment] for r in p.reviews],
                ["l", "c", "c", "l"],
            )
        await self.query_one(MarkdownViewer).document.update(md)

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(self._cart_changed)

    @on(Input.Changed, "#input-order-qty")
    def handle_qty_input(self, message: Input.Changed) -> None:
        if message.input.is_valid and self.focused == message.input:
            self.order_qty = int(message.value)

    def watch_order_qty(self, qty: int) -> None:
        self._refresh_qty_buttons()
        input_order_qty = self.query_one("#input-order-qty", Input)
        if input_order_qty.value != str(qty):
            input_order_qty.value = str(qty)

    def _refresh_qty_buttons(self) -> None:
        stock = self._prod.stock if self._prod else 0
        self.query_one("#btn-sub-qty").disabled = self.order_qty <= 1
        self.query_one("#btn-add-qty").disabled = self.order_qty >= stock

    @on(Button.Pressed, "#btn-add-qty")
    def handle_add_qty(self):
        if self._prod and self.order_qty < self._prod.stock:
            self.order_qty += 1

    @on(Button.Pressed, "#btn-sub-qty")
    def handle_sub_qty(self):
        if self.order_qty > 1:
            self.order_qty -= 1

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(self._cart_changed)

    @on(Input.Submitted, "#input-order-qty")
    @on(Button.Pressed, "#btn-addcart")
    @work(exclusive=True)
    async def handle_addcart(self):
        if self._prod is None or not self._prod.in_stock:
            return
        try:
            change = await self.app.state.cart.add_to_cart(self._prod, self.order_qty)
        except ShopError as e:
            self.notify(e.message, severity="error")
            return

        self.notify(change.message)
        self._cart_changed = True
        self.dismiss(True)

    @on(Button.Pressed, "#btn-review")
    @work(exclusive=True)
    async def handle_review(self):
        if self._prod is None:
            return
        if not self.app.state.identity:
            self.notify("Please log in to submit a review.", severity="warning")
            return
        if await self.app.push_screen_wait(ReviewModal(self._prod)):
            self.load_product()
