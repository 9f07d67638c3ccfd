from typing import Dict, List

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Button, Checkbox, DataTable, Input, Label, Select

from core.catalog import (
    ALL,
    PRICE_RANGE_LABELS,
    PRICE_RANGES,
    ProductFilters,
    filter_products,
    list_categories,
)
from db.models import Product, ProductId
from utils.errors import ShopError
from utils.messages import CartChangedMessage, InboxChangedMessage
from utils.pure import format_money, format_rating
from views.base_screen import BaseScreen
from views.modal_prod_detail import ProdDetailModal


class ShopScreen(BaseScreen):
    """
    Product browsing: the whole catalogue is fetched once and filtered
    client-side by search term, category and price range.
    """

    # only here to be displayed in footer
    BINDINGS = [
        Binding("enter", "noop", "View Product", show=True, key_display="⏎"),
    ]

    def __init__(self):
        super().__init__()
        self._products: List[Product] = []
        self._row_ids: Dict[str, ProductId] = {}

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal(id="hort-filters"):
            yield Input(id="input-search", placeholder="Search products...")
            yield Checkbox("Match category", id="chk-search-category")
            yield Select(
                [(ALL, ALL)],
                value=ALL,
                allow_blank=False,
                id="select-category",
            )
            yield Select(
                [(PRICE_RANGE_LABELS[r], r) for r in PRICE_RANGES],
                value=ALL,
                allow_blank=False,
                id="select-price",
            )
            yield Button("Refresh", id="btn-refresh")
        yield DataTable(id="table-products")
        yield Label("", id="label-status", markup=False)
        with Horizontal(id="hort-free-trial"):
            yield Label("Join our community, start a free trial:", id="label-free-trial")
            yield Input(placeholder="Enter your email", id="input-trial-email")
            yield Button("Sign Up", id="btn-trial-signup", variant="success")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Name", "Category", "Price", "Stock", "Rating")

        self.load_products()
        self.query_one("#input-search").focus()

    def action_noop(self) -> None:
        pass

    @on(Button.Pressed, "#btn-refresh")
    @work(exclusive=True, group="products")
    async def load_products(self) -> None:
        table = self.query_one(DataTable)
        status = self.query_one("#label-status", Label)
        table.loading = True
        status.update("Loading products...")
        try:
            self._products = await self.app.state.store.list_products()
        except ShopError as e:
            self._products = []
            status.update(
                "Failed to fetch products. Please ensure the store server is running."
            )
            self.notify(e.message, severity="error")
            return
        finally:
            table.loading = False

        categories = list_categories(self._products)
        self.query_one("#select-category", Select).set_options(
            [(c, c) for c in categories]
        )
        self.apply_filters()

    def current_filters(self) -> ProductFilters:
        category = self.query_one("#select-category", Select).value
        price_range = self.query_one("#select-price", Select).value
        return ProductFilters(
            category=category if isinstance(category, str) else ALL,
            price_range=price_range if isinstance(price_range, str) else ALL,
            search_term=self.query_one("#input-search", Input).value,
            match_category=self.query_one("#chk-search-category", Checkbox).value,
        )

    @on(Input.Changed, "#input-search")
    @on(Checkbox.Changed, "#chk-search-category")
    @on(Select.Changed)
    def apply_filters(self) -> None:
        products = filter_products(self._products, self.current_filters())

        table = self.query_one(DataTable)
        table.clear()
        self._row_ids = {}
        for p in products:
            key = str(p.id)
            self._row_ids[key] = p.id
            table.add_row(
                p.id,
                p.name,
                p.category,
                format_money(p.price),
                p.stock if p.in_stock else "Out of Stock",
                format_rating(p.average_rating),
                key=key,
            )

        status = self.query_one("#label-status", Label)
        if self._products and not products:
            status.update("No products found matching your filters.")
        else:
            status.update(f"{len(products)} of {len(self._products)} product(s)")

    @on(DataTable.RowSelected, "#table-products")
    @work()
    async def handle_view_product(self, event: DataTable.RowSelected) -> None:
        product_id = self._row_ids.get(event.row_key.value)
        if product_id is None:
            return
        if await self.app.push_screen_wait(ProdDetailModal(product_id)):
            self.post_message(CartChangedMessage())
        # reviews may have changed the rating column
        self.load_products()

    @on(Input.Submitted, "#input-trial-email")
    @on(Button.Pressed, "#btn-trial-signup")
    @work(exclusive=True, group="free-trial")
    async def handle_free_trial(self) -> None:
        input_email = self.query_one("#input-trial-email", Input)
        try:
            email = await self.app.state.accounts.start_free_trial(input_email.value)
        except ShopError as e:
            self.notify(e.message, severity="error")
            return
        input_email.value = ""
        self.notify(f"Welcome! Free trial started for {email}. Check your inbox!")
        self.post_message(InboxChangedMessage())
