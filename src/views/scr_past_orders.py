from typing import Dict, List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Label, MarkdownViewer

from db.models import Order
from utils.errors import NotAuthenticatedError, ShopError
from utils.messages import IdentityChangedMessage
from utils.pure import format_money, generate_markdown_table
from views.base_screen import BaseScreen


class OrderHistoryScreen(BaseScreen):
    """
    Customers can browse their past orders and view details.

    Layout:
    - Markdown detail view at the top, showing selected order details.
    - Orders table below, newest first.
    """

    # Show some hints in footer
    BINDINGS = [
        Binding("enter", "noop", "View Order Detail", show=True, key_display="⏎"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._orders: Dict[str, Order] = {}

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)
            yield DataTable(id="table-orders")
        with Horizontal(id="hort-table-control"):
            yield Button("Refresh", id="btn-refresh")
            yield Label("", id="label-order-cnt")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Order ID", "Date", "Items", "Total", "Status")

    def action_noop(self) -> None:
        pass

    @on(Button.Pressed, "#btn-refresh")
    @on(ScreenResume)
    @on(IdentityChangedMessage)
    def handle_refresh(self):
        self._load_orders()

    @on(DataTable.RowHighlighted, "#table-orders")
    def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        if event.row_key is not None:
            self._render_detail(self._orders.get(event.row_key.value))

    @work(exclusive=True, group="orders")
    async def _load_orders(self) -> None:
        table = self.query_one(DataTable)
        label_cnt = self.query_one("#label-order-cnt", Label)
        table.clear()
        self._orders = {}

        try:
            orders = await self.app.state.ledger.orders_for(self.app.state.identity)
        except NotAuthenticatedError:
            label_cnt.update("")
            self._render_detail(None, "### Please log in to view your order history.")
            return
        except ShopError as e:
            label_cnt.update("")
            self.notify(e.message, severity="error")
            self._render_detail(None, "### Failed to load your orders.")
            return

        # ids carry a millisecond timestamp, so they sort chronologically
        orders: List[Order] = sorted(orders, key=lambda o: o.id, reverse=True)
        for o in orders:
            self._orders[o.id] = o
            table.add_row(
                o.id,
                o.date,
                o.item_summary,
                format_money(o.total),
                o.status,
                key=o.id,
            )
        label_cnt.update(f" {len(orders)} order(s)")

        if orders:
            table.move_cursor(row=0)
            self._render_detail(orders[0])
        else:
            self._render_detail(None, "### You have not placed any orders yet.")

    def _render_detail(self, order: Optional[Order], empty_md: str = "") -> None:
        viewer = self.query_one("#md-order-detail", MarkdownViewer)
        if not order:
            viewer.document.update(empty_md or "### Select an order to view its details.")
            return

        header = (
            f"### Order #{order.id}\n"
            f"Date: {order.date}  \n"
            f"Status: {order.status}\n\n"
        )
        rows = [
            [i.name, i.quantity, format_money(i.price), format_money(i.price * i.quantity)]
            for i in order.items
        ]
        table_md = generate_markdown_table(
            ["Product", "Qty", "Unit Price", "Line Total"], rows, ["l", "r", "r", "r"]
        )
        footer = f"\n\n**Grand Total:** {format_money(order.total)}"
        viewer.document.update(header + table_md + footer)
