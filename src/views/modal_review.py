from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Select

from db.models import Product
from utils.errors import ShopError

RATING_OPTIONS = [("Select a rating", 0)] + [
    (f"{'★' * n} ({n})", n) for n in range(5, 0, -1)
]


class ReviewModal(ModalScreen[bool]):
    """
    Rating plus comment for one product.
    Returns True once the review has been saved.
    """

    def __init__(self, product: Product) -> None:
        super().__init__()
        self._prod = product

    def compose(self) -> ComposeResult:
        with Vertical(id="div-review"):
            yield Label(f"Review: {self._prod.name}", id="label-review-title", markup=False)
            yield Label("Rating")
            yield Select(RATING_OPTIONS, value=0, allow_blank=False, id="select-rating")
            yield Label("Comment")
            yield Input(placeholder="What did you think?", id="input-review-comment")
            with Horizontal(id="div-review-btns"):
                yield Button("Cancel", id="btn-cancel")
                yield Button("Submit Review", id="btn-submit", variant="primary")

    def on_mount(self):
        self.query_one("#select-rating").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.dismiss(False)

    @on(Input.Submitted, "#input-review-comment")
    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self) -> None:
        rating = self.query_one("#select-rating", Select).value
        comment = self.query_one("#input-review-comment", Input).value
        try:
            await self.app.state.reviews.submit_review(
                self._prod.id,
                self.app.state.identity,
                rating if isinstance(rating, int) else None,
                comment,
            )
        except ShopError as e:
            self.notify(e.message, severity="error")
            return

        self.notify("Review submitted successfully!")
        self.dismiss(True)
