from __future__ import annotations

from datetime import date
from typing import Optional

from core.inbox import NotificationInbox
from db.models import Product, ProductId, Review
from db.remote import ProductStore
from utils.errors import NotAuthenticatedError, ValidationError
from utils.logger import get_logger

_logger = get_logger(__name__)


class ReviewService:
    def __init__(self, store: ProductStore, inbox: Optional[NotificationInbox] = None):
        self._store = store
        self._inbox = inbox

    async def submit_review(
        self,
        product_id: ProductId,
        identity: Optional[str],
        rating: Optional[int],
        comment: str,
        today: Optional[date] = None,
    ) -> Product:
        """
        Add or replace `identity`'s review on a product and write the whole
        product back.

        This is a read-modify-write with no locking: two reviewers saving the
        same product at once can lose one of the updates.
        """
        if not identity:
            raise NotAuthenticatedError("Please log in to submit a review.")
        if not rating or not 1 <= rating <= 5:
            raise ValidationError("Please select a rating between 1 and 5.")
        comment = (comment or "").strip()
        if not comment:
            raise ValidationError("Please write a comment for your review.")

        product = await self._store.get_product(product_id)
        review = Review(
            user_id=identity,
            rating=int(rating),
            comment=comment,
            date=(today or date.today()).isoformat(),
        )
        updated = await self._store.replace_product(product.with_review(review))
        _logger.info(f"{identity} reviewed product {product_id} ({rating}/5)")

        if self._inbox is not None:
            await self._inbox.add(f"Thanks for reviewing {updated.name}!")
        return updated
