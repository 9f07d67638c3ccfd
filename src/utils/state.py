from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from core.cart import CartEngine
from core.identity import AccountService, IdentitySession
from core.inbox import NotificationInbox
from core.orders import OrderLedger
from core.reviews import ReviewService
from db.remote import ProductStore
from db.storage import LocalStorage
from utils.logger import get_logger

_logger = get_logger(__name__)


@dataclass
class AppState:
    """
    Application state shared by every screen through `app.state`.

    Built once by the app, loaded from local storage at startup with load();
    each service writes its own changes back as they happen.

    Fields:
      - storage: durable key/value store (cart, inbox, session, accounts)
      - store: remote products and orders
      - inbox / session / cart / ledger / accounts / reviews: the services
    """

    storage: LocalStorage = field(default_factory=LocalStorage)
    store: ProductStore = field(default_factory=ProductStore)

    inbox: NotificationInbox = field(init=False)
    session: IdentitySession = field(init=False)
    cart: CartEngine = field(init=False)
    ledger: OrderLedger = field(init=False)
    accounts: AccountService = field(init=False)
    reviews: ReviewService = field(init=False)

    def __post_init__(self):
        self.inbox = NotificationInbox(self.storage)
        self.session = IdentitySession(self.storage)
        self.cart = CartEngine(self.storage, inbox=self.inbox)
        self.ledger = OrderLedger(self.store, self.inbox)
        self.accounts = AccountService(self.storage, self.session, self.inbox)
        self.reviews = ReviewService(self.store, self.inbox)

    @property
    def identity(self) -> Optional[str]:
        return self.session.identity

    async def load(self) -> None:
        await self.inbox.load()
        await self.session.load()
        await self.cart.load()
        _logger.info(
            f"State loaded: user={self.identity}, "
            f"{self.cart.item_count()} item(s) in cart, "
            f"{self.inbox.unread_count()} unread notification(s)"
        )

    async def close(self) -> None:
        await self.store.close()
