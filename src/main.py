import os
from typing import Optional

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from utils.logger import LOG_FILE_ENV, close_log_files, get_logger, log_to_file
from utils.messages import IdentityChangedMessage, ModeSwitchedMessage, QuitRequestedMessage
from utils.state import AppState
from views.base_screen import BaseScreen
from views.scr_account import AccountScreen
from views.scr_cart import CartScreen
from views.scr_past_orders import OrderHistoryScreen
from views.scr_shop import ShopScreen

_logger = get_logger(__name__)

SYNC_INTERVAL = float(os.getenv("SHOPVISTA_SYNC_INTERVAL", "2.0"))


class ShopVistaApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "shop": ShopScreen,
        "cart": CartScreen,
        "orders": OrderHistoryScreen,
        "account": AccountScreen,
    }

    SHOP_MODES = {
        "shop": "Shop",
        "cart": "Cart",
        "orders": "Order History",
        "account": "My Account",
    }

    CSS_PATH = [
        "views/styles/index.tcss",
        "views/styles/login.tcss",
        "views/styles/shop.tcss",
        "views/styles/cart.tcss",
        "views/styles/orders.tcss",
        "views/styles/account.tcss",
    ]

    state: AppState

    def __init__(self, state: Optional[AppState] = None):
        super().__init__()
        self.state = state or AppState()
        self._unsubscribe = None

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.main_flow()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    def handle_identity_change(self, identity: Optional[str]) -> None:
        # screens in other modes catch up on ScreenResume
        for screen in self.screen_stack:
            if isinstance(screen, BaseScreen):
                screen.post_message(IdentityChangedMessage(identity))

    async def sync_session(self) -> None:
        await self.state.session.sync()

    @on(ModeSwitchedMessage)
    def handle_mode_switched(self, event: ModeSwitchedMessage) -> None:
        _logger.debug(f"Mode switched: {event.old_mode} -> {event.new_mode}")

    @on(QuitRequestedMessage)
    @work
    async def handle_quit(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
        await self.state.close()
        self.exit()

    @work
    async def main_flow(self):
        await self.state.load()
        self._unsubscribe = self.state.session.subscribe(self.handle_identity_change)
        self.set_interval(SYNC_INTERVAL, self.sync_session)
        self.post_message(ModeSwitchedMessage(self.current_mode, "shop"))
        await self.switch_mode("shop")


def main():
    log_to_file(os.getenv(LOG_FILE_ENV, "logs/shopvista.log"))
    try:
        ShopVistaApp().run()
    finally:
        close_log_files()


if __name__ == "__main__":
    main()
