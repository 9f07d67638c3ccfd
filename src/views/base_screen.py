from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import ScreenResume
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from utils.messages import (
    CartChangedMessage,
    IdentityChangedMessage,
    InboxChangedMessage,
    ModeSwitchedMessage,
)
from utils.pure import format_money, generate_markdown_table
from views.modal_dialog import DialogModal, QuitDialogModal
from views.modal_login import LoginModal


class Sidebar(Container):
    def compose(self) -> ComposeResult:
        yield Label("Account", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        yield Button("Log in", id="btn-login-logout", variant="primary")
        yield Label("Menu", id="label-info-2")
        yield ListView(
            *[
                ListItem(Label(v), id="list-menu-item-" + k)
                for k, v in self.app.SHOP_MODES.items()
            ],
            id="list-menu",
        )

    async def on_mount(self):
        await self.refresh_info()
        self.highlight_item(self.app.current_mode)

    async def refresh_info(self) -> None:
        state = self.app.state
        table_rows = [
            ["User", state.identity or "Guest"],
            ["Cart", f"{state.cart.item_count()} item(s)"],
            ["Cart Total", format_money(state.cart.total())],
            ["Inbox", f"{state.inbox.unread_count()} unread"],
        ]
        md_table_str = generate_markdown_table(None, table_rows, ["l", "l"])
        await self.query_one("#md-userinfo", Markdown).update(md_table_str)

        btn = self.query_one("#btn-login-logout", Button)
        if state.identity:
            btn.label = "Log out"
            btn.variant = "error"
        else:
            btn.label = "Log in"
            btn.variant = "primary"

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        self.highlight_item(self.app.current_mode)
        if self.app.current_mode != selected_mode:
            self.post_message(ModeSwitchedMessage(self.app.current_mode, selected_mode))
            await self.app.switch_mode(selected_mode)

    @on(Button.Pressed, "#btn-login-logout")
    @work(exclusive=True)
    async def handle_login_logout(self):
        if not self.app.state.identity:
            await self.app.push_screen_wait(LoginModal())
            return

        if not await self.app.push_screen_wait(
            DialogModal(
                "Are you sure you want to log out?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        ):
            return

        await self.app.state.accounts.logout()
        self.notify("You have been logged out.")

    def highlight_item(self, mode_str: str):
        list_menu = self.query_one("#list-menu")
        for item in list_menu.children:
            item.highlighted = item.id == "list-menu-item-" + str(mode_str)


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit App", show=True),
    ]

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(self, header_sub_title: str = "ShopVista") -> None:
        """
        set the header titles, the sub title comes from the app's mode names
        """
        self.app.title = "ShopVista"
        self.sub_title = header_sub_title
        for k, v in self.app.MODES.items():
            if isinstance(self, v) and k in self.app.SHOP_MODES:
                self.sub_title = self.app.SHOP_MODES[k]

    def compose(self) -> ComposeResult:
        yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    @on(ScreenResume)
    @on(CartChangedMessage)
    @on(InboxChangedMessage)
    @on(IdentityChangedMessage)
    async def handle_sidebar_refresh(self, event) -> None:
        if isinstance(event, IdentityChangedMessage):
            event.stop()
        await self.query_one(Sidebar).refresh_info()

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
