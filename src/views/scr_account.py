from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import ScreenResume
from textual.widgets import (
    Button,
    Input,
    Label,
    ListItem,
    ListView,
    TabbedContent,
    TabPane,
)

from db.models import Notification
from utils.errors import ShopError
from utils.messages import IdentityChangedMessage, InboxChangedMessage
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal


class NotificationItem(ListItem):
    def __init__(self, notification: Notification):
        dot = " " if notification.read else "●"
        super().__init__(
            Label(
                f"{dot} {notification.message}",
                classes="label-notif-message",
                markup=False,
            ),
            Label(
                f"  {notification.date} {notification.time}",
                classes="label-notif-date",
            ),
            id=f"notif-{notification.id}",
            classes="-read" if notification.read else "-unread",
        )
        self.notification = notification


class AccountScreen(BaseScreen):
    """
    Inbox of notifications, plus the profile and password forms of the
    logged in user.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with TabbedContent(id="super-tab-account"):
            with TabPane("Inbox", id="tab-inbox"):
                with Vertical():
                    with Horizontal(id="hort-inbox-bar"):
                        yield Label("", id="label-inbox-cnt")
                        yield Button("Clear All", id="btn-clear-inbox", variant="error")
                    yield ListView(id="list-inbox")

            with TabPane("Profile", id="tab-profile"):
                with VerticalScroll(id="div-profile"):
                    yield Label("", id="label-profile-status", markup=False)
                    yield Label("Email")
                    yield Input(id="input-profile-email", disabled=True)
                    yield Label("Name")
                    yield Input(placeholder="Full name", id="input-profile-name")
                    yield Label("Address")
                    yield Input(placeholder="Shipping address", id="input-profile-address")
                    yield Label("Phone")
                    yield Input(placeholder="Phone number", id="input-profile-phone")
                    yield Button("Save Profile", id="btn-save-profile", variant="primary")

                    yield Label("Change Password", id="label-change-pwd")
                    yield Input(
                        placeholder="Current password", password=True, id="input-pwd-current"
                    )
                    yield Input(placeholder="New password", password=True, id="input-pwd-new")
                    yield Input(
                        placeholder="Confirm new password",
                        password=True,
                        id="input-pwd-confirm",
                    )
                    yield Button("Change Password", id="btn-change-pwd", variant="warning")

    def on_mount(self):
        self.refresh_account()

    @on(ScreenResume)
    @on(IdentityChangedMessage)
    @on(InboxChangedMessage)
    def handle_refresh(self) -> None:
        self.refresh_account()

    @work(exclusive=True, group="account")
    async def refresh_account(self) -> None:
        await self._render_inbox()
        await self._render_profile()

    async def _render_inbox(self) -> None:
        inbox = self.app.state.inbox
        notifications = inbox.notifications

        list_inbox = self.query_one("#list-inbox", ListView)
        await list_inbox.clear()
        if notifications:
            await list_inbox.extend([NotificationItem(n) for n in notifications])
            self.query_one("#label-inbox-cnt", Label).update(
                f"{len(notifications)} notification(s), {inbox.unread_count()} unread"
            )
        else:
            self.query_one("#label-inbox-cnt", Label).update("No notifications")
        self.query_one("#btn-clear-inbox").disabled = not notifications

    async def _render_profile(self) -> None:
        identity = self.app.state.identity
        logged_in = identity is not None
        for widget in self.query("#div-profile Input, #div-profile Button"):
            if widget.id != "input-profile-email":
                widget.disabled = not logged_in

        status = self.query_one("#label-profile-status", Label)
        if not logged_in:
            status.update("Please log in to manage your profile.")
            for input_id in ("email", "name", "address", "phone"):
                self.query_one(f"#input-profile-{input_id}", Input).value = ""
            return

        status.update("")
        profile = await self.app.state.accounts.get_profile()
        self.query_one("#input-profile-email", Input).value = identity
        self.query_one("#input-profile-name", Input).value = profile.name
        self.query_one("#input-profile-address", Input).value = profile.address
        self.query_one("#input-profile-phone", Input).value = profile.phone

    @on(ListView.Selected, "#list-inbox")
    async def handle_notification_selected(self, event: ListView.Selected) -> None:
        item = event.item
        if not isinstance(item, NotificationItem) or item.notification.read:
            return
        await self.app.state.inbox.mark_read(item.notification.id)
        self.post_message(InboxChangedMessage())

    @on(Button.Pressed, "#btn-clear-inbox")
    @work(exclusive=True, group="inbox")
    async def handle_clear_inbox(self) -> None:
        if not await self.app.push_screen_wait(
            DialogModal(
                "Clear all notifications?",
                primary_text="Clear",
                secondary_text="Cancel",
                tone="error",
            )
        ):
            return
        await self.app.state.inbox.clear_all()
        self.notify("Notifications cleared.")
        self.post_message(InboxChangedMessage())

    @on(Button.Pressed, "#btn-save-profile")
    @work(exclusive=True, group="profile")
    async def handle_save_profile(self) -> None:
        try:
            await self.app.state.accounts.update_profile(
                self.query_one("#input-profile-name", Input).value,
                self.query_one("#input-profile-address", Input).value,
                self.query_one("#input-profile-phone", Input).value,
            )
        except ShopError as e:
            self.notify(e.message, severity="error")
            return
        self.notify("Profile updated successfully!")

    @on(Input.Submitted, "#input-pwd-confirm")
    @on(Button.Pressed, "#btn-change-pwd")
    @work(exclusive=True, group="profile")
    async def handle_change_password(self) -> None:
        input_ids = ("#input-pwd-current", "#input-pwd-new", "#input-pwd-confirm")
        current, new, confirm = (self.query_one(i, Input).value for i in input_ids)
        try:
            await self.app.state.accounts.change_password(current, new, confirm)
        except ShopError as e:
            self.notify(e.message, severity="error")
            return

        for input_id in input_ids:
            self.query_one(input_id, Input).value = ""
        self.notify("Password changed successfully!")
        self.post_message(InboxChangedMessage())
