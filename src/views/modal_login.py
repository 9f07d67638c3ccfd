from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, TabbedContent, TabPane

from utils.errors import ShopError


class LoginModal(ModalScreen[bool]):
    """
    Login and sign up tabs.
    Dismisses with True once the user is logged in, False if they back out.
    """

    def compose(self) -> ComposeResult:
        with TabbedContent(id="super-tab-login"):
            with TabPane("Login", id="tab-login"):
                with Vertical(id="div-login"):
                    yield Label("Email address")
                    yield Input(placeholder="name@example.com", id="input-login-email")
                    yield Label("Password")
                    yield Input(
                        placeholder="Your password", password=True, id="input-login-pwd"
                    )
                    with Horizontal(id="div-login-btns"):
                        yield Button("Cancel", id="btn-cancel")
                        yield Button("Login", id="btn-login", variant="success")

            with TabPane("Sign up", id="tab-signup"):
                with Vertical(id="div-reg"):
                    yield Label("Email address")
                    yield Input(placeholder="name@example.com", id="input-reg-email")
                    yield Label("Password")
                    yield Input(
                        placeholder="Min 6 characters", password=True, id="input-reg-pwd"
                    )
                    yield Label("Confirm Password")
                    yield Input(
                        placeholder="Re-enter password",
                        password=True,
                        id="input-reg-confirm",
                    )
                    with Horizontal(id="div-reg-btns"):
                        yield Button("Register", id="btn-reg", variant="primary")

    def on_mount(self):
        self.query_one("#input-login-email").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    @on(Input.Submitted, "#input-login-pwd")
    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        email = self.query_one("#input-login-email", Input).value.strip()
        pwd = self.query_one("#input-login-pwd", Input).value

        try:
            await self.app.state.accounts.login(email, pwd)
        except ShopError as e:
            self.notify(e.message, severity="error")
            input_login_pwd = self.query_one("#input-login-pwd", Input)
            input_login_pwd.value = ""
            input_login_pwd.focus()
            input_login_pwd.add_class("-invalid")
            return

        self.notify(f"Welcome back, {email}!")
        self.dismiss(True)

    @on(Input.Submitted, "#input-reg-confirm")
    @on(Button.Pressed, "#btn-reg")
    @work(exclusive=True)
    async def handle_registration_submit(self) -> None:
        email = self.query_one("#input-reg-email", Input).value.strip()
        pwd = self.query_one("#input-reg-pwd", Input).value
        confirm = self.query_one("#input-reg-confirm", Input).value

        try:
            await self.app.state.accounts.register(email, pwd, confirm)
        except ShopError as e:
            self.notify(e.message, severity="error")
            return

        for input_id in ("#input-reg-email", "#input-reg-pwd", "#input-reg-confirm"):
            self.query_one(input_id, Input).value = ""

        self.query_one(TabbedContent).active = "tab-login"
        self.query_one("#input-login-email", Input).value = email
        self.query_one("#input-login-pwd", Input).focus()

        self.notify("Registration successful! Please log in.")

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.dismiss(False)
