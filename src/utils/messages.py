from typing import Optional

from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class IdentityChangedMessage(Message):
    """
    Fired when the session identity changes: login, logout, or a change made
    by another app instance sharing the same storage.
    Screens refresh their sidebar and any per-user content.
    """

    bubble = True

    def __init__(self, identity: Optional[str]) -> None:
        super().__init__()
        self.identity = identity


class CartChangedMessage(Message):
    """
    Fired after any cart mutation, so the cart screen and the sidebar badge refresh.
    """

    bubble = True


class InboxChangedMessage(Message):
    """
    Fired when notifications are added, read or cleared.
    """

    bubble = True


class ModeSwitchedMessage(Message):
    """
    fired whenever switch_mode is called
    must be fired from app level
    """

    bubble = True

    def __init__(self, old_mode: str, new_mode: str) -> None:
        super().__init__()
        self.old_mode = old_mode
        self.new_mode = new_mode
