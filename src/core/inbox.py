from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import List, Optional

from db.models import Notification
from db.storage import NOTIFICATIONS_KEY, LocalStorage
from utils.ids import unique_millis
from utils.logger import get_logger
from utils.pure import format_display_date, format_display_time

_logger = get_logger(__name__)


class NotificationInbox:
    """
    User-facing messages, newest first.
    Every change is written through to local storage before the call returns.
    """

    def __init__(self, storage: LocalStorage):
        self._storage = storage
        self._notifications: List[Notification] = []

    async def load(self) -> None:
        raw = await self._storage.read_json(NOTIFICATIONS_KEY, [])
        try:
            self._notifications = [Notification.from_dict(d) for d in raw]
        except (TypeError, KeyError, ValueError, AttributeError):
            _logger.warning("Stored notifications are malformed, starting empty.")
            self._notifications = []

    async def _save(self) -> None:
        await self._storage.write_json(
            NOTIFICATIONS_KEY, [n.to_dict() for n in self._notifications]
        )

    @property
    def notifications(self) -> List[Notification]:
        return list(self._notifications)

    async def add(self, message: str, when: Optional[datetime] = None) -> Notification:
        when = when or datetime.now()
        notification = Notification(
            id=unique_millis(),
            message=message,
            date=format_display_date(when),
            time=format_display_time(when),
            read=False,
        )
        self._notifications.insert(0, notification)
        await self._save()
        _logger.debug(f"Notification {notification.id}: {message}")
        return notification

    async def mark_read(self, notification_id: int) -> bool:
        """Returns True if a notification with this id exists."""
        for i, n in enumerate(self._notifications):
            if n.id == notification_id:
                if not n.read:
                    self._notifications[i] = replace(n, read=True)
                    await self._save()
                return True
        return False

    async def clear_all(self) -> None:
        self._notifications = []
        await self._save()

    def unread_count(self) -> int:
        return sum(1 for n in self._notifications if not n.read)
