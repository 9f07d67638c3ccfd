from __future__ import annotations

import json
from typing import Any, List, Optional

from db.database import connect
from utils.logger import get_logger

_logger = get_logger(__name__)

# storage keys
CART_KEY = "e-commerce-cart"
NOTIFICATIONS_KEY = "notifications"
SESSION_KEY = "currentUserEmail"
USERS_KEY = "users"
PROFILES_KEY = "userProfiles"


class LocalStorage:
    """
    Durable string key/value store, the terminal counterpart of a browser's
    localStorage. Values are JSON strings; every call is its own transaction.
    """

    async def get_item(self, key: str) -> Optional[str]:
        async with connect() as conn:
            cur = await conn.execute(
                "SELECT value FROM local_storage WHERE key = ?;", (key,)
            )
            row = await cur.fetchone()
            await cur.close()
        return row[0] if row else None

    async def set_item(self, key: str, value: str) -> None:
        async with connect() as conn:
            await conn.execute(
                """
                INSERT INTO local_storage(key, value, updated_at)
                VALUES (?, ?, datetime('now'))
                ON CONFLICT(key) DO UPDATE
                    SET value = excluded.value, updated_at = excluded.updated_at;
                """,
                (key, value),
            )
            await conn.commit()

    async def remove_item(self, key: str) -> None:
        async with connect() as conn:
            await conn.execute("DELETE FROM local_storage WHERE key = ?;", (key,))
            await conn.commit()

    async def keys(self) -> List[str]:
        async with connect() as conn:
            cur = await conn.execute("SELECT key FROM local_storage ORDER BY key;")
            rows = await cur.fetchall()
            await cur.close()
        return [row[0] for row in rows]

    async def read_json(self, key: str, default: Any = None) -> Any:
        """
        Decode the value stored under `key`.
        Missing or corrupt values both come back as `default`.
        """
        raw = await self.get_item(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            _logger.warning(f"Ignoring corrupt value stored under '{key}'.")
            return default

    async def write_json(self, key: str, value: Any) -> None:
        await self.set_item(key, json.dumps(value))
