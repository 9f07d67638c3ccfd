# sqlite file behind LocalStorage; several app instances may open it at once
import asyncio
import os
import os.path
from contextlib import asynccontextmanager
from sqlite3 import Row

import aiosqlite

from utils.logger import get_logger

_logger = get_logger(__name__)

DB_PATH = os.getenv("SHOPVISTA_DB_PATH", "data/shopvista.sqlite")
SCHEMA_SCRIPT = os.path.join(os.path.dirname(os.path.abspath(__file__)), "local-storage.sql")
# seconds to wait on a lock held by another instance
BUSY_TIMEOUT = 5.0

_initialized = False
_init_lock = asyncio.Lock()


async def _table_exists(conn: aiosqlite.Connection, table_name: str) -> bool:
    cur = await conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?;",
        (table_name,),
    )
    row = await cur.fetchone()
    await cur.close()
    return row is not None


async def _init_db(conn: aiosqlite.Connection) -> None:
    # WAL lets one instance read while another writes
    await conn.execute("PRAGMA journal_mode = WAL;")
    if not await _table_exists(conn, "local_storage"):
        _logger.info(f"Creating local storage at {DB_PATH}")
        with open(SCHEMA_SCRIPT, "r") as f:
            await conn.executescript(f.read())
    await conn.commit()


@asynccontextmanager
async def connect() -> aiosqlite.Connection:
    """Async context manager yielding an aiosqlite connection to the local store.

    The file, its directory and the table are created on first use.
    """
    global _initialized
    db_dir = os.path.dirname(DB_PATH)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    conn = await aiosqlite.connect(DB_PATH, timeout=BUSY_TIMEOUT)
    conn.row_factory = Row
    try:
        if not _initialized:
            async with _init_lock:
                if not _initialized:
                    await _init_db(conn)
                    _initialized = True
        yield conn
    finally:
        await conn.close()
