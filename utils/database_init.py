import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import aiosqlite

from utils.errors import StoreError

LOGGER = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS SCIENTIST (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    subject TEXT NOT NULL,
    title TEXT,
    description TEXT,
    achievements TEXT,
    birth_year INTEGER,
    death_year INTEGER,
    color TEXT,
    image TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


class DatabaseSession:
    """
    Own the process-wide `aiosqlite` connection for the scientist store.

    - The database file lives at `db_path`; its directory is created on demand.
    - `connect()` opens the connection and applies the schema. It is a no-op
      while a connection is already open.
    - `reconnect()` drops the current connection (if any) and connects again.
    - `connection()` yields the open connection and converts database errors
      into `StoreError`. It never connects by itself; retrying is the job of
      `ConnectionSupervisor`.
    """

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path).expanduser()
        self._conn: Optional[aiosqlite.Connection] = None

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    async def connect(self) -> None:
        """Open the connection and make sure the SCIENTIST table exists."""
        if self._conn is not None:
            return

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(f"Failed to create database directory {self.db_path.parent}") from exc

        conn = await aiosqlite.connect(self.db_path)
        try:
            await conn.execute("PRAGMA journal_mode=WAL;")
            await conn.execute(SCHEMA)
            await conn.commit()
        except Exception:
            await conn.close()
            raise
        self._conn = conn

    async def close(self) -> None:
        """Close the underlying connection if open."""
        conn, self._conn = self._conn, None
        if conn is not None:
            try:
                await conn.close()
            except aiosqlite.Error as exc:
                LOGGER.warning("Error while closing database connection: %s", exc)

    async def reconnect(self) -> None:
        await self.close()
        await self.connect()

    async def ping(self) -> None:
        """Run a trivial query; raises if the link is unusable."""
        if self._conn is None:
            raise StoreError("Database connection is not open")
        async with self._conn.execute("SELECT 1") as cur:
            await cur.fetchone()

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Async context manager yielding the open `aiosqlite.Connection`.

        Raises `StoreError` when disconnected or when a statement fails.
        """
        if self._conn is None:
            raise StoreError("Database connection is not available")
        try:
            yield self._conn
        except aiosqlite.Error as exc:
            raise StoreError(f"Database operation failed: {exc}") from exc


class ConnectionSupervisor:
    """Keep a `DatabaseSession` connected.

    Connects at start, retrying after a fixed `retry_delay` on failure with no
    limit and no backoff growth. Once connected it pings every
    `heartbeat_interval` seconds; when a ping fails the link is treated as
    dropped and re-established after the same fixed delay.

    Args:
        session: The session to supervise.
        retry_delay: Seconds to wait before every (re)connect attempt after a failure.
        heartbeat_interval: Seconds between liveness pings.
    """

    def __init__(self, session: DatabaseSession, retry_delay: float = 5.0, heartbeat_interval: float = 2.0) -> None:
        self.session = session
        self.retry_delay = retry_delay
        self.heartbeat_interval = heartbeat_interval
        self._connected = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    async def connect_with_retry(self) -> None:
        """Connect, retrying forever at a fixed interval."""
        while True:
            LOGGER.info("Connecting to database at %s", self.session.db_path)
            try:
                await self.session.reconnect()
            except Exception as exc:  # pylint: disable=broad-exception-caught
                LOGGER.error("Database connection failed: %s", exc)
                LOGGER.info("Retrying database connection in %.1f seconds", self.retry_delay)
                await asyncio.sleep(self.retry_delay)
                continue
            LOGGER.info("Database connection established")
            self._connected.set()
            return

    async def run(self) -> None:
        """Supervision loop; runs until cancelled."""
        await self.connect_with_retry()
        while True:
            await asyncio.sleep(self.heartbeat_interval)
            try:
                await self.session.ping()
            except Exception as exc:  # pylint: disable=broad-exception-caught
                LOGGER.error("Database connection lost: %s", exc)
                self._connected.clear()
                await self.session.close()
                LOGGER.info("Reconnecting to database in %.1f seconds", self.retry_delay)
                await asyncio.sleep(self.retry_delay)
                await self.connect_with_retry()

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name="database-supervisor")
        return self._task

    async def wait_until_connected(self) -> None:
        await self._connected.wait()

    async def stop(self) -> None:
        """Cancel the supervision task and close the session."""
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._connected.clear()
        await self.session.close()
