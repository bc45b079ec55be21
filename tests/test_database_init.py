import asyncio

import pytest

from utils.database_init import ConnectionSupervisor, DatabaseSession
from utils.errors import StoreError


class FlakySession(DatabaseSession):
    """Session whose connects and pings can be made to fail on demand."""

    def __init__(self, db_path, connect_failures=0):
        super().__init__(db_path)
        self.connect_failures = connect_failures
        self.ping_failures = 0
        self.connect_attempts = 0

    async def connect(self):
        self.connect_attempts += 1
        if self.connect_attempts <= self.connect_failures:
            raise OSError("database unavailable")
        await super().connect()

    async def ping(self):
        if self.ping_failures:
            self.ping_failures -= 1
            raise OSError("link dropped")
        await super().ping()


async def _eventually(predicate, timeout=2.0):
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


@pytest.mark.asyncio
async def test_connect_creates_schema(tmp_path):
    session = DatabaseSession(tmp_path / "nested" / "app.db")
    await session.connect()
    try:
        async with session.connection() as conn:
            cur = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
            tables = {row[0] for row in await cur.fetchall()}
        assert "SCIENTIST" in tables
    finally:
        await session.close()
    assert not session.is_connected


@pytest.mark.asyncio
async def test_connection_requires_connect(tmp_path):
    session = DatabaseSession(tmp_path / "app.db")
    with pytest.raises(StoreError):
        async with session.connection():
            pass


@pytest.mark.asyncio
async def test_sql_errors_become_store_errors(tmp_path):
    session = DatabaseSession(tmp_path / "app.db")
    await session.connect()
    try:
        with pytest.raises(StoreError):
            async with session.connection() as conn:
                await conn.execute("SELECT * FROM NO_SUCH_TABLE")
    finally:
        await session.close()


@pytest.mark.asyncio
async def test_supervisor_retries_until_connected(tmp_path):
    session = FlakySession(tmp_path / "app.db", connect_failures=2)
    supervisor = ConnectionSupervisor(session, retry_delay=0.01, heartbeat_interval=60)
    supervisor.start()
    try:
        await asyncio.wait_for(supervisor.wait_until_connected(), timeout=2)
        assert session.connect_attempts == 3
        assert session.is_connected
    finally:
        await supervisor.stop()
    assert not session.is_connected


@pytest.mark.asyncio
async def test_supervisor_reconnects_after_drop(tmp_path):
    session = FlakySession(tmp_path / "app.db")
    supervisor = ConnectionSupervisor(session, retry_delay=0.01, heartbeat_interval=0.01)
    supervisor.start()
    try:
        await asyncio.wait_for(supervisor.wait_until_connected(), timeout=2)
        assert session.connect_attempts == 1

        session.ping_failures = 1
        await _eventually(lambda: session.connect_attempts == 2 and session.is_connected)
    finally:
        await supervisor.stop()
