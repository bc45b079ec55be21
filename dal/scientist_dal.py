"""Async Data Access Layer for the SCIENTIST table.

Provides ScientistDAL with async CRUD operations over the connection owned by
`utils.database_init.DatabaseSession`.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence

from models.scientist_record import ScientistRecord
from utils.database_init import DatabaseSession


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class ScientistDAL:
    """Data access layer for SCIENTIST records.

    The constructor accepts a `DatabaseSession` (or any object exposing an
    async `connection()` context manager that yields an `aiosqlite.Connection`).
    """

    _COLUMNS = (
        "id",
        "name",
        "subject",
        "title",
        "description",
        "achievements",
        "birth_year",
        "death_year",
        "color",
        "image",
        "created_at",
        "updated_at",
    )
    _UPDATABLE = frozenset(_COLUMNS[1:10])
    _COLUMN_LIST = ", ".join(_COLUMNS)

    def __init__(self, session: DatabaseSession) -> None:
        self._db = session

    async def create_scientist(self, record: ScientistRecord) -> ScientistRecord:
        """Insert a new SCIENTIST row and return the stored record.

        Args:
            record: ScientistRecord with `id=None`; `id` and timestamps are assigned here.

        Returns:
            The record as stored, including its new id and timestamps.
        """
        now = _utcnow()
        stored = ScientistRecord(
            id=uuid.uuid4().hex,
            name=record.name,
            subject=record.subject,
            title=record.title,
            description=record.description,
            achievements=record.achievements,
            birth_year=record.birth_year,
            death_year=record.death_year,
            color=record.color,
            image=record.image,
            created_at=record.created_at or now,
            updated_at=now,
        )
        placeholders = ", ".join("?" for _ in self._COLUMNS)

        async with self._db.connection() as conn:
            await conn.execute(
                f"INSERT INTO SCIENTIST ({self._COLUMN_LIST}) VALUES ({placeholders})",
                self._record_to_row(stored),
            )
            await conn.commit()
        return stored

    async def get_scientist_by_id(self, scientist_id: str) -> Optional[ScientistRecord]:
        """Return the ScientistRecord for `scientist_id`, or None if not found."""
        async with self._db.connection() as conn:
            cur = await conn.execute(
                f"SELECT {self._COLUMN_LIST} FROM SCIENTIST WHERE id = ?",
                (scientist_id,),
            )
            row = await cur.fetchone()
            return self._row_to_record(row) if row else None

    async def list_scientists(self) -> List[ScientistRecord]:
        """List every SCIENTIST row, most recently created first."""
        async with self._db.connection() as conn:
            cur = await conn.execute(
                f"SELECT {self._COLUMN_LIST} FROM SCIENTIST ORDER BY created_at DESC, rowid DESC"
            )
            rows = await cur.fetchall()
            return [self._row_to_record(r) for r in rows]

    async def update_scientist(self, scientist_id: str, **changes: Any) -> bool:
        """Update columns of a SCIENTIST row. Returns True if a row was changed.

        Only keyword arguments whose value is not None are written.
        `updated_at` is refreshed whenever at least one column changes.
        """
        unknown = set(changes) - self._UPDATABLE
        if unknown:
            raise ValueError(f"Unknown or immutable columns: {', '.join(sorted(unknown))}")

        updates = {col: val for col, val in changes.items() if val is not None}
        if not updates:
            return False

        updates["updated_at"] = _utcnow()
        fields = [f"{col} = ?" for col in updates]
        params = [*updates.values(), scientist_id]
        sql = f"UPDATE SCIENTIST SET {', '.join(fields)} WHERE id = ?"

        async with self._db.connection() as conn:
            cur = await conn.execute(sql, tuple(params))
            await conn.commit()
            return cur.rowcount > 0

    async def delete_scientist(self, scientist_id: str) -> bool:
        """Delete a SCIENTIST row by id. Returns True if a row was deleted."""
        async with self._db.connection() as conn:
            cur = await conn.execute("DELETE FROM SCIENTIST WHERE id = ?", (scientist_id,))
            await conn.commit()
            return cur.rowcount > 0

    @staticmethod
    def _record_to_row(record: ScientistRecord) -> tuple:
        return (
            record.id,
            record.name,
            record.subject,
            record.title,
            record.description,
            record.achievements,
            record.birth_year,
            record.death_year,
            record.color,
            record.image,
            record.created_at,
            record.updated_at,
        )

    @staticmethod
    def _row_to_record(row: Sequence[Any]) -> ScientistRecord:
        """Convert a DB row tuple into a ScientistRecord."""
        return ScientistRecord(
            id=row[0],
            name=row[1],
            subject=row[2],
            title=row[3],
            description=row[4],
            achievements=row[5],
            birth_year=row[6],
            death_year=row[7],
            color=row[8],
            image=row[9],
            created_at=row[10],
            updated_at=row[11],
        )
