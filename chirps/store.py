"""
chirps/store.py -- SQLAlchemy-backed persistence layer for chirps.

Uses SQLAlchemy Core (not ORM) so the dataclass in chirps/models.py remains
the authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change, not a rewrite.

Pattern: Repository + Data Mapper. ChirpStore is the repository; _row_to_chirp
is the mapper. Route handlers never touch SQL directly.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = ChirpStore("sqlite:///chirpy.db")
    chirp_id = store.create_chirp(Chirp(body="hello", user_id=uid))
    chirps = store.list_chirps(author_id=uid, descending=True)
    store.delete_chirp(chirp_id)
    store.close()
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine

from chirps.models import Chirp
from core.clock import Clock, SystemClock

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_chirps = Table(
    "chirps",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("body", Text, nullable=False),
    Column("user_id", String(36), nullable=False, index=True),
    Column("created_at", String(32), nullable=False, index=True),
    Column("updated_at", String(32), nullable=False),
)


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ChirpStore:
    """Repository for Chirp entities.

    created_at comes from the injected clock so ordering is deterministic
    under test.
    """

    def __init__(self, db_url: str, clock: Optional[Clock] = None) -> None:
        self.clock = clock or SystemClock()
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    def _now_iso(self) -> str:
        return self.clock.now().astimezone(timezone.utc).isoformat()

    def create_chirp(self, chirp: Chirp) -> Chirp:
        """Insert a chirp and return it with id and timestamps filled in."""
        chirp_id = uuid.uuid4()
        now = self._now_iso()
        with self.engine.connect() as conn:
            conn.execute(
                _chirps.insert().values(
                    id=str(chirp_id),
                    body=chirp.body,
                    user_id=str(chirp.user_id),
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
        stamped = datetime.fromisoformat(now)
        return Chirp(body=chirp.body, user_id=chirp.user_id, id=chirp_id, created_at=stamped, updated_at=stamped)

    def get_chirp(self, chirp_id: UUID) -> Optional[Chirp]:
        """Return a single chirp by id, or None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_chirps.select().where(_chirps.c.id == str(chirp_id))).fetchone()
        return _row_to_chirp(row) if row is not None else None

    def list_chirps(self, author_id: Optional[UUID] = None, descending: bool = False) -> list[Chirp]:
        """Return chirps ordered by created_at, optionally for one author only."""
        query = _chirps.select()
        if author_id is not None:
            query = query.where(_chirps.c.user_id == str(author_id))
        order = _chirps.c.created_at.desc() if descending else _chirps.c.created_at.asc()
        with self.engine.connect() as conn:
            rows = conn.execute(query.order_by(order)).fetchall()
        return [_row_to_chirp(r) for r in rows]

    def delete_chirp(self, chirp_id: UUID) -> bool:
        """Delete a chirp. Returns True if a row was removed."""
        with self.engine.connect() as conn:
            result = conn.execute(_chirps.delete().where(_chirps.c.id == str(chirp_id)))
            conn.commit()
        return result.rowcount > 0

    def delete_all(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(_chirps.delete())
            conn.commit()

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_chirp(row) -> Chirp:
    return Chirp(
        id=UUID(row.id),
        body=row.body,
        user_id=UUID(row.user_id),
        created_at=datetime.fromisoformat(row.created_at),
        updated_at=datetime.fromisoformat(row.updated_at),
    )
