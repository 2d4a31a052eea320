"""
auth/store.py -- SQLAlchemy Core persistence layer for users and refresh tokens.

Pattern: Repository + Data Mapper (same as chirps/store.py).
UserStore is the repository; _row_to_user / _row_to_refresh_token are the
mappers. Services and routes never touch SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  refresh_tokens.token is the PRIMARY KEY, so inserting a duplicate value
  raises IntegrityError instead of overwriting the existing row.

  mark_refresh_token_revoked() is a single UPDATE with COALESCE, so the first
  revocation timestamp wins and concurrent revokes cannot overwrite it.

Timestamps are stored as ISO 8601 UTC strings and mapped back to aware
datetimes.

Layer rule: no imports from api/, chirps/, or core/.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, func, select
from sqlalchemy.engine import Engine

from auth.models import Credential, RefreshToken, User

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(36), primary_key=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("is_chirpy_red", Integer, nullable=False, server_default="0"),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

_refresh_tokens = Table(
    "refresh_tokens",
    _metadata,
    Column("token", String(64), primary_key=True),  # 32 random bytes, hex
    Column("user_id", String(36), nullable=False, index=True),
    Column("created_at", String(32), nullable=False),
    Column("expires_at", String(32), nullable=False),
    Column("revoked_at", String(32)),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers do not block behind a writer.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _from_iso(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User and RefreshToken entities.

    Usage:
        store = UserStore("sqlite:///chirpy.db")
        user_id = store.create_user(User(email="a@b.c", hashed_password=hasher.hash("pw")))
        cred = store.get_credential_by_email("a@b.c")
        store.close()
    """

    # Columns update_user() may touch. Anything else is a programming error.
    _MUTABLE_USER_FIELDS: set = {"email", "hashed_password", "is_chirpy_red"}

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # User queries
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> UUID:
        """Insert a new user and return its generated UUID.

        Raises sqlalchemy.exc.IntegrityError if the email already exists.
        """
        user_id = user.id or uuid.uuid4()
        now = _now_iso()
        with self.engine.connect() as conn:
            conn.execute(
                _users.insert().values(
                    id=str(user_id),
                    email=user.email,
                    hashed_password=user.hashed_password.decode("utf-8"),
                    is_chirpy_red=1 if user.is_chirpy_red else 0,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
        return user_id

    def get_by_id(self, user_id: UUID) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == str(user_id))).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_credential_by_email(self, email: str) -> Credential | None:
        """Return just (id, password hash) for the login check."""
        with self.engine.connect() as conn:
            row = conn.execute(
                select(_users.c.id, _users.c.hashed_password).where(_users.c.email == email)
            ).fetchone()
        if row is None:
            return None
        return Credential(identity_id=UUID(row.id), password_hash=row.hashed_password.encode("utf-8"))

    def update_user(self, user_id: UUID, **fields) -> bool:
        """Update mutable fields on an existing user and bump updated_at.

        Accepted fields: email, hashed_password (bytes), is_chirpy_red (bool).
        Returns True if a row was updated, False if user_id was not found.
        Raises IntegrityError if a new email collides with another account.
        """
        unknown = set(fields) - self._MUTABLE_USER_FIELDS
        if unknown:
            raise ValueError(f"Unknown user fields: {unknown!r}")
        if "hashed_password" in fields:
            fields["hashed_password"] = fields["hashed_password"].decode("utf-8")
        if "is_chirpy_red" in fields:
            fields["is_chirpy_red"] = 1 if fields["is_chirpy_red"] else 0
        fields["updated_at"] = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(_users.update().where(_users.c.id == str(user_id)).values(**fields))
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Refresh token queries
    # ------------------------------------------------------------------

    def insert_refresh_token(self, record: RefreshToken) -> None:
        """Persist a new refresh token.

        Raises sqlalchemy.exc.IntegrityError on a duplicate token value.
        """
        with self.engine.connect() as conn:
            conn.execute(
                _refresh_tokens.insert().values(
                    token=record.token,
                    user_id=str(record.identity_id),
                    created_at=_to_iso(record.created_at),
                    expires_at=_to_iso(record.expires_at),
                    revoked_at=_to_iso(record.revoked_at),
                )
            )
            conn.commit()

    def get_refresh_token(self, token: str) -> RefreshToken | None:
        with self.engine.connect() as conn:
            row = conn.execute(_refresh_tokens.select().where(_refresh_tokens.c.token == token)).fetchone()
        return _row_to_refresh_token(row) if row is not None else None

    def mark_refresh_token_revoked(self, token: str, revoked_at: datetime) -> bool:
        """Stamp revoked_at unless it is already set.

        Returns True if the token exists (whether or not this call was the one
        that revoked it), False if no such token exists.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _refresh_tokens.update()
                .where(_refresh_tokens.c.token == token)
                .values(revoked_at=func.coalesce(_refresh_tokens.c.revoked_at, _to_iso(revoked_at)))
            )
            conn.commit()
        return result.rowcount > 0

    def list_refresh_tokens(self, user_id: UUID) -> list[RefreshToken]:
        """Return every refresh token ever issued to a user, oldest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _refresh_tokens.select()
                .where(_refresh_tokens.c.user_id == str(user_id))
                .order_by(_refresh_tokens.c.created_at)
            ).fetchall()
        return [_row_to_refresh_token(r) for r in rows]

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def delete_all(self) -> None:
        """Remove every user and refresh token. Used by POST /admin/reset in dev."""
        with self.engine.connect() as conn:
            conn.execute(_refresh_tokens.delete())
            conn.execute(_users.delete())
            conn.commit()

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=UUID(row.id),
        email=row.email,
        hashed_password=row.hashed_password.encode("utf-8"),
        is_chirpy_red=bool(row.is_chirpy_red),
        created_at=_from_iso(row.created_at),
        updated_at=_from_iso(row.updated_at),
    )


def _row_to_refresh_token(row) -> RefreshToken:
    return RefreshToken(
        token=row.token,
        identity_id=UUID(row.user_id),
        created_at=_from_iso(row.created_at),
        expires_at=_from_iso(row.expires_at),
        revoked_at=_from_iso(row.revoked_at),
    )
