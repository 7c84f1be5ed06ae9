from __future__ import annotations

import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional

from domain.errors import StorageError
from domain.models import Entry, User
from domain.repositories import LedgerStore

logger = logging.getLogger(__name__)

_SCHEMA = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    external_user_id TEXT NOT NULL UNIQUE,
    username TEXT,
    first_name TEXT,
    last_name TEXT,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL REFERENCES users(id),
    amount_cents INTEGER NOT NULL,
    kind TEXT NOT NULL CHECK (kind IN ('save', 'adjust')),
    reason TEXT,
    created_at TEXT NOT NULL,
    CHECK (
        (kind = 'save' AND amount_cents > 0)
        OR (kind = 'adjust' AND amount_cents <> 0)
    )
);

CREATE INDEX IF NOT EXISTS idx_entries_user ON entries(user_id);
"""

_USER_COLUMNS = "id, external_user_id, username, first_name, last_name, created_at"
_ENTRY_COLUMNS = "id, user_id, amount_cents, kind, reason, created_at"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SqliteLedgerStore(LedgerStore):
    """
    SQLite-backed implementation of `LedgerStore`.

    Owns the `users` and `entries` tables and is self-initialising. A fresh
    connection is opened for every operation and closed when it finishes,
    so instances can be shared between handler threads.
    """

    def __init__(self, db_path: str) -> None:
        if db_path in ("", ":memory:"):
            raise ValueError("SqliteLedgerStore needs a database file path.")
        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot open database {self._db_path}: {exc}") from exc

        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            with conn:
                yield conn
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            conn.executescript(_SCHEMA)
        logger.debug("SQLite ledger schema ready at %s", self._db_path)

    @staticmethod
    def _to_user(row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            external_user_id=row["external_user_id"],
            username=row["username"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    @staticmethod
    def _to_entry(row: sqlite3.Row) -> Entry:
        return Entry(
            id=int(row["id"]),
            user_id=row["user_id"],
            amount_cents=int(row["amount_cents"]),
            kind=row["kind"],
            reason=row["reason"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _select_user(self, conn: sqlite3.Connection, external_user_id: str) -> Optional[User]:
        row = conn.execute(
            f"SELECT {_USER_COLUMNS} FROM users WHERE external_user_id = ?",
            (external_user_id,),
        ).fetchone()
        if not row:
            return None
        return self._to_user(row)

    def find_or_create_user(
        self,
        external_user_id: str,
        username: Optional[str],
        first_name: Optional[str],
        last_name: Optional[str],
    ) -> User:
        with self._connection() as conn:
            existing = self._select_user(conn, external_user_id)
            if existing is not None:
                return existing

            # A concurrent /start may have inserted the row since the SELECT;
            # the UNIQUE constraint makes this a no-op and we read the winner.
            conn.execute(
                f"""
                INSERT OR IGNORE INTO users ({_USER_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    str(uuid.uuid4()),
                    external_user_id,
                    username,
                    first_name,
                    last_name,
                    _utcnow().isoformat(),
                ),
            )
            user = self._select_user(conn, external_user_id)

        if user is None:
            raise StorageError(f"User {external_user_id} vanished after insert")
        return user

    def find_user_by_external(self, external_user_id: str) -> Optional[User]:
        with self._connection() as conn:
            return self._select_user(conn, external_user_id)

    def insert_entry(
        self,
        user_id: str,
        amount_cents: int,
        kind: str,
        reason: Optional[str],
    ) -> Entry:
        created_at = _utcnow()
        with self._connection() as conn:
            cur = conn.execute(
                """
                INSERT INTO entries (user_id, amount_cents, kind, reason, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (user_id, amount_cents, kind, reason, created_at.isoformat()),
            )
            entry_id = cur.lastrowid

        return Entry(
            id=int(entry_id),
            user_id=user_id,
            amount_cents=amount_cents,
            kind=kind,
            reason=reason,
            created_at=created_at,
        )

    def sum_entries_for_user(self, user_id: str) -> int:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT COALESCE(SUM(amount_cents), 0) FROM entries WHERE user_id = ?",
                (user_id,),
            ).fetchone()
            return int(row[0])

    def list_recent_entries(self, user_id: str, limit: int) -> List[Entry]:
        with self._connection() as conn:
            rows = conn.execute(
                f"""
                SELECT {_ENTRY_COLUMNS}
                FROM entries
                WHERE user_id = ?
                ORDER BY id DESC
                LIMIT ?
                """,
                (user_id, limit),
            ).fetchall()
            return [self._to_entry(row) for row in rows]
