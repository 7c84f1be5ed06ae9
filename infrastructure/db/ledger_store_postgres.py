from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Iterator, List, Optional

import psycopg2

from domain.errors import StorageError
from domain.models import Entry, User
from domain.repositories import LedgerStore

logger = logging.getLogger(__name__)

_USER_COLUMNS = "id, external_user_id, username, first_name, last_name, created_at"
_ENTRY_COLUMNS = "id, user_id, amount_cents, kind, reason, created_at"


class PostgresLedgerStore(LedgerStore):
    """
    Postgres-backed implementation of `LedgerStore`.

    Uses the same two-table layout as the SQLite store, expressed in the
    Postgres dialect (BIGSERIAL ids, TIMESTAMPTZ timestamps filled in by the
    server).
    """

    def __init__(self, dsn: str) -> None:
        self._dsn = dsn
        self._ensure_tables()

    @contextmanager
    def _connection(self) -> Iterator["psycopg2.extensions.connection"]:
        try:
            conn = psycopg2.connect(self._dsn)
        except psycopg2.Error as exc:
            raise StorageError(f"Cannot connect to Postgres: {exc}") from exc

        try:
            # Commits on success, rolls back on error; does not close.
            with conn:
                yield conn
        except psycopg2.Error as exc:
            raise StorageError(str(exc)) from exc
        finally:
            conn.close()

    def _ensure_tables(self) -> None:
        with self._connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS users (
                        id TEXT PRIMARY KEY,
                        external_user_id TEXT NOT NULL UNIQUE,
                        username TEXT,
                        first_name TEXT,
                        last_name TEXT,
                        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
                    )
                    """
                )
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS entries (
                        id BIGSERIAL PRIMARY KEY,
                        user_id TEXT NOT NULL REFERENCES users(id),
                        amount_cents BIGINT NOT NULL,
                        kind TEXT NOT NULL CHECK (kind IN ('save', 'adjust')),
                        reason TEXT,
                        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                        CHECK (
                            (kind = 'save' AND amount_cents > 0)
                            OR (kind = 'adjust' AND amount_cents <> 0)
                        )
                    )
                    """
                )
                cur.execute(
                    "CREATE INDEX IF NOT EXISTS idx_entries_user ON entries(user_id)"
                )
        logger.debug("Postgres ledger schema ready")

    @staticmethod
    def _to_user(row: tuple) -> User:
        return User(
            id=str(row[0]),
            external_user_id=row[1],
            username=row[2],
            first_name=row[3],
            last_name=row[4],
            created_at=row[5],
        )

    @staticmethod
    def _to_entry(row: tuple) -> Entry:
        return Entry(
            id=int(row[0]),
            user_id=str(row[1]),
            amount_cents=int(row[2]),
            kind=row[3],
            reason=row[4],
            created_at=row[5],
        )

    def _select_user(self, cur, external_user_id: str) -> Optional[User]:
        cur.execute(
            f"SELECT {_USER_COLUMNS} FROM users WHERE external_user_id = %s",
            (external_user_id,),
        )
        row = cur.fetchone()
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
            with conn.cursor() as cur:
                existing = self._select_user(cur, external_user_id)
                if existing is not None:
                    return existing

                cur.execute(
                    """
                    INSERT INTO users (id, external_user_id, username, first_name, last_name)
                    VALUES (%s, %s, %s, %s, %s)
                    ON CONFLICT (external_user_id) DO NOTHING
                    """,
                    (str(uuid.uuid4()), external_user_id, username, first_name, last_name),
                )
                user = self._select_user(cur, external_user_id)

        if user is None:
            raise StorageError(f"User {external_user_id} vanished after insert")
        return user

    def find_user_by_external(self, external_user_id: str) -> Optional[User]:
        with self._connection() as conn:
            with conn.cursor() as cur:
                return self._select_user(cur, external_user_id)

    def insert_entry(
        self,
        user_id: str,
        amount_cents: int,
        kind: str,
        reason: Optional[str],
    ) -> Entry:
        with self._connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    INSERT INTO entries (user_id, amount_cents, kind, reason)
                    VALUES (%s, %s, %s, %s)
                    RETURNING {_ENTRY_COLUMNS}
                    """,
                    (user_id, amount_cents, kind, reason),
                )
                return self._to_entry(cur.fetchone())

    def sum_entries_for_user(self, user_id: str) -> int:
        with self._connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT COALESCE(SUM(amount_cents), 0) FROM entries WHERE user_id = %s",
                    (user_id,),
                )
                return int(cur.fetchone()[0])

    def list_recent_entries(self, user_id: str, limit: int) -> List[Entry]:
        with self._connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    SELECT {_ENTRY_COLUMNS}
                    FROM entries
                    WHERE user_id = %s
                    ORDER BY id DESC
                    LIMIT %s
                    """,
                    (user_id, limit),
                )
                return [self._to_entry(row) for row in cur.fetchall()]
