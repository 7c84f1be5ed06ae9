from __future__ import annotations

from domain.repositories import LedgerStore

_POSTGRES_SCHEMES = ("postgres://", "postgresql://")


def sqlite_path_from_url(database_url: str) -> str:
    """
    Accept both `sqlite:PATH` and `sqlite://PATH`; anything else is a path.
    """

    for prefix in ("sqlite://", "sqlite:"):
        if database_url.startswith(prefix):
            return database_url[len(prefix):]
    return database_url


def create_ledger_store(database_url: str) -> LedgerStore:
    """Pick the `LedgerStore` implementation matching the connection string."""

    if database_url.startswith(_POSTGRES_SCHEMES):
        # Imported lazily so SQLite deployments don't need a libpq at import time.
        from infrastructure.db.ledger_store_postgres import PostgresLedgerStore

        return PostgresLedgerStore(database_url)

    from infrastructure.db.ledger_store_sqlite import SqliteLedgerStore

    return SqliteLedgerStore(sqlite_path_from_url(database_url))
