import uuid
from datetime import datetime, timedelta, timezone

from domain.errors import StorageError
from domain.models import Entry, User
from domain.repositories import LedgerStore


class InMemoryLedgerStore(LedgerStore):
    def __init__(self):
        self.users = {}
        self.entries = []
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def _tick(self):
        self._clock += timedelta(minutes=1)
        return self._clock

    def find_or_create_user(self, external_user_id, username, first_name, last_name):
        if external_user_id not in self.users:
            self.users[external_user_id] = User(
                id=str(uuid.uuid4()),
                external_user_id=external_user_id,
                username=username,
                first_name=first_name,
                last_name=last_name,
                created_at=self._tick(),
            )
        return self.users[external_user_id]

    def find_user_by_external(self, external_user_id):
        return self.users.get(external_user_id)

    def insert_entry(self, user_id, amount_cents, kind, reason):
        entry = Entry(
            id=len(self.entries) + 1,
            user_id=user_id,
            amount_cents=amount_cents,
            kind=kind,
            reason=reason,
            created_at=self._tick(),
        )
        self.entries.append(entry)
        return entry

    def sum_entries_for_user(self, user_id):
        return sum(e.amount_cents for e in self.entries if e.user_id == user_id)

    def list_recent_entries(self, user_id, limit):
        mine = [e for e in self.entries if e.user_id == user_id]
        return list(reversed(mine))[:limit]


class BrokenLedgerStore(InMemoryLedgerStore):
    """Registers users fine but fails every ledger read or write."""

    def insert_entry(self, user_id, amount_cents, kind, reason):
        raise StorageError("disk I/O error")

    def sum_entries_for_user(self, user_id):
        raise StorageError("disk I/O error")

    def list_recent_entries(self, user_id, limit):
        raise StorageError("disk I/O error")
