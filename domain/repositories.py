from __future__ import annotations

from typing import List, Optional, Protocol

from .models import Entry, User


class LedgerStore(Protocol):
    """
    Abstraction over ledger persistence.

    Implementations are responsible for:
    - Mapping between database rows and the `User` / `Entry` domain models.
    - Hiding any SQL / driver details from the application layer.
    - Re-raising every driver failure as `domain.errors.StorageError`.
    """

    def find_or_create_user(
        self,
        external_user_id: str,
        username: Optional[str],
        first_name: Optional[str],
        last_name: Optional[str],
    ) -> User:
        """
        Return the user bound to `external_user_id`, creating it if needed.

        An existing user is returned unchanged. Two concurrent calls for the
        same new external ID must both end up with the same user.
        """

        ...

    def find_user_by_external(self, external_user_id: str) -> Optional[User]:
        """Return the user mapped to the given external ID, if any."""

        ...

    def insert_entry(
        self,
        user_id: str,
        amount_cents: int,
        kind: str,
        reason: Optional[str],
    ) -> Entry:
        """Append a new entry for `user_id` and return it."""

        ...

    def sum_entries_for_user(self, user_id: str) -> int:
        """Return the sum of all entry amounts for the user (0 if none)."""

        ...

    def list_recent_entries(self, user_id: str, limit: int) -> List[Entry]:
        """Return at most `limit` entries for the user, newest first."""

        ...
